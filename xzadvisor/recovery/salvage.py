"""Salvage of corrupted .xz data.

Each attempt runs the tolerant decoder (concatenated streams accepted) over
a corrupted block and keeps whatever it produces. How much partial output
counts as a success depends on the recovery mode:

    NONE        only a clean end of stream (or a full output buffer)
    PARTIAL     also any non-empty output that ended in an error
    AGGRESSIVE  as PARTIAL; file recovery skips failed chunks and continues
    MAXIMUM     as AGGRESSIVE

Every attempt updates the RecoveryStatistics on the session context.
The recovery rate is always recovered_blocks / corrupted_blocks.
"""

import logging
import lzma
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional

from ..codec.xz import CodecStatus, StreamDecoder
from ..context import AdvisorContext, RecoveryStatistics
from ..loaders import PathLike

logger = logging.getLogger(__name__)


class RecoveryMode(IntEnum):
    """Willingness to accept partial or skipped data, in increasing order."""

    NONE = 0
    PARTIAL = 1
    AGGRESSIVE = 2
    MAXIMUM = 3

    @classmethod
    def parse(cls, value) -> "RecoveryMode":
        """Accept a RecoveryMode, its integer value or a name like 'aggressive'."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            names = ", ".join(m.name.lower() for m in cls)
            raise ValueError(f"Unknown recovery mode: {value!r}. Choose from: {names}") from None


@dataclass
class RecoveryAttempt:
    """Outcome of one recovery attempt."""
    ok: bool
    data: bytes
    status: CodecStatus
    mode: RecoveryMode
    error: Optional[str] = None

    @property
    def recovered_bytes(self) -> int:
        return len(self.data)


@dataclass
class RecoveryReport:
    """Outcome of recovering a whole file."""
    ok: bool = False
    recovered_bytes: int = 0
    chunks_processed: int = 0
    chunks_recovered: int = 0
    chunks_skipped: int = 0
    status: Optional[CodecStatus] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "recovered_bytes": self.recovered_bytes,
            "chunks_processed": self.chunks_processed,
            "chunks_recovered": self.chunks_recovered,
            "chunks_skipped": self.chunks_skipped,
            "status": self.status.value if self.status else None,
            "error": self.error,
        }


def recovery_rate(stats: RecoveryStatistics) -> float:
    if stats.corrupted_blocks == 0:
        return 0.0
    return stats.recovered_blocks / stats.corrupted_blocks


class RecoveryEngine:
    """Tolerant-decode salvage with statistics kept on the context."""

    def __init__(self, context: Optional[AdvisorContext] = None, default_mode=None):
        """Initialize the engine.

        Args:
            context: Session context holding the statistics.
            default_mode: Mode used when an attempt passes ``mode=None``
                (default: the configured default, normally PARTIAL).
        """
        self.context = context or AdvisorContext()
        if default_mode is None:
            default_mode = self.context.config.default_recovery_mode
        self.default_mode = RecoveryMode.parse(default_mode)

    def set_mode(self, mode):
        self.default_mode = RecoveryMode.parse(mode)

    def _resolve_mode(self, mode) -> RecoveryMode:
        return self.default_mode if mode is None else RecoveryMode.parse(mode)

    def attempt(self, data, mode=None, max_output: Optional[int] = None) -> RecoveryAttempt:
        """Decode as much of a corrupted block as possible.

        Args:
            data: Corrupted compressed bytes.
            mode: RecoveryMode (None = engine default).
            max_output: Output cap in bytes (None = unlimited).

        Returns:
            RecoveryAttempt. ``ok`` is True when the block counts as recovered.
        """
        use_mode = self._resolve_mode(mode)
        stats = self.context.recovery
        stats.corrupted_blocks += 1

        try:
            decoder = StreamDecoder(tolerant=True)
        except MemoryError:
            return self._skip(use_mode, CodecStatus.MEMORY_ERROR, "out of memory")
        except lzma.LZMAError as exc:
            return self._skip(use_mode, CodecStatus.FATAL_ERROR, str(exc))

        step = decoder.feed(data, -1 if max_output is None else max_output, finish=True)
        recovered = len(step.output)

        clean = step.status in (CodecStatus.END_OF_STREAM, CodecStatus.OUTPUT_FULL)
        partial = (
            use_mode >= RecoveryMode.PARTIAL
            and recovered > 0
            and step.status is not CodecStatus.MEMORY_ERROR
        )
        if clean or partial:
            stats.recovered_blocks += 1
            stats.recovered_bytes += recovered
            stats.recovery_rate = recovery_rate(stats)
            return RecoveryAttempt(True, step.output, step.status, use_mode, step.error)

        return self._skip(use_mode, step.status, step.error)

    def _skip(self, mode: RecoveryMode, status: CodecStatus, error: Optional[str]) -> RecoveryAttempt:
        stats = self.context.recovery
        stats.skipped_blocks += 1
        stats.recovery_rate = recovery_rate(stats)
        if status is CodecStatus.MEMORY_ERROR:
            logger.warning("Recovery attempt ran out of memory")
        return RecoveryAttempt(False, b"", status, mode, error)

    def recover_file(self, corrupted_path: PathLike, output_path: PathLike, mode=None) -> RecoveryReport:
        """Recover a corrupted file chunk by chunk.

        The input is read in fixed-size chunks (64 KiB by default) and each
        chunk goes through ``attempt`` with the same output cap. Under
        AGGRESSIVE and MAXIMUM a failed chunk is skipped; under NONE and
        PARTIAL it ends the run. Running out of memory always ends the run.

        Returns:
            RecoveryReport; ``ok`` when any byte was recovered.
        """
        use_mode = self._resolve_mode(mode)
        chunk_size = self.context.config.recovery_chunk_size
        report = RecoveryReport()

        try:
            with open(corrupted_path, "rb") as src, open(output_path, "wb") as sink:
                while True:
                    chunk = src.read(chunk_size)
                    if not chunk:
                        break
                    report.chunks_processed += 1
                    result = self.attempt(chunk, use_mode, max_output=chunk_size)
                    report.status = result.status

                    if result.ok:
                        sink.write(result.data)
                        report.recovered_bytes += result.recovered_bytes
                        report.chunks_recovered += 1
                        continue

                    report.chunks_skipped += 1
                    report.error = result.error
                    if result.status is CodecStatus.MEMORY_ERROR:
                        break
                    if use_mode < RecoveryMode.AGGRESSIVE:
                        break
        except OSError as exc:
            logger.warning("Recovery of %s failed: %s", corrupted_path, exc)
            report.error = str(exc)
            return report

        report.ok = report.recovered_bytes > 0
        logger.debug(
            "Recovered %d bytes from %s (%d/%d chunks)",
            report.recovered_bytes, corrupted_path,
            report.chunks_recovered, report.chunks_processed,
        )
        return report

    def stats(self) -> RecoveryStatistics:
        """Copy of the statistics with the recovery rate filled in."""
        stats = replace(self.context.recovery)
        stats.recovery_rate = recovery_rate(stats)
        return stats

    def reset_stats(self):
        self.context.recovery = RecoveryStatistics()
