"""Integrity verification and stream-level repair of .xz data.

``verify`` decodes everything (concatenated streams accepted) and throws
the output away; only the final status matters. ``repair`` keeps the
output and, after a data or format error, restarts at the next stream
magic so later intact streams are not lost with the damaged one.
"""

import logging
import lzma
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..analysis.classifier import as_byte_view
from ..codec.xz import XZ_MAGIC, CodecStatus, StreamDecoder
from ..config import KIB
from ..loaders import PathLike, file_size

logger = logging.getLogger(__name__)

VERIFY_OUTPUT_BUDGET = 1024 * KIB


class IntegrityStatus(Enum):
    OK = "ok"
    CORRUPTED = "corrupted"
    ERROR = "error"
    UNKNOWN = "unknown"


@dataclass
class RepairResult:
    """Output of a repair run."""
    ok: bool
    data: bytes = b""
    streams_recovered: int = 0
    resyncs: int = 0
    skipped_bytes: int = 0
    status: Optional[CodecStatus] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "recovered_bytes": len(self.data),
            "streams_recovered": self.streams_recovered,
            "resyncs": self.resyncs,
            "skipped_bytes": self.skipped_bytes,
            "status": self.status.value if self.status else None,
            "error": self.error,
        }


def _drain(decoder: StreamDecoder, chunk=b"", finish: bool = False) -> CodecStatus:
    # Decode with a bounded output budget, discarding the output.
    step = decoder.feed(chunk, VERIFY_OUTPUT_BUDGET, finish=finish)
    while step.status is CodecStatus.OUTPUT_FULL:
        step = decoder.feed(b"", VERIFY_OUTPUT_BUDGET, finish=finish)
    return step.status


def _verify_bytes(data: bytes) -> IntegrityStatus:
    if not data:
        return IntegrityStatus.ERROR
    try:
        decoder = StreamDecoder(tolerant=True)
    except (MemoryError, lzma.LZMAError) as exc:
        logger.warning("Could not initialize the decoder: %s", exc)
        return IntegrityStatus.ERROR

    # One feed: rebuilding a stream without checks needs its index and footer
    status = _drain(decoder, data)
    if status.is_error:
        return _status_for(status)
    return _status_for(_drain(decoder, finish=True))


def _status_for(status: CodecStatus) -> IntegrityStatus:
    if status is CodecStatus.END_OF_STREAM:
        return IntegrityStatus.OK
    if status is CodecStatus.MEMORY_ERROR:
        return IntegrityStatus.ERROR
    return IntegrityStatus.CORRUPTED


def verify(stream) -> IntegrityStatus:
    """Check that ``stream`` decodes cleanly to the end.

    Block integrity checks are not enforced; damage to the compressed data
    still shows up as a data error.

    Returns:
        OK on a clean end of stream, CORRUPTED on a data or format error or
        truncation, ERROR for empty input or when decoding cannot start.
    """
    return _verify_bytes(as_byte_view(stream).tobytes())


def verify_file(path: PathLike) -> IntegrityStatus:
    """Like ``verify`` for a file. Unreadable file -> ERROR."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return IntegrityStatus.ERROR
    return _verify_bytes(raw)


def repair(stream) -> RepairResult:
    """Salvage every decodable stream from damaged .xz data.

    Decoding starts at the first stream magic. After a data or format error
    the partial output is kept and decoding restarts at the next magic.
    Bytes outside any stream (padding, garbage) are skipped.

    Returns:
        RepairResult; ``ok`` when the last stream decoded ended cleanly.
    """
    data = as_byte_view(stream).tobytes()
    result = RepairResult(ok=False)
    parts = []
    pos = 0

    while pos < len(data):
        start = data.find(XZ_MAGIC, pos)
        if start < 0:
            result.skipped_bytes += len(data) - pos
            break
        result.skipped_bytes += start - pos

        try:
            decoder = StreamDecoder(tolerant=False, ignore_check=True)
        except (MemoryError, lzma.LZMAError) as exc:
            result.status = CodecStatus.MEMORY_ERROR if isinstance(exc, MemoryError) else CodecStatus.FATAL_ERROR
            result.error = str(exc) or "out of memory"
            break

        step = decoder.feed(data[start:], finish=True)
        parts.append(step.output)
        result.status = step.status

        if step.status is CodecStatus.END_OF_STREAM:
            result.streams_recovered += 1
            result.ok = True
            pos = start + step.consumed
            continue

        result.ok = False
        result.error = step.error
        if step.status is CodecStatus.MEMORY_ERROR:
            break
        result.resyncs += 1
        pos = start + 1

    result.data = b"".join(parts)
    if result.status is None:
        result.error = "no .xz stream found"
    logger.debug(
        "Repair kept %d bytes from %d stream(s), %d resync(s)",
        len(result.data), result.streams_recovered, result.resyncs,
    )
    return result


def repair_file(corrupted_path: PathLike, output_path: PathLike) -> RepairResult:
    """Run ``repair`` on a file and write the salvaged bytes to ``output_path``."""
    try:
        with open(corrupted_path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        logger.warning("Cannot read %s: %s", corrupted_path, exc)
        return RepairResult(ok=False, error=str(exc))

    result = repair(raw)
    try:
        with open(output_path, "wb") as f:
            f.write(result.data)
    except OSError as exc:
        logger.warning("Cannot write %s: %s", output_path, exc)
        result.ok = False
        result.error = str(exc)
    return result


def integrity_report(path: PathLike) -> dict:
    """Verification summary for a file, ready for text or JSON output."""
    status = verify_file(path)
    try:
        size = file_size(path)
    except OSError:
        size = 0
    return {
        "file": str(path),
        "size": size,
        "integrity": status.value,
        "ok": status is IntegrityStatus.OK,
    }
