"""Thin adapter over liblzma (Python's ``lzma`` module).

Everything else in the package reaches the codec through this module:

    result = encode(data, preset=6)                # one-shot .xz stream
    result = decode(result.data, tolerant=True)    # one-shot decode

    decoder = StreamDecoder(tolerant=True)         # chunked decode
    for chunk in chunks:
        step = decoder.feed(chunk, max_output=65536)
        sink(step.output)
    sink(decoder.feed(b"", finish=True).output)

Codec failures never raise. They come back as a CodecStatus on the result,
with MEMORY_ERROR kept apart from ordinary data errors.

Tolerant mode accepts concatenated streams (and the NUL padding allowed
between them) and ignores block integrity checks. ``lzma`` does not expose
liblzma's "ignore check" flag, so after a data error the stream is rebuilt
without its check fields (see ``container.strip_checks``) and decoded
again; output already returned is not repeated. Damage inside the
compressed data still ends decoding with FATAL_ERROR, and the output
produced before it is kept.
"""

import logging
import lzma
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .container import XZ_MAGIC, strip_checks

logger = logging.getLogger(__name__)

MIN_PRESET = 0
MAX_PRESET = 9
DEFAULT_PRESET = 6

# lzma drops the output of a call that raises, so each liblzma call inside
# StreamDecoder.feed takes at most DECODE_SLICE input bytes and returns at
# most DECODE_STEP output bytes.
DECODE_SLICE = 4 * 1024
DECODE_STEP = 16 * 1024

CHECKS = {
    "none": lzma.CHECK_NONE,
    "crc32": lzma.CHECK_CRC32,
    "crc64": lzma.CHECK_CRC64,
    "sha256": lzma.CHECK_SHA256,
}


class CodecStatus(Enum):
    """Outcome of a codec call."""

    CONTINUE = "continue"
    END_OF_STREAM = "end_of_stream"
    OUTPUT_FULL = "output_full"
    RECOVERABLE_ERROR = "recoverable_error"
    FATAL_ERROR = "fatal_error"
    MEMORY_ERROR = "memory_error"

    @property
    def is_error(self) -> bool:
        return self in (
            CodecStatus.RECOVERABLE_ERROR,
            CodecStatus.FATAL_ERROR,
            CodecStatus.MEMORY_ERROR,
        )


class FilterId(Enum):
    """Filters that may appear in a filter chain."""

    LZMA2 = lzma.FILTER_LZMA2
    X86 = lzma.FILTER_X86
    ARM = lzma.FILTER_ARM
    ARMTHUMB = lzma.FILTER_ARMTHUMB
    POWERPC = lzma.FILTER_POWERPC
    IA64 = lzma.FILTER_IA64
    SPARC = lzma.FILTER_SPARC
    DELTA = lzma.FILTER_DELTA


@dataclass
class CodecResult:
    """Result of a one-shot encode or decode."""
    data: bytes
    status: CodecStatus
    error: Optional[str] = None
    streams: int = 0

    @property
    def ok(self) -> bool:
        return self.status is CodecStatus.END_OF_STREAM


@dataclass
class DecodeStep:
    """Result of feeding one chunk to a StreamDecoder."""
    output: bytes
    consumed: int
    status: CodecStatus
    error: Optional[str] = None


def hardware_threads() -> int:
    """Number of hardware threads, never less than 1."""
    return max(os.cpu_count() or 1, 1)


def resolve_check(check) -> int:
    """Map a check name ('crc32', ...) or lzma constant to the lzma constant."""
    if isinstance(check, str):
        try:
            return CHECKS[check.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown integrity check: {check!r}. Choose from: {sorted(CHECKS)}"
            ) from None
    return int(check)


def build_filter_chain(
    filters: Sequence[FilterId],
    preset: int = DEFAULT_PRESET,
    dict_size: int = 0,
) -> list[dict]:
    """Render a filter chain as the list of filter specs ``lzma`` expects.

    LZMA2 always terminates the chain and carries the preset (and the
    dictionary size when one is given). A chain without LZMA2 gets it
    appended.
    """
    chain = []
    for filter_id in filters:
        if filter_id is FilterId.LZMA2:
            continue
        chain.append({"id": filter_id.value})
    lzma2 = {"id": lzma.FILTER_LZMA2, "preset": preset}
    if dict_size > 0:
        lzma2["dict_size"] = dict_size
    chain.append(lzma2)
    return chain


def encode(
    data,
    preset: int = DEFAULT_PRESET,
    filters: Optional[Sequence[FilterId]] = None,
    check="crc64",
    dict_size: int = 0,
) -> CodecResult:
    """Compress ``data`` into a single .xz stream.

    Args:
        data: Bytes-like input.
        preset: Effort level 0-9.
        filters: Optional filter chain; LZMA2 is appended when missing.
        check: Integrity check name or lzma CHECK_* constant.
        dict_size: LZMA2 dictionary size in bytes (0 = preset default).

    Returns:
        CodecResult with status END_OF_STREAM on success.
    """
    if not MIN_PRESET <= preset <= MAX_PRESET:
        raise ValueError(f"Preset must be in [{MIN_PRESET}, {MAX_PRESET}], got {preset}")
    check_id = resolve_check(check)

    try:
        if filters or dict_size > 0:
            chain = build_filter_chain(filters or (), preset, dict_size)
            compressed = lzma.compress(
                bytes(data), format=lzma.FORMAT_XZ, check=check_id, filters=chain,
            )
        else:
            compressed = lzma.compress(
                bytes(data), format=lzma.FORMAT_XZ, check=check_id, preset=preset,
            )
    except MemoryError:
        logger.warning("Out of memory encoding %d bytes at preset %d", len(data), preset)
        return CodecResult(b"", CodecStatus.MEMORY_ERROR, "out of memory")
    except lzma.LZMAError as exc:
        logger.debug("Encode failed at preset %d: %s", preset, exc)
        return CodecResult(b"", CodecStatus.FATAL_ERROR, str(exc))

    return CodecResult(compressed, CodecStatus.END_OF_STREAM, streams=1)


class StreamEncoder:
    """Incremental single-stream .xz encoder.

    Unlike ``encode`` this raises: ``lzma.LZMAError`` for a codec failure
    and ``MemoryError`` when the encoder state cannot be allocated.
    """

    def __init__(self, preset: int = DEFAULT_PRESET, check="crc64"):
        if not MIN_PRESET <= preset <= MAX_PRESET:
            raise ValueError(f"Preset must be in [{MIN_PRESET}, {MAX_PRESET}], got {preset}")
        self.preset = preset
        self.total_in = 0
        self.total_out = 0
        self._encoder = lzma.LZMACompressor(
            format=lzma.FORMAT_XZ, check=resolve_check(check), preset=preset,
        )

    def feed(self, chunk) -> bytes:
        out = self._encoder.compress(bytes(chunk))
        self.total_in += len(chunk)
        self.total_out += len(out)
        return out

    def finish(self) -> bytes:
        """Flush the encoder and close the stream."""
        out = self._encoder.flush()
        self.total_out += len(out)
        return out


class StreamDecoder:
    """Incremental .xz decoder with explicit input/output accounting.

    Each ``feed`` call accepts a chunk of compressed input and an optional
    output budget and reports how many input bytes were taken, the output
    produced and a CodecStatus. Pass ``finish=True`` once the input is
    exhausted so truncation can be told apart from "needs more input".
    """

    def __init__(self, tolerant: bool = False, memlimit: Optional[int] = None,
                 ignore_check: Optional[bool] = None):
        """Initialize the decoder.

        Args:
            tolerant: Accept concatenated streams and the padding between them.
            memlimit: Optional decoder memory limit in bytes.
            ignore_check: Ignore block integrity checks (default: ``tolerant``).

        Raises:
            lzma.LZMAError: The decoder cannot be initialized.
            MemoryError: Not enough memory for the decoder state.
        """
        self.tolerant = tolerant
        self.memlimit = memlimit
        self.ignore_check = tolerant if ignore_check is None else ignore_check
        self.streams_completed = 0
        self.total_in = 0
        self.total_out = 0
        self.trailing = b""
        self._pending = b""
        self._done = False
        self._decoder: Optional[lzma.LZMADecompressor] = None
        self._start_stream()

    def _start_stream(self):
        self._decoder = lzma.LZMADecompressor(format=lzma.FORMAT_XZ, memlimit=self.memlimit)
        # Input of the current stream, kept for a decode without checks
        self._stream_input = bytearray()
        self._stream_out = 0
        self._discard = 0
        self._checks_stripped = False

    def _restart_without_checks(self, rest: bytes) -> Optional[bytes]:
        """Swap in a decoder for the current stream rebuilt without checks.

        Returns the input to continue with, or None when the stream cannot
        be rebuilt.
        """
        if not self.ignore_check or self._checks_stripped:
            return None
        original = bytes(self._stream_input) + rest
        stripped = strip_checks(original)
        if stripped is None:
            return None
        rebuilt, stream_length = stripped
        emitted = self._stream_out
        self._start_stream()
        self._checks_stripped = True
        self._stream_out = emitted
        self._discard = emitted
        logger.debug("Retrying a %d-byte stream without integrity checks", stream_length)
        return rebuilt + original[stream_length:]

    @property
    def done(self) -> bool:
        return self._done

    def feed(self, chunk=b"", max_output: int = -1, finish: bool = False) -> DecodeStep:
        """Decode one chunk.

        Args:
            chunk: Compressed bytes (may be empty to drain pending output).
            max_output: Output budget for this call (-1 = unlimited).
            finish: No more input will follow.

        Returns:
            DecodeStep with the output and status of this call.
        """
        if self._done:
            return DecodeStep(b"", 0, CodecStatus.END_OF_STREAM)

        data = bytes(chunk)
        buf = self._pending + data
        self._pending = b""
        consumed = len(data)
        parts = []
        produced = 0
        error = None

        try:
            while True:
                if self._decoder is None:
                    # Between concatenated streams
                    buf = buf.lstrip(b"\x00")
                    if not buf:
                        if finish:
                            self._done = True
                            status = CodecStatus.END_OF_STREAM
                        else:
                            status = CodecStatus.CONTINUE
                        break
                    self._start_stream()

                if self._decoder.needs_input and not buf:
                    if finish:
                        status = CodecStatus.RECOVERABLE_ERROR
                        error = "compressed data ended before the end-of-stream marker"
                    else:
                        status = CodecStatus.CONTINUE
                    break

                step = DECODE_STEP
                if max_output >= 0:
                    budget = max_output - produced
                    if budget <= 0:
                        self._pending = buf
                        status = CodecStatus.OUTPUT_FULL
                        break
                    step = min(step, budget)

                if self._decoder.needs_input:
                    piece_in, buf = buf[:DECODE_SLICE], buf[DECODE_SLICE:]
                    if self.ignore_check and not self._checks_stripped:
                        self._stream_input += piece_in
                else:
                    piece_in = b""

                try:
                    piece = self._decoder.decompress(piece_in, step)
                except lzma.LZMAError:
                    retry = self._restart_without_checks(buf)
                    if retry is None:
                        raise
                    buf = retry
                    continue

                if self._discard:
                    # Already returned before the checks were stripped
                    cut = min(self._discard, len(piece))
                    piece = piece[cut:]
                    self._discard -= cut
                self._stream_out += len(piece)
                parts.append(piece)
                produced += len(piece)

                if self._decoder.eof:
                    self.streams_completed += 1
                    tail = self._decoder.unused_data + buf
                    self._decoder = None
                    self._stream_input = bytearray()
                    if not self.tolerant:
                        self._done = True
                        self.trailing = tail
                        consumed = max(consumed - len(tail), 0)
                        status = CodecStatus.END_OF_STREAM
                        break
                    buf = tail
        except MemoryError:
            self._done = True
            status = CodecStatus.MEMORY_ERROR
            error = "out of memory"
        except (lzma.LZMAError, EOFError) as exc:
            self._done = True
            status = CodecStatus.FATAL_ERROR
            error = str(exc)

        output = b"".join(parts)
        self.total_in += consumed
        self.total_out += len(output)
        if error is not None:
            logger.debug("Decode stopped after %d bytes out: %s", self.total_out, error)
        return DecodeStep(output, consumed, status, error)


def decode(stream, tolerant: bool = False, max_output: Optional[int] = None) -> CodecResult:
    """Decode a complete .xz buffer in one call.

    Args:
        stream: Compressed bytes.
        tolerant: Accept concatenated streams and ignore integrity checks.
        max_output: Output cap in bytes (None = unlimited).

    Returns:
        CodecResult. The data holds whatever was decoded before any error.
    """
    try:
        decoder = StreamDecoder(tolerant=tolerant)
    except MemoryError:
        return CodecResult(b"", CodecStatus.MEMORY_ERROR, "out of memory")
    except lzma.LZMAError as exc:
        return CodecResult(b"", CodecStatus.FATAL_ERROR, str(exc))

    step = decoder.feed(stream, -1 if max_output is None else max_output, finish=True)
    return CodecResult(step.output, step.status, step.error, streams=decoder.streams_completed)
