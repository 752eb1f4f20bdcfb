"""Codec subpackage: the only place that talks to liblzma."""

from .xz import (
    CHECKS,
    XZ_MAGIC,
    CodecResult,
    CodecStatus,
    DecodeStep,
    FilterId,
    StreamDecoder,
    StreamEncoder,
    build_filter_chain,
    decode,
    encode,
    hardware_threads,
)

__all__ = [
    "CHECKS",
    "XZ_MAGIC",
    "CodecResult",
    "CodecStatus",
    "DecodeStep",
    "FilterId",
    "StreamDecoder",
    "StreamEncoder",
    "build_filter_chain",
    "decode",
    "encode",
    "hardware_threads",
]
