"""Timing and size measurements for compression runs.

Keeps the most recent measurement only (a snapshot, not a history) on the
session context:

    analytics = Analytics(ctx)
    with analytics.measure_compression() as m:
        out = encode(data).data
        m.record(len(data), len(out))
    analytics.snapshot().ratio

Every recording method is a no-op while analytics is disabled.
"""

import time
from contextlib import contextmanager
from dataclasses import replace
from typing import Optional

from ..config import MIB
from ..context import AdvisorContext, AnalyticsSnapshot, AnalyticsState


class _Measurement:
    """Sizes collected inside a ``measure_*`` block."""

    def __init__(self):
        self.uncompressed: Optional[int] = None
        self.compressed: Optional[int] = None

    def record(self, uncompressed: int, compressed: int = 0):
        self.uncompressed = uncompressed
        self.compressed = compressed


class Analytics:
    """Compression analytics bound to an AdvisorContext."""

    def __init__(self, context: Optional[AdvisorContext] = None):
        self.context = context or AdvisorContext()

    @property
    def _state(self) -> AnalyticsState:
        return self.context.analytics

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    def enable(self, enabled: bool = True):
        self._state.enabled = enabled

    def reset(self):
        """Zero the snapshot and forget pending start times."""
        self.context.analytics = AnalyticsState(enabled=self._state.enabled)

    def compress_start(self):
        if not self.enabled:
            return
        self._state.compress_started = time.perf_counter()

    def compress_end(self, uncompressed: int, compressed: int):
        """Record a finished compression and its sizes."""
        if not self.enabled:
            return
        snap = self._state.snapshot
        snap.compression_time = self._elapsed_since(self._state.compress_started)
        snap.uncompressed_size = uncompressed
        snap.compressed_size = compressed
        if uncompressed > 0:
            snap.ratio = compressed / uncompressed
        self._state.compress_started = None

    def decompress_start(self):
        if not self.enabled:
            return
        self._state.decompress_started = time.perf_counter()

    def decompress_end(self, uncompressed: int):
        if not self.enabled:
            return
        snap = self._state.snapshot
        snap.decompression_time = self._elapsed_since(self._state.decompress_started)
        snap.uncompressed_size = uncompressed
        self._state.decompress_started = None

    def record_resources(self, blocks: int = 0, memory_used: int = 0, threads: int = 0):
        """Attach block count, memory (bytes) and thread count to the snapshot."""
        if not self.enabled:
            return
        snap = self._state.snapshot
        snap.blocks_count = blocks
        snap.memory_used = memory_used
        snap.threads_used = threads

    @staticmethod
    def _elapsed_since(started: Optional[float]) -> float:
        if started is None:
            return 0.0
        return max(time.perf_counter() - started, 0.0)

    @contextmanager
    def measure_compression(self):
        """Bracket a compression; call ``record(uncompressed, compressed)`` inside."""
        measurement = _Measurement()
        self.compress_start()
        try:
            yield measurement
            if measurement.uncompressed is not None:
                self.compress_end(measurement.uncompressed, measurement.compressed or 0)
        finally:
            self._state.compress_started = None

    @contextmanager
    def measure_decompression(self):
        """Bracket a decompression; call ``record(uncompressed)`` inside."""
        measurement = _Measurement()
        self.decompress_start()
        try:
            yield measurement
            if measurement.uncompressed is not None:
                self.decompress_end(measurement.uncompressed)
        finally:
            self._state.decompress_started = None

    def snapshot(self) -> AnalyticsSnapshot:
        """Copy of the current snapshot."""
        return replace(self._state.snapshot)

    def as_dict(self) -> dict:
        snap = self._state.snapshot
        return {
            "uncompressed_size": snap.uncompressed_size,
            "compressed_size": snap.compressed_size,
            "ratio": round(snap.ratio, 4),
            "compression_time": round(snap.compression_time, 6),
            "decompression_time": round(snap.decompression_time, 6),
            "blocks": snap.blocks_count,
            "memory_mb": snap.memory_used // MIB,
            "threads": snap.threads_used,
        }
