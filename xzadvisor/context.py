"""Caller-owned session state.

Every counter and snapshot the advisor keeps between calls lives on an
AdvisorContext. Components take the context explicitly, so two sessions
never see each other's numbers:

    ctx = AdvisorContext()
    engine = RecoveryEngine(ctx)
    optimizer = PresetOptimizer(ctx)
    ...
    ctx.reset()

None of the counters are synchronized; give each concurrent caller its own
context.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .config import AdvisorConfig, ParallelConfig


@dataclass
class RecoveryStatistics:
    """Running totals over every recovery attempt."""
    corrupted_blocks: int = 0
    recovered_blocks: int = 0
    skipped_blocks: int = 0
    recovered_bytes: int = 0
    recovery_rate: float = 0.0


@dataclass
class AnalyticsSnapshot:
    """The last compression/decompression measurement (not a history)."""
    uncompressed_size: int = 0
    compressed_size: int = 0
    ratio: float = 0.0
    compression_time: float = 0.0
    decompression_time: float = 0.0
    blocks_count: int = 0
    memory_used: int = 0
    threads_used: int = 0


@dataclass
class AnalyticsState:
    enabled: bool = True
    snapshot: AnalyticsSnapshot = field(default_factory=AnalyticsSnapshot)
    compress_started: Optional[float] = None
    decompress_started: Optional[float] = None


@dataclass
class OptimizerStatistics:
    """Trial counters kept across optimizer calls."""
    tests_run: int = 0
    best_ratio: float = 0.0  # 0.0 until a trial succeeds
    total_trial_time: float = 0.0
    timed_trials: int = 0

    @property
    def average_time(self) -> float:
        if self.timed_trials == 0:
            return 0.0
        return self.total_trial_time / self.timed_trials


@dataclass
class EngineStatistics:
    """Totals for the smart compression engine."""
    total_files_processed: int = 0
    total_bytes_compressed: int = 0
    total_ratio: float = 0.0
    total_speed_mbps: float = 0.0
    compression_count: int = 0

    @property
    def average_ratio(self) -> float:
        if self.compression_count == 0:
            return 0.0
        return self.total_ratio / self.compression_count

    @property
    def average_speed_mbps(self) -> float:
        if self.compression_count == 0:
            return 0.0
        return self.total_speed_mbps / self.compression_count


@dataclass
class AdvisorContext:
    """Configuration plus all mutable state for one advisory session."""

    config: AdvisorConfig = field(default_factory=AdvisorConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)
    recovery: RecoveryStatistics = field(default_factory=RecoveryStatistics)
    analytics: AnalyticsState = field(default_factory=AnalyticsState)
    optimizer: OptimizerStatistics = field(default_factory=OptimizerStatistics)
    engine: EngineStatistics = field(default_factory=EngineStatistics)

    def __post_init__(self):
        self.analytics.enabled = self.config.analytics_enabled

    def reset(self):
        """Zero every counter and snapshot; configuration is kept."""
        self.recovery = RecoveryStatistics()
        self.analytics = AnalyticsState(enabled=self.analytics.enabled)
        self.optimizer = OptimizerStatistics()
        self.engine = EngineStatistics()

    def fork(self) -> "AdvisorContext":
        """A fresh context sharing a copy of this one's configuration."""
        return AdvisorContext(config=replace(self.config), parallel=replace(self.parallel))
