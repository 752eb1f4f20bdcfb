"""Trial-based preset optimization.

Runs the real codec over a bounded sample (at most 1 MiB) once per preset in
the strategy's search range and keeps the preset with the lowest observed
ratio (compressed / original):

    SPEED            presets 1-4
    RATIO            presets 7-9
    BALANCED         presets 4-7
    MEMORY_EFFICIENT presets 1-5
    CUSTOM / AUTO    presets 1-9

The search is exhaustive over the range. A trial the codec rejects is
skipped and never becomes the best result. Filters and dictionary size come
from the content-category defaults, with the empirical preset overriding
the default preset.

Memory and time limits are advisory: they are recorded on the result and
only the strategy bounds the search.
"""

import logging
import time
import warnings
from dataclasses import dataclass, field, replace
from typing import Optional

from ..analysis.classifier import (
    CompressionSettings,
    ContentCategory,
    as_byte_view,
    default_settings,
    detect_content_category,
)
from ..analysis.predictor import estimate_memory_mb
from ..codec.xz import CodecStatus, encode
from ..config import MIB
from ..context import AdvisorContext, OptimizerStatistics
from ..strategy import Strategy

logger = logging.getLogger(__name__)

MIN_PRESET = 1
MAX_PRESET = 9

_SEARCH_RANGES = {
    Strategy.SPEED: (1, 4),
    Strategy.RATIO: (7, 9),
    Strategy.BALANCED: (4, 7),
    Strategy.MEMORY_EFFICIENT: (1, 5),
    Strategy.CUSTOM: (1, 9),
    Strategy.AUTO: (1, 9),
}

SPEED_PRESET_CAP = 4
RATIO_PRESET_FLOOR = 7


def search_range(strategy) -> tuple[int, int]:
    """Inclusive (min, max) preset range searched for a strategy."""
    return _SEARCH_RANGES[Strategy.parse(strategy)]


def adjust_preset(preset: int, strategy) -> int:
    """Nudge a preset towards the strategy bound without running trials.

    SPEED caps the preset at 4, RATIO raises it to at least 7; other
    strategies leave it alone.
    """
    strategy = Strategy.parse(strategy)
    if strategy is Strategy.SPEED and preset > SPEED_PRESET_CAP:
        return SPEED_PRESET_CAP
    if strategy is Strategy.RATIO and preset < RATIO_PRESET_FLOOR:
        return RATIO_PRESET_FLOOR
    return preset


@dataclass
class TrialResult:
    """One trial encode."""
    preset: int
    status: CodecStatus
    compressed_size: int = 0
    ratio: float = 0.0
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is CodecStatus.END_OF_STREAM


@dataclass
class OptimizationResult:
    """Best settings found by a preset search."""
    optimal_preset: int
    optimal_dict_size: int
    filters: tuple
    estimated_ratio: float
    estimated_speed_mbps: float
    estimated_memory_mb: int
    category: ContentCategory = ContentCategory.UNKNOWN
    presets_tested: tuple = ()
    trials: dict = field(default_factory=dict)  # preset -> observed ratio
    memory_limit_mb: int = 0
    time_limit_seconds: float = 0.0
    computed: bool = True

    @classmethod
    def empty(cls) -> "OptimizationResult":
        """Zero-valued result for empty input."""
        return cls(
            optimal_preset=0,
            optimal_dict_size=0,
            filters=(),
            estimated_ratio=0.0,
            estimated_speed_mbps=0.0,
            estimated_memory_mb=0,
            computed=False,
        )

    @property
    def settings(self) -> CompressionSettings:
        return CompressionSettings(
            category=self.category,
            preset=self.optimal_preset,
            dict_size=self.optimal_dict_size,
            filters=self.filters,
        )

    def as_dict(self) -> dict:
        return {
            "optimal_preset": self.optimal_preset,
            "optimal_dict_size": self.optimal_dict_size,
            "filters": [f.name for f in self.filters],
            "estimated_ratio": self.estimated_ratio,
            "estimated_speed_mbps": self.estimated_speed_mbps,
            "estimated_memory_mb": self.estimated_memory_mb,
            "category": self.category.value,
            "presets_tested": list(self.presets_tested),
            "trials": {str(k): v for k, v in self.trials.items()},
            "computed": self.computed,
        }


class PresetOptimizer:
    """Exhaustive preset search over a sample, with counters on the context."""

    def __init__(self, context: Optional[AdvisorContext] = None):
        self.context = context or AdvisorContext()

    @property
    def config(self):
        return self.context.config

    def run_trial(self, sample: bytes, preset: int) -> TrialResult:
        """Encode ``sample`` once at ``preset`` and measure it."""
        t0 = time.perf_counter()
        result = encode(sample, preset=preset, check=self.config.trial_check)
        elapsed = time.perf_counter() - t0

        if not result.ok:
            logger.debug("Trial at preset %d skipped: %s", preset, result.error)
            return TrialResult(preset=preset, status=result.status, elapsed=elapsed)

        size = len(result.data)
        return TrialResult(
            preset=preset,
            status=result.status,
            compressed_size=size,
            ratio=size / len(sample),
            elapsed=elapsed,
        )

    def analyze(
        self,
        data,
        strategy=Strategy.BALANCED,
        memory_limit_mb: int = 0,
        time_limit_seconds: float = 0.0,
        sample_size: int = 0,
    ) -> OptimizationResult:
        """Find the best preset for ``data`` within the strategy's range.

        Args:
            data: Bytes-like input.
            strategy: Strategy or strategy name.
            memory_limit_mb: Advisory memory limit (0 = none).
            time_limit_seconds: Advisory time limit (0 = none).
            sample_size: Analyze only this many leading bytes (0 = all).

        Returns:
            OptimizationResult; the empty result for empty input.
        """
        strategy = Strategy.parse(strategy)
        lo, hi = search_range(strategy)
        return self._search(data, lo, hi, memory_limit_mb, time_limit_seconds, sample_size)

    def find_best_preset(
        self,
        data,
        min_preset: int = MIN_PRESET,
        max_preset: int = MAX_PRESET,
        memory_limit_mb: int = 0,
    ) -> OptimizationResult:
        """Search an explicit preset range (clamped to 1-9)."""
        lo = min(max(min(min_preset, max_preset), MIN_PRESET), MAX_PRESET)
        hi = min(max(max(min_preset, max_preset), MIN_PRESET), MAX_PRESET)
        return self._search(data, lo, hi, memory_limit_mb, 0.0, 0)

    def _search(
        self,
        data,
        lo: int,
        hi: int,
        memory_limit_mb: int,
        time_limit_seconds: float,
        sample_size: int,
    ) -> OptimizationResult:
        view = as_byte_view(data)
        if len(view) == 0:
            return OptimizationResult.empty()

        if 0 < sample_size < len(view):
            view = view[:sample_size]

        category = detect_content_category(view, self.config)
        settings = default_settings(category)

        # Bounded working copy for the trial encodes
        sample = view[:self.config.trial_sample_size].tobytes()
        stats = self.context.optimizer

        best: Optional[TrialResult] = None
        trials = {}
        for preset in range(lo, hi + 1):
            trial = self.run_trial(sample, preset)
            stats.tests_run += 1
            if not trial.ok:
                if trial.status is CodecStatus.MEMORY_ERROR:
                    logger.warning("Out of memory during trial at preset %d", preset)
                continue

            stats.total_trial_time += trial.elapsed
            stats.timed_trials += 1
            trials[preset] = trial.ratio
            if best is None or trial.ratio < best.ratio:
                best = trial

        if best is None:
            logger.warning("Every trial in presets %d-%d failed", lo, hi)
            preset = min(max(settings.preset, lo), hi)
            return OptimizationResult(
                optimal_preset=preset,
                optimal_dict_size=settings.dict_size,
                filters=settings.filters,
                estimated_ratio=1.0,
                estimated_speed_mbps=0.0,
                estimated_memory_mb=estimate_memory_mb(len(sample), preset),
                category=category,
                presets_tested=tuple(range(lo, hi + 1)),
                memory_limit_mb=memory_limit_mb,
                time_limit_seconds=time_limit_seconds,
                computed=False,
            )

        if stats.best_ratio == 0.0 or best.ratio < stats.best_ratio:
            stats.best_ratio = best.ratio

        speed = (len(sample) / MIB) / best.elapsed if best.elapsed > 0 else 0.0
        memory_mb = estimate_memory_mb(len(sample), best.preset)
        if memory_limit_mb > 0 and memory_mb > memory_limit_mb:
            warnings.warn(
                f"Preset {best.preset} is estimated to need {memory_mb} MB, "
                f"above the advisory limit of {memory_limit_mb} MB"
            )

        return OptimizationResult(
            optimal_preset=best.preset,
            optimal_dict_size=settings.dict_size,
            filters=settings.filters,
            estimated_ratio=min(best.ratio, 1.0),
            estimated_speed_mbps=speed,
            estimated_memory_mb=memory_mb,
            category=category,
            presets_tested=tuple(range(lo, hi + 1)),
            trials=trials,
            memory_limit_mb=memory_limit_mb,
            time_limit_seconds=time_limit_seconds,
        )

    def optimize_filters(self, data, strategy=Strategy.BALANCED) -> CompressionSettings:
        """Category default settings nudged towards the strategy. No trials."""
        category = detect_content_category(data, self.config)
        settings = default_settings(category)
        settings.preset = adjust_preset(settings.preset, strategy)
        return settings

    def stats(self) -> OptimizerStatistics:
        """Copy of the optimizer counters."""
        return replace(self.context.optimizer)

    def reset(self):
        """Zero the optimizer counters."""
        self.context.optimizer = OptimizerStatistics()
