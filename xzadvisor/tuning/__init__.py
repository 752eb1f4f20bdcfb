from .optimizer import (
    OptimizationResult,
    PresetOptimizer,
    TrialResult,
    adjust_preset,
    search_range,
)
from .parallel import ParallelPlan, ParallelPlanner, optimal_block_size, optimal_threads

__all__ = [
    "OptimizationResult",
    "PresetOptimizer",
    "TrialResult",
    "adjust_preset",
    "search_range",
    "ParallelPlan",
    "ParallelPlanner",
    "optimal_block_size",
    "optimal_threads",
]
