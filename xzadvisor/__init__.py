"""xzadvisor: an advisory layer for xz/LZMA2 compression.

Predicts ratios, searches presets, sizes codec threading, verifies and
salvages .xz streams, and grades compression runs:

    import xzadvisor
    result = xzadvisor.predict(data, "balanced")
    best = xzadvisor.PresetOptimizer().analyze(data, "ratio")
    status = xzadvisor.verify(stream)

Stateful components share counters through an AdvisorContext:

    ctx = xzadvisor.AdvisorContext()
    engine = xzadvisor.RecoveryEngine(ctx)
"""

__version__ = "0.1.0"

from .analysis import (
    CompressionPredictor,
    CompressionSettings,
    ContentCategory,
    PredictionResult,
    analyze_file,
    default_settings,
    detect_content_category,
    predict,
    predict_file,
    shannon_entropy,
)
from .codec import CodecStatus, FilterId
from .config import AdvisorConfig, ParallelConfig
from .context import AdvisorContext
from .engine import CompressionOutcome, Recommendation, SmartEngine
from .evaluation import Analytics, BenchmarkResult, QualityScore, calculate_quality
from .recovery import (
    IntegrityStatus,
    RecoveryEngine,
    RecoveryMode,
    repair,
    repair_file,
    verify,
    verify_file,
)
from .strategy import Strategy
from .tuning import OptimizationResult, ParallelPlan, ParallelPlanner, PresetOptimizer

__all__ = [
    "__version__",
    "AdvisorConfig",
    "AdvisorContext",
    "Analytics",
    "BenchmarkResult",
    "CodecStatus",
    "CompressionOutcome",
    "CompressionPredictor",
    "CompressionSettings",
    "ContentCategory",
    "FilterId",
    "IntegrityStatus",
    "OptimizationResult",
    "ParallelConfig",
    "ParallelPlan",
    "ParallelPlanner",
    "PredictionResult",
    "PresetOptimizer",
    "QualityScore",
    "Recommendation",
    "RecoveryEngine",
    "RecoveryMode",
    "SmartEngine",
    "Strategy",
    "analyze_file",
    "calculate_quality",
    "default_settings",
    "detect_content_category",
    "predict",
    "predict_file",
    "repair",
    "repair_file",
    "shannon_entropy",
    "verify",
    "verify_file",
]
