"""Compression ratio prediction without running the codec.

The estimate is built from a leading sample (first 1 MiB):

    base      = clamp(1 - H/8, 0.1, 0.95)       H = order-0 entropy
    ratio     = base * category_factor * strategy_factor
    output    = floor(size * ratio)

then a preset is recommended per strategy and time/memory are derived from
rough per-preset speed tiers. Confidence is 0.95 when the sample covers the
whole input and drops towards 0.70 as the sampled fraction shrinks.

Usage:
    predictor = CompressionPredictor()
    result = predictor.predict(data, Strategy.BALANCED)
    if result.computed:
        print(result.predicted_ratio, result.recommended_preset)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..config import MIB, AdvisorConfig
from ..loaders import PathLike, file_size, read_sample
from ..strategy import Strategy
from .classifier import ContentCategory, as_byte_view, detect_content_category
from .entropy import shannon_entropy

logger = logging.getLogger(__name__)

MIN_RATIO = 0.1
MAX_RATIO = 0.95
MIN_MEMORY_MB = 64
MAX_MEMORY_MB = 1024

_CATEGORY_FACTORS = {
    ContentCategory.TEXT: 0.85,
    ContentCategory.EXECUTABLE: 0.70,
    ContentCategory.IMAGE: 0.95,
    ContentCategory.ARCHIVE: 0.90,
}

# strategy -> (ratio factor, recommended preset)
_STRATEGY_TABLE = {
    Strategy.SPEED: (0.90, 3),
    Strategy.RATIO: (1.05, 8),
    Strategy.BALANCED: (1.0, 6),
    Strategy.MEMORY_EFFICIENT: (0.92, 5),
}
_DEFAULT_STRATEGY_ENTRY = (1.0, 6)


@dataclass
class PredictionResult:
    """Estimated outcome of compressing an input."""
    predicted_ratio: float
    confidence: float
    estimated_output_size: int
    recommended_preset: int
    estimated_time_seconds: float
    estimated_memory_mb: int
    category: ContentCategory = ContentCategory.UNKNOWN
    entropy: float = 0.0
    sample_size: int = 0
    computed: bool = True

    @classmethod
    def empty(cls) -> "PredictionResult":
        """Zero-valued result for empty or unreadable input."""
        return cls(
            predicted_ratio=0.0,
            confidence=0.0,
            estimated_output_size=0,
            recommended_preset=0,
            estimated_time_seconds=0.0,
            estimated_memory_mb=0,
            computed=False,
        )

    def as_dict(self) -> dict:
        return {
            "predicted_ratio": self.predicted_ratio,
            "confidence": self.confidence,
            "estimated_output_size": self.estimated_output_size,
            "recommended_preset": self.recommended_preset,
            "estimated_time_seconds": self.estimated_time_seconds,
            "estimated_memory_mb": self.estimated_memory_mb,
            "category": self.category.value,
            "entropy": self.entropy,
            "sample_size": self.sample_size,
            "computed": self.computed,
        }


def ratio_from_entropy(entropy: float) -> float:
    """Map entropy (bits/byte) to a base ratio in [0.1, 0.95]."""
    return min(max(1.0 - entropy / 8.0, MIN_RATIO), MAX_RATIO)


def speed_tier_mbps(preset: int) -> float:
    """Rough single-thread compression speed for a preset."""
    if preset <= 3:
        return 30.0
    if preset <= 6:
        return 15.0
    return 5.0


def estimate_memory_mb(size_bytes: int, preset: int) -> int:
    """Encoder memory estimate, clamped to [64, 1024] MB."""
    memory = int(size_bytes / MIB * 2.0 * preset)
    return min(max(memory, MIN_MEMORY_MB), MAX_MEMORY_MB)


class CompressionPredictor:
    """Entropy + content-category compression estimates."""

    def __init__(self, config: Optional[AdvisorConfig] = None):
        self.config = config or AdvisorConfig()

    def predict(self, data, strategy=Strategy.BALANCED) -> PredictionResult:
        """Predict ratio, size, time and memory for compressing ``data``.

        Args:
            data: Bytes-like input.
            strategy: Strategy or strategy name.

        Returns:
            PredictionResult; the empty result (computed=False) for empty input.
        """
        strategy = Strategy.parse(strategy)
        view = as_byte_view(data)
        total_size = len(view)
        if total_size == 0:
            return PredictionResult.empty()

        sample = view[:self.config.prediction_sample_size]
        sample_size = len(sample)

        entropy = shannon_entropy(sample)
        category = detect_content_category(sample, self.config)

        ratio = ratio_from_entropy(entropy)
        ratio *= _CATEGORY_FACTORS.get(category, 1.0)

        factor, preset = _STRATEGY_TABLE.get(strategy, _DEFAULT_STRATEGY_ENTRY)
        ratio *= factor
        if strategy is Strategy.RATIO:
            ratio = min(ratio, MAX_RATIO)

        if sample_size >= total_size:
            confidence = 0.95
        else:
            confidence = 0.70 + 0.25 * (sample_size / total_size)

        size_mb = total_size / MIB
        return PredictionResult(
            predicted_ratio=ratio,
            confidence=confidence,
            estimated_output_size=math.floor(total_size * ratio),
            recommended_preset=preset,
            estimated_time_seconds=size_mb / speed_tier_mbps(preset),
            estimated_memory_mb=estimate_memory_mb(total_size, preset),
            category=category,
            entropy=entropy,
            sample_size=sample_size,
        )

    def predict_file(self, path: PathLike, strategy=Strategy.BALANCED) -> PredictionResult:
        """Predict from the leading sample of a file.

        Only the sample is read. When the file is larger than the sample the
        output-size estimate is rescaled to the full file size.
        """
        try:
            size = file_size(path)
            sample = read_sample(path, self.config.prediction_sample_size)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            return PredictionResult.empty()

        if size == 0 or len(sample) == 0:
            return PredictionResult.empty()

        result = self.predict(sample, strategy)
        if size > len(sample):
            result.estimated_output_size = math.floor(size * result.predicted_ratio)
        return result


def predict(data, strategy=Strategy.BALANCED, config: Optional[AdvisorConfig] = None) -> PredictionResult:
    """Predict compression for an in-memory buffer."""
    return CompressionPredictor(config).predict(data, strategy)


def predict_file(path: PathLike, strategy=Strategy.BALANCED,
                 config: Optional[AdvisorConfig] = None) -> PredictionResult:
    """Predict compression for a file from its leading sample."""
    return CompressionPredictor(config).predict_file(path, strategy)
