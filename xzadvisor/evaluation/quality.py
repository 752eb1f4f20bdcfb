"""Benchmark records and quality grading.

Three sub-scores, each clamped to [0, 100]:

    ratio   (1 - ratio) * 100
    speed   speed_mbps / 50 * 100            (50 MB/s scores full marks)
    memory  100 - memory_mb / 500 * 50       (500 MB costs half the score)

The overall score is a strategy-weighted sum of the three and maps onto a
letter grade.
"""

from dataclasses import dataclass

from ..strategy import Strategy

EXCELLENT_SPEED_MBPS = 50.0
MEMORY_HALF_SCORE_MB = 500.0

# (speed, ratio, memory)
_WEIGHTS = {
    Strategy.SPEED: (0.6, 0.2, 0.2),
    Strategy.RATIO: (0.2, 0.6, 0.2),
    Strategy.MEMORY_EFFICIENT: (0.2, 0.3, 0.5),
}
_DEFAULT_WEIGHTS = (0.4, 0.4, 0.2)

GRADE_BANDS = (
    (95.0, "A+"),
    (90.0, "A"),
    (85.0, "B+"),
    (80.0, "B"),
    (75.0, "C+"),
    (70.0, "C"),
    (60.0, "D"),
)


@dataclass
class BenchmarkResult:
    """Measured outcome of compressing a buffer at one preset."""
    preset: int
    compression_ratio: float
    compression_speed_mbps: float = 0.0
    decompression_speed_mbps: float = 0.0
    memory_used_mb: int = 0
    compression_time_sec: float = 0.0
    decompression_time_sec: float = 0.0
    output_size_bytes: int = 0

    def as_dict(self) -> dict:
        return {
            "preset": self.preset,
            "compression_ratio": round(self.compression_ratio, 4),
            "compression_speed_mbps": round(self.compression_speed_mbps, 2),
            "decompression_speed_mbps": round(self.decompression_speed_mbps, 2),
            "memory_used_mb": self.memory_used_mb,
            "compression_time_sec": round(self.compression_time_sec, 6),
            "decompression_time_sec": round(self.decompression_time_sec, 6),
            "output_size_bytes": self.output_size_bytes,
        }


@dataclass
class QualityScore:
    ratio_score: float
    speed_score: float
    memory_score: float
    overall_score: float
    grade: str

    def as_dict(self) -> dict:
        return {
            "ratio_score": round(self.ratio_score, 2),
            "speed_score": round(self.speed_score, 2),
            "memory_score": round(self.memory_score, 2),
            "overall_score": round(self.overall_score, 2),
            "grade": self.grade,
        }


def _clamp(score: float) -> float:
    return min(max(score, 0.0), 100.0)


def grade_for(score: float) -> str:
    """Letter grade for an overall score."""
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return "F"


def calculate_quality(result: BenchmarkResult, strategy=Strategy.BALANCED) -> QualityScore:
    """Grade a benchmark result under a strategy.

    Args:
        result: Measured ratio, speed and memory.
        strategy: Strategy or name; picks the weighting.

    Returns:
        QualityScore with clamped sub-scores, overall score and grade.
    """
    strategy = Strategy.parse(strategy)
    ratio_score = _clamp((1.0 - result.compression_ratio) * 100.0)
    speed_score = _clamp(result.compression_speed_mbps / EXCELLENT_SPEED_MBPS * 100.0)
    memory_score = _clamp(100.0 - result.memory_used_mb / MEMORY_HALF_SCORE_MB * 50.0)

    w_speed, w_ratio, w_memory = _WEIGHTS.get(strategy, _DEFAULT_WEIGHTS)
    overall = speed_score * w_speed + ratio_score * w_ratio + memory_score * w_memory

    return QualityScore(
        ratio_score=ratio_score,
        speed_score=speed_score,
        memory_score=memory_score,
        overall_score=overall,
        grade=grade_for(overall),
    )
