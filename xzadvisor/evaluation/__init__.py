from .analytics import Analytics
from .quality import BenchmarkResult, QualityScore, calculate_quality, grade_for

__all__ = ["Analytics", "BenchmarkResult", "QualityScore", "calculate_quality", "grade_for"]
