from .classifier import (
    CompressionSettings,
    ContentCategory,
    analyze_file,
    default_settings,
    detect_content_category,
)
from .entropy import shannon_entropy
from .predictor import CompressionPredictor, PredictionResult, predict, predict_file

__all__ = [
    "CompressionSettings",
    "ContentCategory",
    "analyze_file",
    "default_settings",
    "detect_content_category",
    "shannon_entropy",
    "CompressionPredictor",
    "PredictionResult",
    "predict",
    "predict_file",
]
