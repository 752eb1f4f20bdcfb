"""Tests for entropy-based compression prediction."""

import numpy as np
import pytest

from xzadvisor.analysis.classifier import ContentCategory
from xzadvisor.analysis.predictor import (
    CompressionPredictor,
    PredictionResult,
    estimate_memory_mb,
    predict,
    predict_file,
    ratio_from_entropy,
    speed_tier_mbps,
)
from xzadvisor.config import MIB, AdvisorConfig
from xzadvisor.strategy import Strategy


def _random_bytes(n, seed=0):
    rng = np.random.RandomState(seed)
    return rng.randint(0, 256, size=n, dtype=np.uint8).tobytes()


class TestPredict:
    def test_repeated_text_scenario(self):
        """1024 'A' bytes under BALANCED: clamp 0.95 times text factor 0.85."""
        result = predict(b"A" * 1024, Strategy.BALANCED)
        assert result.computed
        assert result.category is ContentCategory.TEXT
        assert result.entropy == 0.0
        assert result.predicted_ratio == pytest.approx(0.8075)
        assert result.recommended_preset == 6
        assert result.confidence == pytest.approx(0.95)
        assert result.estimated_output_size in (826, 827)
        assert result.estimated_memory_mb == 64

    @pytest.mark.parametrize("strategy,preset", [
        (Strategy.SPEED, 3),
        (Strategy.RATIO, 8),
        (Strategy.BALANCED, 6),
        (Strategy.MEMORY_EFFICIENT, 5),
        (Strategy.AUTO, 6),
        (Strategy.CUSTOM, 6),
    ])
    def test_strategy_preset(self, strategy, preset):
        assert predict(b"hello world " * 50, strategy).recommended_preset == preset

    def test_strategy_names_accepted(self):
        assert predict(b"abc" * 10, "memory-efficient").recommended_preset == 5

    def test_unknown_strategy_raises(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            predict(b"abc", "fastest")

    def test_ratio_strategy_capped(self):
        """RATIO multiplies by 1.05 but never exceeds 0.95."""
        result = predict(b"\x01" * 2048, Strategy.RATIO)
        assert result.category is ContentCategory.BINARY
        assert result.predicted_ratio == pytest.approx(0.95)

    def test_speed_strategy_factor(self):
        result = predict(b"\x01" * 2048, Strategy.SPEED)
        assert result.predicted_ratio == pytest.approx(0.95 * 0.90)

    def test_high_entropy_floor(self):
        """Incompressible data hits the 0.1 floor before category factors."""
        result = predict(b"\x02" + _random_bytes(4096), Strategy.BALANCED)
        assert result.category is ContentCategory.BINARY
        assert result.predicted_ratio == pytest.approx(0.1, abs=0.02)

    def test_image_factor(self):
        result = predict(b"\x89PNG" + b"\x00" * 1000)
        assert result.category is ContentCategory.IMAGE
        assert result.predicted_ratio == pytest.approx(ratio_from_entropy(result.entropy) * 0.95)

    @pytest.mark.parametrize("data", [
        b"x",
        b"hello world\n" * 1000,
        bytes(range(256)) * 40,
        b"\x7fELF" + bytes(5000),
    ])
    @pytest.mark.parametrize("strategy", list(Strategy))
    def test_bounds(self, data, strategy):
        result = predict(data, strategy)
        assert 0.0 < result.predicted_ratio <= 1.0
        assert 0.0 < result.confidence <= 1.0
        assert 0 <= result.estimated_output_size <= len(data)
        assert 1 <= result.recommended_preset <= 9
        assert result.estimated_time_seconds >= 0.0
        assert 64 <= result.estimated_memory_mb <= 1024

    def test_empty_input(self):
        result = predict(b"")
        assert not result.computed
        assert result.predicted_ratio == 0.0
        assert result.estimated_output_size == 0
        assert result.recommended_preset == 0


class TestSampling:
    def test_confidence_drops_with_sampled_fraction(self):
        """Only the first sample is analyzed; confidence reflects coverage."""
        config = AdvisorConfig(prediction_sample_size=1000)
        result = CompressionPredictor(config).predict(b"a" * 4000)
        assert result.sample_size == 1000
        assert result.confidence == pytest.approx(0.70 + 0.25 * 0.25)

    def test_output_scales_with_total_size(self):
        config = AdvisorConfig(prediction_sample_size=100)
        result = CompressionPredictor(config).predict(b"a" * 1000)
        assert result.estimated_output_size == int(1000 * result.predicted_ratio)


class TestPredictFile:
    def test_small_file(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_bytes(b"A" * 1024)
        result = predict_file(path)
        assert result.predicted_ratio == pytest.approx(0.8075)
        assert result.estimated_output_size in (826, 827)

    def test_large_file_rescales_output(self, tmp_path):
        path = tmp_path / "big.txt"
        path.write_bytes(b"line of text\n" * 1000)
        config = AdvisorConfig(prediction_sample_size=1000)
        result = CompressionPredictor(config).predict_file(path)
        total = 13 * 1000
        assert result.sample_size == 1000
        assert result.estimated_output_size == int(total * result.predicted_ratio)

    def test_missing_file(self, tmp_path):
        result = predict_file(tmp_path / "nope")
        assert result == PredictionResult.empty()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert not predict_file(path).computed


class TestHelpers:
    def test_ratio_from_entropy_clamped(self):
        assert ratio_from_entropy(0.0) == 0.95
        assert ratio_from_entropy(8.0) == 0.1
        assert ratio_from_entropy(4.0) == pytest.approx(0.5)

    def test_speed_tiers(self):
        assert speed_tier_mbps(1) == 30.0
        assert speed_tier_mbps(3) == 30.0
        assert speed_tier_mbps(6) == 15.0
        assert speed_tier_mbps(9) == 5.0

    def test_memory_estimate_clamped(self):
        assert estimate_memory_mb(1024, 6) == 64
        assert estimate_memory_mb(100 * MIB, 6) == 1024
        assert estimate_memory_mb(10 * MIB, 6) == 120

    def test_as_dict(self):
        d = predict(b"A" * 1024).as_dict()
        assert d["category"] == "text"
        assert d["computed"] is True
