"""Smart compression engine.

Ties the advisory pieces together into whole-file operations:

    engine = SmartEngine()
    rec = engine.get_recommendations("data.bin", "ratio")
    outcome = engine.compress_file("data.bin", "data.bin.xz", "ratio")
    print(outcome.quality.grade)

    results = engine.benchmark(data, presets=[1, 6, 9])
    engine.stats().average_ratio

Benchmarks and file compressions are counted in the EngineStatistics of
the session context.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from .analysis.classifier import (
    CompressionSettings,
    ContentCategory,
    as_byte_view,
    default_settings,
    detect_content_category,
)
from .codec.xz import CodecStatus, StreamEncoder, decode, encode
from .config import KIB, MIB
from .context import AdvisorContext, EngineStatistics
from .evaluation.analytics import Analytics
from .evaluation.quality import BenchmarkResult, QualityScore, calculate_quality
from .loaders import PathLike, file_size, iter_chunks, read_sample
from .strategy import Strategy
from .tuning.optimizer import adjust_preset
from .tuning.parallel import ParallelPlanner

logger = logging.getLogger(__name__)

DEFAULT_BENCHMARK_PRESETS = (1, 3, 6, 9)
MEMORY_EFFICIENT_PRESET_CAP = 5
MEMORY_EFFICIENT_DICT_CAP = 8 * MIB
MULTI_STREAM_CHUNK_SIZE = 64 * KIB


def benchmark_memory_mb(size_bytes: int, preset: int) -> int:
    """Rough memory estimate for a benchmark run: 2 MB per MiB per preset level, at least 64."""
    return max(64, int(size_bytes / MIB * 2.0 * preset))


@dataclass
class Recommendation:
    """Settings recommended for compressing one file."""
    settings: CompressionSettings
    threads: int = 1
    block_size: int = 0
    file_size: int = 0
    strategy: Strategy = Strategy.BALANCED
    computed: bool = True

    @property
    def preset(self) -> int:
        return self.settings.preset

    @property
    def dict_size(self) -> int:
        return self.settings.dict_size

    @property
    def filters(self) -> tuple:
        return self.settings.filters

    def as_dict(self) -> dict:
        out = self.settings.as_dict()
        out.update({
            "threads": self.threads,
            "block_size": self.block_size,
            "file_size": self.file_size,
            "strategy": self.strategy.value,
            "computed": self.computed,
        })
        return out


@dataclass
class CompressionOutcome:
    """Result of ``SmartEngine.compress_file``."""
    ok: bool
    status: Optional[CodecStatus] = None
    input_size: int = 0
    output_size: int = 0
    ratio: float = 0.0
    elapsed: float = 0.0
    recommendation: Optional[Recommendation] = None
    quality: Optional[QualityScore] = None
    error: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "status": self.status.value if self.status else None,
            "input_size": self.input_size,
            "output_size": self.output_size,
            "ratio": round(self.ratio, 4),
            "elapsed": round(self.elapsed, 6),
            "recommendation": self.recommendation.as_dict() if self.recommendation else None,
            "quality": self.quality.as_dict() if self.quality else None,
            "error": self.error,
        }


@dataclass
class MultiStreamReport:
    ok: bool
    streams_written: int = 0
    output_size: int = 0
    failed: list = field(default_factory=list)
    error: Optional[str] = None


class SmartEngine:
    """Benchmarks, recommendations and smart file compression."""

    def __init__(self, context: Optional[AdvisorContext] = None,
                 hardware_thread_count: Optional[int] = None):
        self.context = context or AdvisorContext()
        self.analytics = Analytics(self.context)
        self.planner = ParallelPlanner(self.context, hardware_thread_count)

    @property
    def config(self):
        return self.context.config

    # ------------------------------------------------------------------
    # Benchmarking
    # ------------------------------------------------------------------

    def benchmark(self, data, presets: Sequence[int] = DEFAULT_BENCHMARK_PRESETS,
                  strategy=Strategy.BALANCED) -> list[BenchmarkResult]:
        """Compress and decompress ``data`` at each preset and time both.

        At most ``max_benchmark_presets`` entries of ``presets`` are looked
        at; presets above 9 are skipped, as are presets the codec rejects.

        Returns:
            One BenchmarkResult per successful preset, in input order.
        """
        Strategy.parse(strategy)
        view = as_byte_view(data)
        if len(view) == 0:
            return []

        raw = view.tobytes()
        size_mb = len(raw) / MIB
        stats = self.context.engine
        results = []

        for preset in list(presets)[:self.config.max_benchmark_presets]:
            if preset < 0 or preset > 9:
                logger.debug("Skipping out-of-range preset %s", preset)
                continue

            t0 = time.perf_counter()
            encoded = encode(raw, preset=preset)
            t1 = time.perf_counter()
            if not encoded.ok:
                logger.warning("Benchmark at preset %d failed: %s", preset, encoded.error)
                continue

            decoded = decode(encoded.data)
            t2 = time.perf_counter()
            if not decoded.ok or decoded.data != raw:
                logger.warning("Benchmark round trip at preset %d did not match", preset)
                continue

            comp_time = t1 - t0
            decomp_time = t2 - t1
            result = BenchmarkResult(
                preset=preset,
                compression_ratio=len(encoded.data) / len(raw),
                compression_speed_mbps=size_mb / comp_time if comp_time > 0 else 0.0,
                decompression_speed_mbps=size_mb / decomp_time if decomp_time > 0 else 0.0,
                memory_used_mb=benchmark_memory_mb(len(raw), preset),
                compression_time_sec=comp_time,
                decompression_time_sec=decomp_time,
                output_size_bytes=len(encoded.data),
            )
            results.append(result)

            stats.total_bytes_compressed += len(raw)
            stats.total_ratio += result.compression_ratio
            stats.total_speed_mbps += result.compression_speed_mbps
            stats.compression_count += 1

        return results

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def get_recommendations(self, path: PathLike, strategy=Strategy.BALANCED) -> Recommendation:
        """Recommend preset, filters, dictionary size and threads for a file.

        The file is classified from its first bytes, the category defaults
        are nudged towards the strategy, and the thread count is sized for
        the whole file against the assumed available memory. An empty or
        unreadable file gets one thread.
        """
        strategy = Strategy.parse(strategy)
        try:
            head = read_sample(path, self.config.classifier_window)
            size = file_size(path)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            return Recommendation(
                settings=default_settings(ContentCategory.UNKNOWN),
                strategy=strategy,
                computed=False,
            )

        settings = default_settings(detect_content_category(head, self.config))
        settings.preset = adjust_preset(settings.preset, strategy)
        if strategy is Strategy.MEMORY_EFFICIENT:
            settings.preset = min(settings.preset, MEMORY_EFFICIENT_PRESET_CAP)
            settings.dict_size = min(settings.dict_size, MEMORY_EFFICIENT_DICT_CAP)

        if size > 0:
            threads = self.planner.optimal_threads(size, self.config.assumed_available_memory)
        else:
            threads = 1

        return Recommendation(
            settings=settings,
            threads=threads,
            block_size=self.planner.optimal_block_size(threads, size),
            file_size=size,
            strategy=strategy,
        )

    # ------------------------------------------------------------------
    # Compression
    # ------------------------------------------------------------------

    def compress_file(self, input_path: PathLike, output_path: PathLike,
                      strategy=Strategy.BALANCED) -> CompressionOutcome:
        """Compress a file with the recommended settings and grade the result."""
        strategy = Strategy.parse(strategy)
        recommendation = self.get_recommendations(input_path, strategy)
        outcome = CompressionOutcome(ok=False, recommendation=recommendation)

        try:
            with open(input_path, "rb") as f:
                raw = f.read()
        except OSError as exc:
            logger.warning("Cannot read %s: %s", input_path, exc)
            outcome.error = str(exc)
            return outcome

        if not raw:
            outcome.error = "input file is empty"
            return outcome

        settings = recommendation.settings
        with self.analytics.measure_compression() as measurement:
            t0 = time.perf_counter()
            encoded = encode(
                raw,
                preset=settings.preset,
                filters=settings.filters,
                dict_size=settings.dict_size,
            )
            elapsed = time.perf_counter() - t0
            if encoded.ok:
                measurement.record(len(raw), len(encoded.data))

        outcome.status = encoded.status
        outcome.input_size = len(raw)
        outcome.elapsed = elapsed
        if not encoded.ok:
            outcome.error = encoded.error
            return outcome

        try:
            with open(output_path, "wb") as f:
                f.write(encoded.data)
        except OSError as exc:
            logger.warning("Cannot write %s: %s", output_path, exc)
            outcome.error = str(exc)
            return outcome

        memory_mb = benchmark_memory_mb(len(raw), settings.preset)
        # lzma here is single-threaded; threads is what the codec could use
        self.analytics.record_resources(blocks=1, memory_used=memory_mb * MIB, threads=1)

        outcome.output_size = len(encoded.data)
        outcome.ratio = outcome.output_size / outcome.input_size
        outcome.quality = calculate_quality(
            BenchmarkResult(
                preset=settings.preset,
                compression_ratio=outcome.ratio,
                compression_speed_mbps=(len(raw) / MIB) / elapsed if elapsed > 0 else 0.0,
                memory_used_mb=memory_mb,
                compression_time_sec=elapsed,
                output_size_bytes=outcome.output_size,
            ),
            strategy,
        )
        outcome.ok = True
        self.context.engine.total_files_processed += 1
        logger.debug(
            "Compressed %s at preset %d: %d -> %d bytes (grade %s)",
            input_path, settings.preset, outcome.input_size, outcome.output_size,
            outcome.quality.grade,
        )
        return outcome

    def compress_multi_stream(self, input_paths: Sequence[PathLike], output_path: PathLike,
                              preset: int = 6) -> MultiStreamReport:
        """Compress each input into its own stream, concatenated in one output.

        Unreadable inputs are logged, listed in ``failed`` and skipped.
        """
        if not input_paths:
            raise ValueError("compress_multi_stream needs at least one input file")

        report = MultiStreamReport(ok=False)
        try:
            with open(output_path, "wb") as sink:
                for path in input_paths:
                    try:
                        encoder = StreamEncoder(preset=preset)
                        parts = [encoder.feed(chunk) for chunk in iter_chunks(path, MULTI_STREAM_CHUNK_SIZE)]
                        parts.append(encoder.finish())
                    except OSError as exc:
                        logger.warning("Skipping %s: %s", path, exc)
                        report.failed.append(str(path))
                        continue

                    stream = b"".join(parts)
                    sink.write(stream)
                    report.streams_written += 1
                    report.output_size += len(stream)
        except OSError as exc:
            logger.warning("Cannot write %s: %s", output_path, exc)
            report.error = str(exc)
            return report

        report.ok = not report.failed and report.streams_written > 0
        return report

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> EngineStatistics:
        """Copy of the engine statistics."""
        return replace(self.context.engine)

    def reset_stats(self):
        self.context.engine = EngineStatistics()
