"""Rich CLI formatting helpers for xzadvisor commands."""

from rich.console import Console
from rich.table import Table

console = Console()

_GRADE_STYLES = {"A+": "bold green", "A": "green", "B+": "cyan", "B": "cyan",
                 "C+": "yellow", "C": "yellow", "D": "red", "F": "bold red"}


def _kv_table(title: str) -> Table:
    table = Table(title=title, border_style="cyan", show_header=False, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")
    return table


def _grade(grade: str) -> str:
    style = _GRADE_STYLES.get(grade, "bold")
    return f"[{style}]{grade}[/{style}]"


def print_prediction(path: str, prediction):
    """Print a PredictionResult."""
    table = _kv_table("Prediction")
    table.add_row("File", path)
    table.add_row("Category", prediction.category.value)
    table.add_row("Entropy", f"{prediction.entropy:.3f} bits/byte")
    table.add_row("Predicted ratio", f"[green]{prediction.predicted_ratio:.4f}[/green]")
    table.add_row("Confidence", f"{prediction.confidence:.2f}")
    table.add_row("Output size", f"{prediction.estimated_output_size:,} bytes")
    table.add_row("Preset", str(prediction.recommended_preset))
    table.add_row("Time", f"{prediction.estimated_time_seconds:.3f}s")
    table.add_row("Memory", f"{prediction.estimated_memory_mb} MB")
    console.print(table)


def print_optimization(path: str, result):
    """Print an OptimizationResult with one row per trial."""
    table = _kv_table("Optimization")
    table.add_row("File", path)
    table.add_row("Category", result.category.value)
    table.add_row("Optimal preset", f"[green]{result.optimal_preset}[/green]")
    table.add_row("Dictionary", f"{result.optimal_dict_size:,} bytes" if result.optimal_dict_size else "preset default")
    table.add_row("Filters", " + ".join(f.name for f in result.filters))
    table.add_row("Estimated ratio", f"{result.estimated_ratio:.4f}")
    table.add_row("Speed", f"{result.estimated_speed_mbps:.1f} MB/s")
    table.add_row("Memory", f"{result.estimated_memory_mb} MB")
    console.print(table)

    if result.trials:
        trials = Table(title="Trials", border_style="cyan", padding=(0, 2))
        trials.add_column("Preset", justify="right")
        trials.add_column("Ratio", justify="right", style="green")
        for preset, ratio in sorted(result.trials.items()):
            marker = " *" if preset == result.optimal_preset else ""
            trials.add_row(f"{preset}{marker}", f"{ratio:.4f}")
        console.print(trials)


def print_plan(path: str, size: int, plan):
    table = _kv_table("Parallel Plan")
    table.add_row("File", path)
    table.add_row("Size", f"{size:,} bytes")
    table.add_row("Threads", f"[green]{plan.threads}[/green]")
    table.add_row("Block size", f"{plan.block_size:,} bytes")
    console.print(table)


def print_recommendation(path: str, rec):
    table = _kv_table("Recommendation")
    table.add_row("File", path)
    table.add_row("Strategy", rec.strategy.value)
    table.add_row("Category", rec.settings.category.value)
    table.add_row("Preset", f"[green]{rec.preset}[/green]")
    table.add_row("Dictionary", f"{rec.dict_size:,} bytes" if rec.dict_size else "preset default")
    table.add_row("Filters", " + ".join(f.name for f in rec.filters))
    table.add_row("Threads", str(rec.threads))
    table.add_row("Block size", f"{rec.block_size:,} bytes")
    console.print(table)


def print_compression(outcome, output: str):
    """Print a CompressionOutcome."""
    table = _kv_table("Compression Results")
    table.add_row("Input", f"{outcome.input_size:,} bytes")
    table.add_row("Output", f"{outcome.output_size:,} bytes -> {output}")
    table.add_row("Ratio", f"[green]{outcome.ratio:.4f}[/green]")
    table.add_row("Preset", str(outcome.recommendation.preset))
    table.add_row("Time", f"{outcome.elapsed * 1000:.0f}ms")
    if outcome.quality is not None:
        table.add_row("Score", f"{outcome.quality.overall_score:.1f}")
        table.add_row("Grade", _grade(outcome.quality.grade))
    console.print(table)


def print_integrity(report: dict):
    status = report["integrity"]
    style = "green" if report["ok"] else "red"
    table = _kv_table("Integrity")
    table.add_row("File", report["file"])
    table.add_row("Size", f"{report['size']:,} bytes")
    table.add_row("Status", f"[{style}]{status.upper()}[/{style}]")
    console.print(table)


def print_recovery(report: dict, title: str = "Recovery"):
    """Print a recovery or repair summary (its ``as_dict()``)."""
    table = _kv_table(title)
    for key, value in report.items():
        if value is None:
            continue
        label = key.replace("_", " ").capitalize()
        if isinstance(value, bool):
            value = "[green]yes[/green]" if value else "[red]no[/red]"
        elif isinstance(value, int):
            value = f"{value:,}"
        table.add_row(label, str(value))
    console.print(table)


def print_benchmark(results, qualities):
    """Print benchmark results alongside their quality scores."""
    table = Table(title="Benchmark", border_style="cyan", padding=(0, 2))
    table.add_column("Preset", justify="right", style="bold")
    table.add_column("Size", justify="right")
    table.add_column("Ratio", justify="right", style="green")
    table.add_column("Compress", justify="right")
    table.add_column("Decompress", justify="right")
    table.add_column("Memory", justify="right", style="dim")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")

    for r, q in zip(results, qualities):
        table.add_row(
            str(r.preset),
            f"{r.output_size_bytes:,}",
            f"{r.compression_ratio:.4f}",
            f"{r.compression_speed_mbps:.1f} MB/s",
            f"{r.decompression_speed_mbps:.1f} MB/s",
            f"{r.memory_used_mb} MB",
            f"{q.overall_score:.1f}",
            _grade(q.grade),
        )
    console.print(table)
