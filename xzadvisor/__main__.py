"""CLI entry point: python -m xzadvisor <command>"""

import argparse
import logging
import sys

_STRATEGIES = ["auto", "speed", "ratio", "balanced", "memory-efficient", "custom"]
_RECOVERY_MODES = ["none", "partial", "aggressive", "maximum"]


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="xzadvisor",
        description="Compression advisor for xz/LZMA2",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- predict ---
    predict_parser = subparsers.add_parser("predict", help="Predict ratio, time and memory")
    predict_parser.add_argument("input", type=str, help="Input file")
    predict_parser.add_argument("-s", "--strategy", type=str, default="balanced", choices=_STRATEGIES)

    # --- optimize ---
    optimize_parser = subparsers.add_parser("optimize", help="Find the best preset by trial encodes")
    optimize_parser.add_argument("input", type=str, help="Input file")
    optimize_parser.add_argument("-s", "--strategy", type=str, default="balanced", choices=_STRATEGIES)
    optimize_parser.add_argument("--memory-limit", type=int, default=0,
                                 help="Advisory memory limit in MB (0 = none)")

    # --- plan ---
    plan_parser = subparsers.add_parser("plan", help="Recommend codec threads and block size")
    plan_parser.add_argument("input", type=str, help="Input file")
    plan_parser.add_argument("--memory", type=int, default=None,
                             help="Available memory in bytes (default: 1 GiB)")

    # --- recommend ---
    recommend_parser = subparsers.add_parser("recommend", help="Recommend full settings for a file")
    recommend_parser.add_argument("input", type=str, help="Input file")
    recommend_parser.add_argument("-s", "--strategy", type=str, default="balanced", choices=_STRATEGIES)

    # --- compress ---
    compress_parser = subparsers.add_parser("compress", help="Compress with recommended settings")
    compress_parser.add_argument("input", type=str, help="Input file")
    compress_parser.add_argument("-o", "--output", type=str, required=True, help="Output .xz file")
    compress_parser.add_argument("-s", "--strategy", type=str, default="balanced", choices=_STRATEGIES)

    # --- verify ---
    verify_parser = subparsers.add_parser("verify", help="Check the integrity of an .xz file")
    verify_parser.add_argument("input", type=str, help="Input .xz file")
    verify_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    # --- recover ---
    recover_parser = subparsers.add_parser("recover", help="Salvage data from a corrupted .xz file")
    recover_parser.add_argument("input", type=str, help="Corrupted .xz file")
    recover_parser.add_argument("-o", "--output", type=str, required=True, help="Output file")
    recover_parser.add_argument("-m", "--mode", type=str, default="partial", choices=_RECOVERY_MODES)

    # --- repair ---
    repair_parser = subparsers.add_parser("repair", help="Salvage every intact stream of an .xz file")
    repair_parser.add_argument("input", type=str, help="Corrupted .xz file")
    repair_parser.add_argument("-o", "--output", type=str, required=True, help="Output file")

    # --- benchmark ---
    bench_parser = subparsers.add_parser("benchmark", help="Time and grade several presets")
    bench_parser.add_argument("input", type=str, help="Input file")
    bench_parser.add_argument("--presets", type=str, default="1,3,6,9",
                              help="Comma-separated presets (default: 1,3,6,9)")
    bench_parser.add_argument("-s", "--strategy", type=str, default="balanced", choices=_STRATEGIES)
    bench_parser.add_argument("--max-bytes", type=int, default=8 * 1024 * 1024,
                              help="Benchmark at most this many leading bytes")
    bench_parser.add_argument("--html", type=str, default=None,
                              help="Save HTML report to this path")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "predict":
        return _cmd_predict(args)
    elif args.command == "optimize":
        return _cmd_optimize(args)
    elif args.command == "plan":
        return _cmd_plan(args)
    elif args.command == "recommend":
        return _cmd_recommend(args)
    elif args.command == "compress":
        return _cmd_compress(args)
    elif args.command == "verify":
        return _cmd_verify(args)
    elif args.command == "recover":
        return _cmd_recover(args)
    elif args.command == "repair":
        return _cmd_repair(args)
    elif args.command == "benchmark":
        return _cmd_benchmark(args)
    return 0


def _error(message: str) -> int:
    from .cli_formatting import console
    console.print(f"[bold red]Error:[/bold red] {message}")
    return 1


def _cmd_predict(args):
    from .analysis.predictor import predict_file
    from .cli_formatting import print_prediction

    result = predict_file(args.input, args.strategy)
    if not result.computed:
        return _error(f"cannot predict for {args.input} (missing or empty)")
    print_prediction(args.input, result)
    return 0


def _cmd_optimize(args):
    from .cli_formatting import print_optimization
    from .loaders import read_sample
    from .tuning.optimizer import PresetOptimizer

    optimizer = PresetOptimizer()
    try:
        sample = read_sample(args.input, optimizer.config.trial_sample_size)
    except OSError as exc:
        return _error(str(exc))

    result = optimizer.analyze(sample, args.strategy, memory_limit_mb=args.memory_limit)
    if not result.computed:
        return _error(f"no preset could be tested for {args.input}")
    print_optimization(args.input, result)
    return 0


def _cmd_plan(args):
    from .cli_formatting import print_plan
    from .loaders import file_size
    from .tuning.parallel import ParallelPlanner

    try:
        size = file_size(args.input)
    except OSError as exc:
        return _error(str(exc))

    plan = ParallelPlanner().plan(size, args.memory)
    print_plan(args.input, size, plan)
    return 0


def _cmd_recommend(args):
    from .cli_formatting import print_recommendation
    from .engine import SmartEngine

    rec = SmartEngine().get_recommendations(args.input, args.strategy)
    if not rec.computed:
        return _error(f"cannot read {args.input}")
    print_recommendation(args.input, rec)
    return 0


def _cmd_compress(args):
    from .cli_formatting import console, print_compression
    from .engine import SmartEngine

    console.print(f"[bold]Compressing[/bold] {args.input} (strategy={args.strategy})...")
    outcome = SmartEngine().compress_file(args.input, args.output, args.strategy)
    if not outcome.ok:
        return _error(outcome.error or "compression failed")
    print_compression(outcome, args.output)
    return 0


def _cmd_verify(args):
    from .recovery.integrity import integrity_report

    report = integrity_report(args.input)
    if args.json:
        import json
        print(json.dumps(report, indent=2))
    else:
        from .cli_formatting import print_integrity
        print_integrity(report)
    return 0 if report["ok"] else 1


def _cmd_recover(args):
    from .cli_formatting import print_recovery
    from .recovery.salvage import RecoveryEngine

    engine = RecoveryEngine()
    report = engine.recover_file(args.input, args.output, args.mode)
    print_recovery(report.as_dict())

    stats = engine.stats()
    print_recovery({
        "corrupted_blocks": stats.corrupted_blocks,
        "recovered_blocks": stats.recovered_blocks,
        "skipped_blocks": stats.skipped_blocks,
        "recovery_rate": f"{stats.recovery_rate:.1%}",
    }, title="Recovery Statistics")
    return 0 if report.ok else 1


def _cmd_repair(args):
    from .cli_formatting import print_recovery
    from .recovery.integrity import repair_file

    result = repair_file(args.input, args.output)
    print_recovery(result.as_dict(), title="Repair")
    return 0 if result.ok else 1


def _cmd_benchmark(args):
    from .cli_formatting import console, print_benchmark
    from .engine import SmartEngine
    from .evaluation.quality import calculate_quality
    from .loaders import read_sample

    try:
        presets = [int(p) for p in args.presets.split(",") if p.strip()]
    except ValueError:
        return _error(f"invalid preset list: {args.presets}")

    try:
        data = read_sample(args.input, args.max_bytes)
    except OSError as exc:
        return _error(str(exc))
    if not data:
        return _error(f"{args.input} is empty")

    console.print(f"[bold]Benchmarking[/bold] {args.input} ({len(data):,} bytes)...")
    results = SmartEngine().benchmark(data, presets, args.strategy)
    if not results:
        return _error("no preset completed")

    print_benchmark(results, [calculate_quality(r, args.strategy) for r in results])

    if args.html:
        from pathlib import Path
        from .benchmark_report import generate_report
        generate_report(results, args.html, file_name=Path(args.input).name,
                        input_size=len(data), strategy=args.strategy)
        console.print(f"\nHTML report saved to: {args.html}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
