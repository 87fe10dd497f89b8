"""
Command line entry point.

    jzbench run DATA_DIR [PERF_CSV] [MEM_CSV]
    jzbench index [RESULTS_ROOT]
    jzbench generate OUT_DIR

Exit codes: 0 on success, 1 when a directory is missing or an output file
cannot be written, 2 on usage errors.
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from jzbench import __version__
from jzbench.config import DEFAULT_RESULTS_ROOT
from jzbench.config import MEMORY_FILENAME
from jzbench.config import PERFORMANCE_FILENAME
from jzbench.config import IndexConfig
from jzbench.config import IterationPolicy
from jzbench.config import MemoryConfig
from jzbench.config import OutputConfig
from jzbench.config import RunConfig
from jzbench.config import TimingConfig
from jzbench.datasets import DEFAULT_SEED
from jzbench.datasets import write_dataset
from jzbench.errors import BenchmarkError
from jzbench.history import HistoryIndexer
from jzbench.memory import BYTES_PER_KIB
from jzbench.parsers import available_parsers
from jzbench.runner import BenchmarkRunner
from jzbench.runner import RunReport

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jzbench",
        description=(
            "Measure JSON parse latency, throughput and memory overhead."
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="debug logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser(
        "run", help="benchmark every *.json file in a directory"
    )
    run.add_argument("data_dir", type=Path)
    run.add_argument(
        "perf_csv", type=Path, nargs="?", default=Path(PERFORMANCE_FILENAME)
    )
    run.add_argument(
        "mem_csv", type=Path, nargs="?", default=Path(MEMORY_FILENAME)
    )
    run.add_argument("--parser", choices=available_parsers(), default=None)
    run.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="measured parses per payload",
    )
    run.add_argument(
        "--adaptive",
        action="store_true",
        help="scale iterations down for larger payloads",
    )
    run.add_argument("--settle-ms", type=int, default=None)
    run.add_argument(
        "--snapshot-root",
        type=Path,
        default=None,
        help="also store the full result set in a per-run directory here",
    )

    index = commands.add_parser("index", help="rebuild the history index")
    index.add_argument(
        "results_root", type=Path, nargs="?", default=DEFAULT_RESULTS_ROOT
    )

    generate = commands.add_parser(
        "generate", help="write the benchmark fixtures"
    )
    generate.add_argument("out_dir", type=Path)
    generate.add_argument("--seed", type=int, default=DEFAULT_SEED)
    return parser


def run_config_from_args(args: argparse.Namespace) -> RunConfig:
    """Layers CLI flags over environment overrides over defaults."""
    timing = TimingConfig.from_env()
    if args.adaptive:
        timing = TimingConfig(policy=IterationPolicy.by_size())
    elif args.iterations is not None:
        timing = TimingConfig(policy=IterationPolicy.fixed(args.iterations))

    memory = MemoryConfig.from_env()
    if args.settle_ms is not None:
        memory = MemoryConfig(settle_ms=args.settle_ms)

    return RunConfig(
        data_dir=args.data_dir,
        parser=args.parser or RunConfig.parser_from_env(),
        timing=timing,
        memory=memory,
        output=OutputConfig(
            performance_path=args.perf_csv,
            memory_path=args.mem_csv,
            snapshot_root=args.snapshot_root,
        ),
    )


def print_report(report: RunReport, config: RunConfig) -> None:
    memories = {m.name: m for m in report.memories}
    for timing in report.timings:
        print(f"Benchmarking: {timing.name}")
        print(
            f"  Parse time: {timing.mean_ms:.3f} ms"
            f" ({timing.iterations} iterations)"
        )
        print(f"  Throughput: {timing.throughput_mibps:.2f} MB/s")
        memory = memories.get(timing.name)
        if memory is not None:
            print(
                f"  Memory: heap delta"
                f" {memory.heap_used_delta / BYTES_PER_KIB:.0f} KB, "
                f"retained {memory.heap_retained / BYTES_PER_KIB:.0f} KB, "
                f"overhead {memory.overhead_ratio:.2f}x, "
                f"RSS {memory.after.rss / BYTES_PER_KIB:.0f} KB"
            )
        print()

    if report.skipped:
        print(f"Skipped {len(report.skipped)} payload(s):")
        for error in report.skipped:
            print(f"  - {error}")
        print()

    if not report.controlled:
        print(
            "⚠ No reclamation trigger: memory numbers are uncontrolled"
            " and noisier"
        )

    print(f"Benchmark complete! Measured {len(report.timings)} files.")
    print("Results written to:")
    print(f"  - {config.output.performance_path}")
    print(f"  - {config.output.memory_path}")
    if report.snapshot_dir is not None:
        print(f"  - {report.snapshot_dir}")


def cmd_run(args: argparse.Namespace) -> int:
    config = run_config_from_args(args)
    print(f"JSON parse benchmark ({config.parser})")
    print("=" * 40)
    report = BenchmarkRunner(config).run()
    print_report(report, config)
    return EXIT_OK


def cmd_index(args: argparse.Namespace) -> int:
    indexer = HistoryIndexer(IndexConfig(results_root=args.results_root))
    index = indexer.rebuild()
    print(f"Index updated with {index.count} entries")
    if indexer.skipped:
        print(f"Skipped {len(indexer.skipped)} run(s) without usable metadata")
    return EXIT_OK


def cmd_generate(args: argparse.Namespace) -> int:
    for path in write_dataset(args.out_dir, args.seed):
        size_kb = path.stat().st_size / BYTES_PER_KIB
        print(f"✓ Generated {path.name} ({size_kb:.2f} KB)")
    return EXIT_OK


COMMANDS = {"run": cmd_run, "index": cmd_index, "generate": cmd_generate}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return COMMANDS[args.command](args)
    except BenchmarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except OSError as e:
        print(f"Error: could not write results: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
