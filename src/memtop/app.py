"""memtop - command-line entry point.

Usage:
    memtop [--top N] [--proc-root PATH] [--source {procfs,psutil}] [--once] [--no-clear] [-v]
"""

import argparse
import logging
import os
import sys

from memtop.display import DEFAULT_TOP_N, TopDisplay
from memtop.monitor import MemoryMonitor, ProcfsSource, PsutilSource, SnapshotSource
from memtop.procfs import PROC_ROOT

logger = logging.getLogger(__name__)

PROC_ROOT_ENV = "MEMTOP_PROC_ROOT"


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="memtop",
        description="Show the processes using the most resident memory, refreshed every second.",
    )
    parser.add_argument(
        "-n",
        "--top",
        type=positive_int,
        default=DEFAULT_TOP_N,
        help=f"number of processes to show (default: {DEFAULT_TOP_N})",
    )
    parser.add_argument(
        "--proc-root",
        default=os.environ.get(PROC_ROOT_ENV, str(PROC_ROOT)),
        help=f"procfs mount point, procfs source only (default: ${PROC_ROOT_ENV} or {PROC_ROOT})",
    )
    parser.add_argument(
        "--source",
        choices=["procfs", "psutil"],
        default="procfs",
        help="read /proc directly or go through psutil (default: procfs)",
    )
    parser.add_argument("--once", action="store_true", help="print a single snapshot and exit")
    parser.add_argument(
        "--no-clear",
        dest="clear",
        action="store_false",
        help="append each refresh instead of clearing the screen",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr, keeping stdout for the display."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def make_source(args: argparse.Namespace) -> SnapshotSource:
    """Pick the snapshot backend requested on the command line."""
    if args.source == "psutil":
        if args.proc_root != str(PROC_ROOT):
            logger.warning("Ignoring procfs root %s: psutil reads /proc itself", args.proc_root)
        return PsutilSource()
    return ProcfsSource(args.proc_root)


def main(argv: list[str] | None = None) -> int:
    """Entry point for memtop."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    monitor = MemoryMonitor(
        source=make_source(args),
        display=TopDisplay(top_n=args.top, clear=args.clear and not args.once),
    )
    logger.debug("Starting memtop: source=%s root=%s top=%d", args.source, args.proc_root, args.top)

    try:
        failures = monitor.run(cycles=1 if args.once else None)
    except KeyboardInterrupt:
        return 0
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
