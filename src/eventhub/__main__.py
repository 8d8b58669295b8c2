from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional

from . import __version__
from .config import DispatcherConfig, load_config
from .manager import EventManager

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    level = getattr(logging, default_level, logging.WARNING)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def run_bench(config: DispatcherConfig, sends: int, listeners: int) -> float:
    """Send one event ``sends`` times to ``listeners`` listeners; return sends per second."""
    manager = EventManager(config)
    hits = [0]

    def on_tick(value: int) -> None:
        hits[0] += value

    for _ in range(listeners):
        manager.add("bench.tick", on_tick)

    start = time.perf_counter()
    for _ in range(sends):
        manager.send("bench.tick", None, 1)
    elapsed = time.perf_counter() - start

    logger.info("Delivered %d callbacks in %.3fs", hits[0], elapsed)
    return sends / elapsed if elapsed > 0 else float("inf")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="eventhub",
        description="eventhub dispatcher utilities",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", default=None, help="YAML dispatcher config file")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    bench = sub.add_parser("bench", help="Measure send throughput")
    bench.add_argument("--sends", type=int, default=100_000, help="Number of sends")
    bench.add_argument("--listeners", type=int, default=1, help="Listeners registered for the event")

    args = parser.parse_args(argv)
    config = load_config(args.config)
    _setup_logging(args.verbose, config.log_level)

    if args.command == "bench":
        if args.sends <= 0 or args.listeners < 0:
            parser.error("--sends must be positive and --listeners non-negative")
        rate = run_bench(config, args.sends, args.listeners)
        print(f"{args.sends} sends x {args.listeners} listeners: {rate:,.0f} sends/s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
