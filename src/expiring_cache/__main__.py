"""CLI entrypoint for expiring-cache."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
import json
from pathlib import Path
from typing import Any

from .cache import ExpiringCache
from .clock import ManualClock
from .config import ensure_config_dir, load_config
from .events import EventChannel
from .listeners import CacheEventLogger
from .logging_utils import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expiring-cache",
        description="expiring-cache - in-memory TTL cache with LRU/FIFO/LFU eviction",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML config file",
    )
    subcommands = parser.add_subparsers(dest="command")
    subcommands.add_parser(
        "demo", help="Replay the TTL/eviction walkthrough on a simulated clock"
    )
    subcommands.add_parser("stats", help="Print statistics of a freshly configured cache")
    return parser


def run_demo(cache: ExpiringCache, clock: ManualClock) -> dict[str, Any]:
    """Walk a cache through TTL expiry, FIFO, read-through and LFU scenarios."""
    cache.configure(eviction_strategy="LRU", default_ttl_ms=10_000, max_size=5)

    clock.advance(100)
    cache.set("user:1", {"id": 1, "name": "Juan"}, 5_000)
    cache.set("user:2", {"id": 2, "name": "Maria"})
    cache.set("config:app", {"theme": "dark", "language": "es"}, 15_000)

    clock.advance(400)
    cache.get("user:1")
    cache.get("user:3")

    clock.advance(500)
    cache.get("user:1")
    cache.get("config:app")

    # user:1 outlives its 5s TTL here.
    clock.advance(5_000)
    cache.get("user:1")
    cache.get("user:2")
    cache.get("config:app")

    clock.advance(2_000)
    cache.configure(eviction_strategy="FIFO", max_size=3)
    for index in range(1, 5):
        cache.set(f"item{index}", f"value{index}")
    fifo_keys = cache.keys()

    clock.advance(3_000)
    computed: list[str] = []

    def expensive(item_id: int) -> str:
        computed.append(f"data:{item_id}")
        return f"result for {item_id} @ {clock.now():.0f}"

    for _ in range(3):
        cache.get_or_set("data:100", lambda: expensive(100), 8_000)

    clock.advance(2_000)
    cache.clear()
    cache.configure(eviction_strategy="LFU", max_size=2)
    cache.set("A", "valueA")
    cache.set("B", "valueB")
    for _ in range(3):
        cache.get("A")
    cache.get("B")
    cache.set("C", "valueC")

    return {
        "fifo_keys": fifo_keys,
        "computed": computed,
        "lfu_keys": cache.keys(),
        "statistics": cache.get_statistics().as_dict(),
        "channel": cache.channel.snapshot(),
    }


def main(argv: Sequence[str] | None = None) -> None:
    """Load configuration, set up logging, and dispatch the chosen command."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("expiring-cache")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"expiring-cache {version}")
        return

    if args.command is None:
        parser.print_help()
        return

    if args.config is None:
        ensure_config_dir()
    config = load_config(args.config)
    configure_logging(config["logging"])

    channel = EventChannel()
    CacheEventLogger(channel).attach()

    if args.command == "demo":
        clock = ManualClock()
        cache = ExpiringCache(channel, settings=config["cache"], clock=clock)
        report = run_demo(cache, clock)
    else:
        cache = ExpiringCache(channel, settings=config["cache"])
        report = cache.get_statistics().as_dict()

    print(json.dumps(report, indent=2, default=str))


if __name__ == "__main__":
    main()
