#!/usr/bin/env python3
"""
SOL/BTC 15-minute up/down arbitrage monitor.

Pipeline:
  1. Load config + connect
  2. Discover the current SOL and BTC up/down markets
  3. Poll the four outcome asks every second
  4. Record SOL_UP+BTC_DOWN / SOL_DOWN+BTC_UP pairs costing under $1
  5. Settle pending trades once both markets close
  6. Roll over to the next pair every 15 minutes

Usage:
  python run.py                       # simulation (default)
  python run.py --live                # live trading
  python run.py --config my.json --json-log run.ndjson
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass, field

from pydantic import ValidationError
from py_clob_client.exceptions import PolyException

from client.auth import build_clob_client
from client.errors import InvariantViolation, PriceSourceError
from client.platform import PriceSource
from client.polymarket import PolymarketPriceSource
from config import DEFAULT_CONFIG_PATH, Config, load_config
from executor.ledger import TradeLedger
from monitor.display import print_startup, print_summary
from monitor.logger import setup_logging
from monitor.registry import MarketRegistry
from monitor.rollover import PeriodRollover
from monitor.snapshotter import Snapshotter
from monitor.tasks import PeriodicTask, SnapshotPipeline
from scanner.arbitrage import ArbitrageDetector
from scanner.discovery import discover_markets, markets_from_condition_ids
from scanner.models import Market

logger = logging.getLogger(__name__)

SETTLEMENT_INTERVAL_SEC = 30.0
ROLLOVER_INTERVAL_SEC = 60.0

_BANNER = r"""
 _   _       ______                      _         _
| | | |_ __ |  _  \_____      ___ __    / \   _ __| |__
| | | | '_ \| | | / _ \ \ /\ / / '_ \  / _ \ | '__| '_ \
| |_| | |_) | |_| | (_) \ V  V /| | | |/ ___ \| |  | |_) |
 \___/| .__/|____/ \___/ \_/\_/ |_| |_/_/   \_\_|  |_.__/
      |_|                 SOL/BTC 15m monitor v0.1
"""


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SOL/BTC 15-minute up/down arbitrage monitor")
    parser.add_argument("--live", action="store_true", help="Place real orders (default is simulation)")
    parser.add_argument(
        "--config", type=str, default=DEFAULT_CONFIG_PATH,
        help=f"Path to JSON config file, created with defaults if missing (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--json-log", type=str, default=None, help="Path to JSON log file for machine-readable output")
    return parser.parse_args(argv)


@dataclass
class Monitor:
    """Every long-lived component of one session, wired together."""

    cfg: Config
    registry: MarketRegistry
    snapshotter: Snapshotter
    ledger: TradeLedger
    rollover: PeriodRollover
    pipeline: SnapshotPipeline
    tasks: list[PeriodicTask] = field(default_factory=list)

    def start(self) -> None:
        self.pipeline.start()
        for task in self.tasks:
            task.start()
        logger.info("Monitoring started. Press Ctrl+C to stop.")

    def stop(self) -> None:
        for task in reversed(self.tasks):
            task.stop()
        self.pipeline.stop()
        self.snapshotter.close()


def initial_markets(cfg: Config, source: PriceSource) -> tuple[Market, Market]:
    """
    Pinned condition ids when both are configured, otherwise slug discovery.
    Raises PriceSourceError or InvariantViolation.
    """
    if cfg.sol_condition_id and cfg.btc_condition_id:
        return markets_from_condition_ids(source, cfg.sol_condition_id, cfg.btc_condition_id)
    return discover_markets(source)


def build_monitor(cfg: Config, source: PriceSource) -> Monitor:
    """Discover the starting pair and construct every component around it."""
    sol_market, btc_market = initial_markets(cfg, source)
    registry = MarketRegistry(source, sol_market, btc_market)

    snapshotter = Snapshotter(registry, source)
    detector = ArbitrageDetector(cfg.min_profit_threshold)
    ledger = TradeLedger(source, cfg.max_position_size, paper_trading=cfg.paper_trading)
    rollover = PeriodRollover(registry, source)
    pipeline = SnapshotPipeline(snapshotter, detector, ledger, poll_interval_sec=cfg.poll_interval_sec)

    tasks = [
        PeriodicTask("settlement-sweep", SETTLEMENT_INTERVAL_SEC, ledger.sweep_settlements),
        PeriodicTask("period-rollover", ROLLOVER_INTERVAL_SEC, rollover.check),
    ]
    return Monitor(
        cfg=cfg,
        registry=registry,
        snapshotter=snapshotter,
        ledger=ledger,
        rollover=rollover,
        pipeline=pipeline,
        tasks=tasks,
    )


def run_until(monitor: Monitor, shutdown: threading.Event) -> dict:
    """Run the monitor until *shutdown* is set; returns the session summary."""
    monitor.start()
    try:
        # Short waits keep the main thread responsive to signals
        while not shutdown.wait(timeout=1.0):
            pass
    finally:
        logger.info("Shutting down...")
        monitor.stop()

    summary = monitor.ledger.summary()
    print_summary(summary, monitor.cfg.paper_trading)
    return summary


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    try:
        cfg = load_config(args.config)
    except (ValidationError, ValueError) as e:
        logger.error("Invalid configuration in %s: %s", args.config, e)
        sys.exit(1)

    # Override simulation based on CLI flag
    if args.live:
        cfg = cfg.model_copy(update={"paper_trading": False})

    if not cfg.paper_trading and not cfg.private_key:
        logger.error("PRIVATE_KEY is required for live trading. Drop --live to run in simulation.")
        sys.exit(1)

    log_file_path = setup_logging(cfg.log_level, json_log_file=args.json_log)
    logger.info(_BANNER.strip("\n"))
    logger.info("  Log file: %s", log_file_path)
    if cfg.paper_trading:
        logger.info("  SIMULATION MODE - no real orders will be placed")
    else:
        logger.warning("  LIVE TRADING MODE - real orders will be placed")

    try:
        logger.debug("Building CLOB client (authenticated=%s)...", not cfg.paper_trading)
        client = build_clob_client(cfg, authenticated=not cfg.paper_trading)
    except (PolyException, ValueError) as e:
        logger.error("Failed to initialize CLOB client: %s", e)
        sys.exit(1)
    source = PolymarketPriceSource(client, gamma_host=cfg.gamma_host)

    try:
        monitor = build_monitor(cfg, source)
    except (PriceSourceError, InvariantViolation) as e:
        logger.error("Market discovery failed: %s", e)
        sys.exit(1)

    sol_market, btc_market = monitor.registry.markets()
    print_startup(
        cfg.paper_trading,
        cfg.min_profit_threshold,
        cfg.max_position_size,
        cfg.poll_interval_sec,
        sol_market,
        btc_market,
    )

    # Graceful shutdown handler
    shutdown = threading.Event()

    def handle_signal(signum, frame):
        if not shutdown.is_set():
            logger.info("Received signal %d, stopping...", signum)
        shutdown.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    session_start = time.time()
    summary = run_until(monitor, shutdown)
    logger.info(
        "Session ended after %.0fs: total profit $%.2f | trades executed %d | pending %d",
        time.time() - session_start,
        summary["total_profit"], summary["trades_executed"], summary["pending_trades"],
    )


if __name__ == "__main__":
    main()
