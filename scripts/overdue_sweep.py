#!/usr/bin/env python3
"""Run the periodic overdue sweep over a sample ledger.

Every interval the sweep promotes past-due bank installments from pending to
overdue, then logs the dashboard counters. Ctrl+C stops the loop after the
current cycle.
"""

import argparse
import logging
import signal
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from funding_engine.config import EngineConfig
from funding_engine.exceptions import FundingEngineError
from funding_engine.generators import LedgerGenerator
from funding_engine.logging import setup_logging
from funding_engine.notifications import NotificationLifecycleManager, compute_stats

logger = logging.getLogger(__name__)


def run_sweeps(
    manager: NotificationLifecycleManager,
    interval_seconds: float,
    max_cycles: int | None = None,
) -> int:
    """Sweep until interrupted or ``max_cycles`` is reached.

    Returns the total number of installments promoted.
    """
    shutdown_requested = False
    original_sigint = signal.getsignal(signal.SIGINT)

    def _signal_handler(signum: int, frame: object) -> None:
        nonlocal shutdown_requested
        shutdown_requested = True
        logger.info("[SWEEP] Shutdown requested, finishing current cycle...")

    signal.signal(signal.SIGINT, _signal_handler)

    cycles = 0
    total_promoted = 0
    try:
        while not shutdown_requested:
            try:
                promoted = manager.sweep()
            except FundingEngineError as exc:
                # Retry on the next cycle
                logger.error("[SWEEP] Cycle %d failed: %s", cycles + 1, exc)
                promoted = 0
            total_promoted += promoted
            cycles += 1

            stats = compute_stats(manager.refresh(), manager.today())
            logger.info(
                "[SWEEP] cycle=%d promoted=%d | pending=%d overdue=%d week=%d month=%d | due=%s overdue_amount=%s",
                cycles,
                promoted,
                stats.total_pending,
                stats.total_overdue,
                stats.due_this_week,
                stats.due_this_month,
                stats.total_amount_due,
                stats.total_overdue_amount,
            )

            if max_cycles is not None and cycles >= max_cycles:
                break

            deadline = time.monotonic() + interval_seconds
            while time.monotonic() < deadline and not shutdown_requested:
                time.sleep(min(0.5, max(0.0, deadline - time.monotonic())))
    finally:
        signal.signal(signal.SIGINT, original_sigint)

    logger.info("[SWEEP] Stopped after %d cycles, %d installments promoted", cycles, total_promoted)
    return total_promoted


def main() -> None:
    """Main entry point."""
    config = EngineConfig.from_env()

    parser = argparse.ArgumentParser(description="Run the periodic overdue sweep")
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--projects",
        type=int,
        default=3,
        help="Number of projects to generate (default: 3)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=config.notifications.sweep_interval_seconds,
        help="Seconds between sweeps (default: 60)",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop after this many sweeps (default: run until interrupted)",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["standard", "json"],
        default="standard",
        help="Log format (default: standard)",
    )

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_format, config.log_module_levels)

    if args.interval <= 0:
        parser.error("--interval must be positive")

    store = LedgerGenerator(seed=args.seed).generate(num_projects=args.projects)
    manager = NotificationLifecycleManager(store)

    logger.info("=" * 60)
    logger.info("Funding Engine - Overdue Sweep")
    logger.info("=" * 60)
    logger.info("Interval: %.1fs", args.interval)
    logger.info("Installments: %d", len(store.schedule))

    run_sweeps(manager, args.interval, args.cycles)


if __name__ == "__main__":
    main()
