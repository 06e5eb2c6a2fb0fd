#!/usr/bin/env python3
"""Generate a sample ledger and report its funding and payment notifications.

The report covers:
- Funding overview: per-project sources, totals, warnings and the portfolio rollup
- Notifications: the active bank installment and milestone notifications
- Stats: dashboard counters over the active notifications

Output goes to the console or to one JSON file per section.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from funding_engine.config import EngineConfig
from funding_engine.exceptions import FundingEngineError
from funding_engine.funding import FundingLedgerReader, build_overview, rollup
from funding_engine.generators import LedgerGenerator
from funding_engine.logging import setup_logging
from funding_engine.models.enums import NotificationView
from funding_engine.notifications import (
    compute_stats,
    fetch_notifications,
    filter_notifications,
)
from funding_engine.sinks import ConsoleSink, JsonFileSink

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    config = EngineConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Report project funding and payment notifications for a sample ledger"
    )
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
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reference date in ISO format (default: today)",
    )
    parser.add_argument(
        "--view",
        choices=[v.value for v in NotificationView],
        default=NotificationView.ALL.value,
        help="Notification filter (default: all)",
    )
    parser.add_argument(
        "--output",
        choices=["console", "json"],
        default="console",
        help="Output target (default: console)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for JSON output (default: output)",
    )
    parser.add_argument(
        "--max-records",
        type=int,
        default=None,
        help="Maximum records per section on the console",
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

    today = args.today or date.today()

    logger.info("=" * 60)
    logger.info("Funding Engine - Report")
    logger.info("=" * 60)
    logger.info("Seed: %d", args.seed)
    logger.info("Projects: %d", args.projects)
    logger.info("Today: %s", today.isoformat())

    if args.output == "json":
        sink = JsonFileSink(args.output_dir, pretty=config.output.pretty_json)
    else:
        sink = ConsoleSink(pretty=True, max_records=args.max_records)

    try:
        store = LedgerGenerator(seed=args.seed, today=today).generate(num_projects=args.projects)
        reader = FundingLedgerReader(store)

        summaries = build_overview(reader, today, thresholds=config.funding)
        notifications = fetch_notifications(store, today)
        visible = filter_notifications(
            notifications, NotificationView(args.view), today, config.notifications
        )
        stats = compute_stats(notifications, today, config.notifications)

        sink.write_batch("funding_summaries", summaries)
        sink.write_batch("funding_rollup", [rollup(summaries)])
        sink.write_batch("notifications", visible)
        sink.write_batch("notification_stats", [stats])
    except FundingEngineError as exc:
        logger.error("Report failed: %s", exc)
        sys.exit(1)
    finally:
        sink.close()

    logger.info(
        "Report complete: %d projects, %d notifications (%d overdue)",
        len(summaries),
        len(visible),
        stats.total_overdue,
    )


if __name__ == "__main__":
    main()
