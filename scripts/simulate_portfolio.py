#!/usr/bin/env python3
"""Simulate a loan portfolio through the lifecycle engine.

Generated applications are submitted, approved or rejected, and repaid
month by month under a fixed clock. Lifecycle events go to the configured
sink; the final loan snapshots can be exported as JSON.
"""

import argparse
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_engine.config import EngineConfig, build_sink
from loan_engine.logging import get_logger, setup_logging
from loan_engine.scenarios import PortfolioSimulation
from loan_engine.sinks.json_file import JsonFileSink

logger = get_logger(__name__)


def print_summary(simulation: PortfolioSimulation) -> None:
    """Print portfolio summary."""
    summary = simulation.get_portfolio_summary()
    print("\n" + "=" * 60)
    print("Portfolio Summary")
    print("=" * 60)
    print(f"{'Total loans:':24}{summary.total_loans}")
    print(f"{'Submitted:':24}{summary.submitted_loans}")
    print(f"{'Approved:':24}{summary.approved_loans}")
    print(f"{'Rejected:':24}{summary.rejected_loans}")
    print(f"{'Total amount:':24}{summary.total_loan_amount:,.2f}")
    print(f"{'Approved amount:':24}{summary.approved_loan_amount:,.2f}")
    print(f"{'Outstanding balance:':24}{summary.outstanding_balance:,.2f}")
    print("=" * 60)


def main() -> None:
    """Run the simulation from command-line arguments."""
    parser = argparse.ArgumentParser(description="Simulate a loan portfolio")
    parser.add_argument(
        "--applicants",
        type=int,
        default=50,
        help="Number of distinct applicants",
    )
    parser.add_argument(
        "--applications",
        type=int,
        default=100,
        help="Number of loan applications",
    )
    parser.add_argument(
        "--approval-rate",
        type=float,
        default=0.70,
        help="Probability an application is approved",
    )
    parser.add_argument(
        "--on-time-rate",
        type=float,
        default=0.90,
        help="Probability a due installment is paid",
    )
    parser.add_argument(
        "--months",
        type=int,
        default=12,
        help="Months to simulate after approval",
    )
    parser.add_argument(
        "--start",
        type=str,
        default="2024-01-01",
        help="Simulation start date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed",
    )
    parser.add_argument(
        "--export-dir",
        type=str,
        default=None,
        help="Write final loan snapshots to <dir>/loans.json",
    )

    args = parser.parse_args()

    config = EngineConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    try:
        start = datetime.strptime(args.start, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        parser.error(f"--start must be YYYY-MM-DD, got {args.start!r}")

    sink = build_sink(config)

    simulation = PortfolioSimulation(
        num_applicants=args.applicants,
        num_applications=args.applications,
        approval_rate=args.approval_rate,
        on_time_rate=args.on_time_rate,
        months=args.months,
        start=start,
        seed=args.seed,
        sink=sink,
        topic=config.events_topic,
    )
    simulation.run()

    if args.export_dir:
        simulation.export([JsonFileSink(args.export_dir, pretty=True)])
        logger.info("Loan snapshots written to %s", args.export_dir)

    if sink is not None:
        sink.close()

    print_summary(simulation)


if __name__ == "__main__":
    main()
