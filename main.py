"""
main.py
--------
Entry point for the recurring bill detection & reminder engine.

Reads a transactions CSV (or generates seed data), detects recurring
series, projects due-soon reminders, and writes both to the outputs/ folder.

Usage (from the project root):
    python main.py --input path/to/transactions.csv

    # With optional arguments:
    python main.py --demo
    python main.py --input txns.csv --today 2024-06-01 --lookahead 14
"""

import sys
import os
import argparse
import logging
import pandas as pd
from datetime import date, datetime

# Ensure project root is on path (for runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import BillReminderPipeline, reminders_to_frame, series_to_frame
from core.sample_data import make_seed_transactions


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got '{value}'")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recurring bill engine: detect recurring charges and upcoming reminders."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", type=str, default=None,
        help="Path to input transactions CSV (transaction_id, date, amount, name, merchant_name)."
    )
    source.add_argument(
        "--demo", action="store_true", default=False,
        help="Run on generated seed transactions instead of a CSV."
    )
    parser.add_argument(
        "--today", type=_parse_day, default=None,
        help="Reference date (YYYY-MM-DD) for due-date projection. Defaults to the current date."
    )
    parser.add_argument(
        "--lookahead", type=int, default=None,
        help="Reminder window in days. Defaults to config value (7)."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    today = args.today or date.today()

    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")
    os.makedirs(output_dir, exist_ok=True)

    # --- Load transactions ---
    if args.demo:
        logger.info(f"Generating seed transactions relative to {today}.")
        transactions = make_seed_transactions(today)
    else:
        logger.info(f"Loading transactions from: {args.input}")
        if not os.path.exists(args.input):
            logger.error(f"Input file not found: {args.input}")
            return 1
        transactions = pd.read_csv(args.input, dtype={"transaction_id": str, "date": str})
    logger.info(f"Loaded {len(transactions):,} transactions.")

    # --- Run pipeline ---
    pipeline = BillReminderPipeline(lookahead_days=args.lookahead)
    try:
        series, reminders = pipeline.detect_and_project(transactions, today)
    except ValueError as e:
        logger.error(f"Detection failed: {e}")
        return 1

    # --- Output ---
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    series_path = os.path.join(output_dir, f"recurring_series_{timestamp}.csv")
    reminders_path = os.path.join(output_dir, f"reminders_{timestamp}.csv")

    series_df = series_to_frame(series)
    reminders_df = reminders_to_frame(reminders)
    series_df.to_csv(series_path, index=False)
    reminders_df.to_csv(reminders_path, index=False)
    logger.info(f"Recurring series saved to: {series_path}")
    logger.info(f"Reminders saved to: {reminders_path}")

    _print_summary(series_df, reminders_df, today, pipeline.lookahead_days)
    return 0


def _print_summary(series_df: pd.DataFrame, reminders_df: pd.DataFrame, today: date, lookahead: int):
    """Prints a clean summary table to the console."""
    if series_df.empty:
        print("\n  No recurring charges detected.\n")
        return

    print("\n" + "=" * 80)
    print(f"  RECURRING CHARGES (as of {today.isoformat()})")
    print("=" * 80)

    print("\n  Detected Series:")
    print("  " + "-" * 70)
    for _, row in series_df.iterrows():
        print(
            f"    {row['merchant'][:30]:30s}  ${row['average_amount']:>9,.2f}  "
            f"{row['cadence']:8s}  next due {row['next_due_date']}  ({row['occurrences']}x)"
        )

    print(f"\n  Due Within {lookahead} Days:")
    print("  " + "-" * 70)
    if reminders_df.empty:
        print("    Nothing due soon.")
    for _, row in reminders_df.iterrows():
        when = "today" if row["days_until_due"] == 0 else f"in {row['days_until_due']} day(s)"
        print(f"    {row['merchant'][:30]:30s}  ${row['average_amount']:>9,.2f}  {when}")

    print("=" * 80 + "\n")


if __name__ == "__main__":
    sys.exit(main())
