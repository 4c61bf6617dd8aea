"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. Frame conversion          →  DataFrame rows become Transactions
    2. RecurringSeriesDetector   →  produces RecurringSeries
    3. ReminderProjector         →  turns due-soon series into ReminderEvents
    4. Output serialization      →  flat DataFrames for CSV / UI consumers

This is the single entry point for host code. Configuration defaults come
from config.yaml; explicit constructor arguments override them.

Usage:
    from pipeline import BillReminderPipeline

    pipeline = BillReminderPipeline()
    reminders_df = pipeline.run(transactions_df, today=date.today())
"""

import pandas as pd
import logging
from datetime import date
from typing import List, Tuple

from core.models import DetectionConfig, RecurringSeries, ReminderEvent, Transaction
from core.recurring_series_detector import RecurringSeriesDetector
from reminders.reminder_projector import ReminderProjector
from config.config_loader import get_detection_config, get_reminder_config

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["transaction_id", "date", "amount", "name"]

SERIES_COLUMNS = [
    "merchant", "average_amount", "cadence",
    "last_transaction_date", "next_due_date", "occurrences",
]

REMINDER_COLUMNS = [
    "event_type", "merchant", "average_amount", "cadence",
    "due_date", "days_until_due",
]


class BillReminderPipeline:
    """
    End-to-end recurring bill detection and reminder pipeline.

    Orchestrates conversion → detection → projection → output without
    exposing internal objects to callers that only want DataFrames.
    """

    def __init__(
        self,
        lookahead_days: int | None = None,
        detection_config: DetectionConfig | None = None,
    ):
        """
        Args:
            lookahead_days: Override the reminder window from config.
            detection_config: Override the detection block from config.
        """
        self.detection_config = detection_config or get_detection_config()
        if lookahead_days is None:
            lookahead_days = int(get_reminder_config()["lookahead_days"])
        self.lookahead_days = lookahead_days
        self.detector = RecurringSeriesDetector(self.detection_config)
        self.projector = ReminderProjector(lookahead_days)

        logger.info(
            f"Pipeline initialized. "
            f"Min occurrences: {self.detection_config.min_occurrences}. "
            f"Monthly window: {self.detection_config.monthly_min_days}–"
            f"{self.detection_config.monthly_max_days} days. "
            f"Lookahead: {lookahead_days} days."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(self, transactions: pd.DataFrame, today: date) -> pd.DataFrame:
        """
        Run the full pipeline.

        Args:
            transactions: DataFrame with columns transaction_id, date,
                amount, name and optionally merchant_name.
            today: Reference date for due-date projection.

        Returns:
            DataFrame of reminder events, soonest due first.
        """
        _, reminders = self.detect_and_project(transactions, today)
        return reminders_to_frame(reminders)

    def run_detection_only(self, transactions: pd.DataFrame, today: date) -> List[RecurringSeries]:
        """
        Run only detection. Useful for the upcoming-bills widget, which
        shows every series regardless of the reminder window.
        """
        return self.detector.detect(transactions_from_frame(transactions), today=today)

    def detect_and_project(
        self, transactions: pd.DataFrame, today: date
    ) -> Tuple[List[RecurringSeries], List[ReminderEvent]]:
        """Runs both stages and returns the series and reminder objects."""
        logger.info(f"Pipeline starting. Input: {len(transactions):,} transactions. Today: {today}.")

        # --- Stage 1: Recurring series detection ---
        series = self.run_detection_only(transactions, today)
        logger.info(f"Stage 1 complete. Recurring series: {len(series):,}.")

        # --- Stage 2: Reminder projection ---
        reminders = self.projector.project(series, today=today)
        logger.info(f"Stage 2 complete. Reminders: {len(reminders):,}.")

        return series, reminders


# =============================================================================
# FRAME CONVERSION & SERIALIZATION
# =============================================================================

def transactions_from_frame(transactions: pd.DataFrame) -> List[Transaction]:
    """
    Converts a transactions DataFrame into Transaction records.

    Dates are passed through untouched; the detector owns date parsing so a
    bad value only drops its own row.

    Raises:
        ValueError: If a required column is missing.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in transactions.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    has_merchant = "merchant_name" in transactions.columns
    records: List[Transaction] = []
    for row in transactions.itertuples(index=False):
        merchant_name = row.merchant_name if has_merchant else None
        records.append(
            Transaction(
                transaction_id=str(row.transaction_id),
                date=None if _is_missing(row.date) else row.date,
                amount=row.amount,
                name="" if _is_missing(row.name) else str(row.name),
                merchant_name=None if _is_missing(merchant_name) else str(merchant_name),
            )
        )
    return records


def series_to_frame(series: List[RecurringSeries]) -> pd.DataFrame:
    """Flat DataFrame for the upcoming-bills consumer. ISO date strings."""
    if not series:
        return pd.DataFrame(columns=SERIES_COLUMNS)

    rows = [
        {
            "merchant": s.merchant,
            "average_amount": round(s.average_amount, 2),
            "cadence": s.cadence.value,
            "last_transaction_date": s.last_transaction_date.isoformat(),
            "next_due_date": s.next_due_date.isoformat(),
            "occurrences": s.occurrences,
        }
        for s in series
    ]
    return pd.DataFrame(rows, columns=SERIES_COLUMNS)


def reminders_to_frame(reminders: List[ReminderEvent]) -> pd.DataFrame:
    """Flat DataFrame for the notification consumer. ISO date strings."""
    if not reminders:
        return pd.DataFrame(columns=REMINDER_COLUMNS)

    rows = [
        {
            "event_type": r.event_type,
            "merchant": r.merchant,
            "average_amount": round(r.average_amount, 2),
            "cadence": r.cadence.value,
            "due_date": r.due_date.isoformat(),
            "days_until_due": r.days_until_due,
        }
        for r in reminders
    ]
    return pd.DataFrame(rows, columns=REMINDER_COLUMNS)


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
