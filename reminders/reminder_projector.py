"""
reminder_projector.py
-----------------------
Turns detected recurring series into reminder events.

A series becomes a reminder when its projected due date falls within
[today, today + lookahead_days]. Overdue series and series further out are
left out, not flagged. Output keeps the input order, which the detector
already sorts soonest-due first.
"""

import logging
from datetime import date
from typing import Iterable, List

from core.dates import days_between
from core.models import RecurringSeries, ReminderEvent

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_DAYS = 7


class ReminderProjector:
    """
    Projects due-soon reminders from recurring series.

    Usage:
        projector = ReminderProjector(lookahead_days=7)
        events = projector.project(series, today=date(2024, 6, 1))
    """

    def __init__(self, lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS):
        if lookahead_days < 0:
            raise ValueError(f"lookahead_days must be >= 0, got {lookahead_days}")
        self.lookahead_days = lookahead_days

    def project(self, series: Iterable[RecurringSeries], *, today: date) -> List[ReminderEvent]:
        events: List[ReminderEvent] = []
        for item in series:
            days_until_due = days_between(today, item.next_due_date)
            if not 0 <= days_until_due <= self.lookahead_days:
                continue
            events.append(
                ReminderEvent(
                    merchant=item.merchant,
                    average_amount=item.average_amount,
                    cadence=item.cadence,
                    due_date=item.next_due_date,
                    days_until_due=days_until_due,
                )
            )

        logger.debug(f"Projected {len(events):,} reminders within {self.lookahead_days} days of {today}.")
        return events


def project(
    series: Iterable[RecurringSeries],
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
    *,
    today: date,
) -> List[ReminderEvent]:
    """Functional shortcut for ReminderProjector(lookahead_days).project(...)."""
    return ReminderProjector(lookahead_days).project(series, today=today)
