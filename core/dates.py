"""
dates.py
---------
Calendar-date helpers shared by detection and reminder projection.

All engine arithmetic runs on plain `datetime.date` values; time-of-day and
timezone information from the store is dropped at parse time.
"""

from datetime import date, datetime
from typing import Any, Optional

import pandas as pd


def parse_posting_date(value: Any) -> Optional[date]:
    """
    Converts a stored posting date into a calendar date.

    Accepts date, datetime (including pandas Timestamp) and date-like strings.
    Returns None for anything that cannot be read as a real calendar date,
    so callers can drop the transaction instead of corrupting interval math.
    """
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime):
        return None if pd.isna(value) else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    parsed = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end. Negative when end is earlier."""
    return (end - start).days
