"""
sample_data.py
---------------
Seed transactions for demos and smoke runs.

Three monthly subscriptions (Netflix, Spotify, AT&T Internet) posted on a
fixed day of each of the last four months, plus two one-off charges that
must never turn into a series. Dates are relative to the `today` passed in,
so the demo always has something due soon.
"""

from datetime import date

import pandas as pd


_SUBSCRIPTIONS = [
    # (merchant, amount, day of month, category)
    ("Netflix", 15.99, 4, "Recreation"),
    ("Spotify", 9.99, 18, "Recreation"),
    ("AT&T Internet", 74.50, 22, "Service"),
]

_ONE_OFFS = [
    # (merchant, amount, months back, day of month, category)
    ("Whole Foods", 68.42, 0, 16, "Food and Drink"),
    ("Delta Airlines", 420.00, 1, 9, "Travel"),
]


def _month_offset(today: date, months_back: int, day: int) -> date:
    """Same-ish day `months_back` months before today. Days clamp to 28."""
    month_index = today.year * 12 + (today.month - 1) - months_back
    year, month = divmod(month_index, 12)
    return date(year, month + 1, min(day, 28))


def make_seed_transactions(today: date) -> pd.DataFrame:
    """
    Builds a transactions DataFrame with the pipeline's input columns
    (transaction_id, date, amount, name, merchant_name, category).
    """
    rows = []
    index = 1
    for merchant, amount, day, category in _SUBSCRIPTIONS:
        for months_back in (3, 2, 1, 0):
            rows.append(_row(index, merchant, amount, _month_offset(today, months_back, day), category))
            index += 1

    for merchant, amount, months_back, day, category in _ONE_OFFS:
        rows.append(_row(index, merchant, amount, _month_offset(today, months_back, day), category))
        index += 1

    return pd.DataFrame(rows).sort_values("date", kind="stable").reset_index(drop=True)


def _row(index: int, merchant: str, amount: float, posted: date, category: str) -> dict:
    slug = merchant.lower().replace(" ", "-")
    return {
        "transaction_id": f"seed-{slug}-{index}",
        "date": posted.isoformat(),
        "amount": amount,
        "name": merchant,
        "merchant_name": merchant,
        "category": category,
    }
