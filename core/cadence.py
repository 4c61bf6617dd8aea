"""
cadence.py
-----------
Cadence classification and due-date projection.

A cluster's consecutive posting intervals are tested against an ordered list
of classifiers. The first classifier whose day bounds contain every interval
wins; when none matches the cluster has no recognized cadence and produces
no series. Only monthly ships today. Weekly, biweekly or annual support means
adding a Cadence member and a classifier with its own bounds, not widening
the monthly window.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Sequence

import numpy as np

from core.models import Cadence, DetectionConfig


@dataclass(frozen=True)
class CadenceClassifier:
    """Matches a cadence when every interval lies in [min_days, max_days]."""

    cadence: Cadence
    min_days: int
    max_days: int

    def matches(self, intervals: Sequence[int]) -> bool:
        if len(intervals) == 0:
            return False
        return all(self.min_days <= days <= self.max_days for days in intervals)


def build_cadence_classifiers(config: DetectionConfig) -> List[CadenceClassifier]:
    """Classifiers in priority order for the given config."""
    return [
        CadenceClassifier(Cadence.MONTHLY, config.monthly_min_days, config.monthly_max_days),
    ]


def posting_intervals(dates: Sequence[date]) -> List[int]:
    """Day gaps between consecutive dates. Dates must already be sorted."""
    if len(dates) < 2:
        return []
    ordinals = np.array([d.toordinal() for d in dates], dtype=np.int64)
    return [int(gap) for gap in np.diff(ordinals)]


def classify_cadence(
    intervals: Sequence[int], classifiers: Sequence[CadenceClassifier]
) -> Cadence | None:
    """Returns the first matching cadence, or None."""
    for classifier in classifiers:
        if classifier.matches(intervals):
            return classifier.cadence
    return None


def cadence_length_days(intervals: Sequence[int]) -> int:
    """Mean interval rounded to the nearest whole day, halves rounding up."""
    mean_interval = float(np.mean(intervals))
    return int(np.floor(mean_interval + 0.5))


def project_next_due_date(last_date: date, cadence_days: int, today: date) -> date:
    """
    Steps forward from last_date in cadence_days increments until the date is
    not before today. Returns last_date itself when it is already today or
    later.
    """
    if cadence_days <= 0:
        raise ValueError(f"cadence_days must be positive, got {cadence_days}")

    gap = (today - last_date).days
    if gap <= 0:
        return last_date
    steps = -(-gap // cadence_days)  # ceiling division
    return last_date + timedelta(days=steps * cadence_days)
