"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- Transaction: Read-only input record, as delivered by the transaction store.

- DetectionConfig: Tolerance and cadence tunables for the series detector.

- AmountCluster: Ephemeral grouping of same-merchant postings that share a
  price point. Lives only while one merchant group is being processed.

- RecurringSeries: Output of the detection layer. One per recurring charge.

- ReminderEvent: Output of the reminder projector. Consumed by the
  notification layer.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Union


REMINDER_EVENT_TYPE = "subscription.reminder"

INVALID_DATE_POLICIES = ("skip", "raise")


class Cadence(str, Enum):
    """Recognized recurrence patterns. New cadences get their own member."""

    MONTHLY = "monthly"


@dataclass(frozen=True)
class Transaction:
    """
    A single bank transaction. Never mutated by the engine.

    `date` is whatever the store hands over: a date, a datetime/Timestamp or
    an ISO-like string. Parsing happens inside the detector so a malformed
    value only costs that one transaction.
    """

    transaction_id: str
    date: Union[date, datetime, str, None]
    amount: float                    # Signed. Positive = money leaving the account.
    name: str                        # Raw display name from the bank feed.
    merchant_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Most specific name available: merchant name, else raw name."""
        return self.merchant_name or self.name or ""


@dataclass(frozen=True)
class DetectionConfig:
    """
    Tunables for recurring series detection.

    The effective amount tolerance is the larger of the absolute and the
    percentage tolerance, evaluated against the cluster's current mean.
    """

    min_occurrences: int = 3
    monthly_min_days: int = 25
    monthly_max_days: int = 35
    amount_tolerance_percent: float = 0.10
    amount_tolerance_absolute: float = 5.0
    invalid_date_policy: str = "skip"  # "skip" | "raise"

    def effective_tolerance(self, mean_amount: float) -> float:
        return max(self.amount_tolerance_absolute, mean_amount * self.amount_tolerance_percent)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DetectionConfig":
        """
        Builds a config from a YAML block. Missing keys fall back to defaults.

        Raises:
            ValueError: If invalid_date_policy is not a known policy.
        """
        defaults = cls()
        policy = str(raw.get("invalid_date_policy", defaults.invalid_date_policy))
        if policy not in INVALID_DATE_POLICIES:
            raise ValueError(
                f"Unknown invalid_date_policy '{policy}'. "
                f"Expected one of: {list(INVALID_DATE_POLICIES)}"
            )
        return cls(
            min_occurrences=int(raw.get("min_occurrences", defaults.min_occurrences)),
            monthly_min_days=int(raw.get("monthly_min_days", defaults.monthly_min_days)),
            monthly_max_days=int(raw.get("monthly_max_days", defaults.monthly_max_days)),
            amount_tolerance_percent=float(
                raw.get("amount_tolerance_percent", defaults.amount_tolerance_percent)
            ),
            amount_tolerance_absolute=float(
                raw.get("amount_tolerance_absolute", defaults.amount_tolerance_absolute)
            ),
            invalid_date_policy=policy,
        )


DEFAULT_DETECTION_CONFIG = DetectionConfig()


class Posting(NamedTuple):
    """A kept transaction with its parsed date and float amount."""

    date: date
    amount: float
    transaction: Transaction


@dataclass
class AmountCluster:
    """
    Same-merchant postings believed to share one price point.

    `average_amount` is the arithmetic mean of every member amount, recomputed
    after each assignment.
    """

    postings: List[Posting] = field(default_factory=list)
    average_amount: float = 0.0

    @classmethod
    def seeded_with(cls, posting: Posting) -> "AmountCluster":
        return cls(postings=[posting], average_amount=posting.amount)

    def accepts(self, amount: float, config: DetectionConfig) -> bool:
        # Exclusive: a difference of exactly the tolerance starts a new cluster
        return abs(amount - self.average_amount) < config.effective_tolerance(self.average_amount)

    def add(self, posting: Posting) -> None:
        self.postings.append(posting)
        self.average_amount = sum(p.amount for p in self.postings) / len(self.postings)

    def __len__(self) -> int:
        return len(self.postings)


@dataclass(frozen=True)
class RecurringSeries:
    """
    One detected recurring charge.

    Created fresh on every detection run; two runs over the same input and
    `today` compare equal.
    """

    merchant: str                    # Label from the most recent posting.
    average_amount: float
    cadence: Cadence
    last_transaction_date: date
    next_due_date: date              # Never before the `today` it was computed for.
    occurrences: int


@dataclass(frozen=True)
class ReminderEvent:
    """A series due within the lookahead window, shaped for notifications."""

    merchant: str
    average_amount: float
    cadence: Cadence
    due_date: date
    days_until_due: int              # 0 <= days_until_due <= lookahead_days
    event_type: str = field(default=REMINDER_EVENT_TYPE, init=False)
