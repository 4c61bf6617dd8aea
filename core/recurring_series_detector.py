"""
recurring_series_detector.py
------------------------------
Recurring series detection engine.

This is the foundation layer. It answers one question for a user's
transaction history:

    "Which charges recur every month, at what price, and when is the next one due?"

Output: a RecurringSeries per qualifying amount cluster, sorted soonest due
first. The reminder projector consumes these directly.

Design decisions:
    - Grouping key is the normalized merchant name (merchant name when the
      feed has one, else the raw display name).
    - Within a merchant, postings are split into price points by greedy
      first-fit clustering in date order. This is order-dependent on purpose:
      it is linear, deterministic and keeps outputs stable across versions.
      Do not swap it for nearest-mean or optimal clustering.
    - Cadence detection requires every interval to fit, not a majority.
      One 40-day gap disqualifies the whole cluster.
    - `today` is always passed in. Nothing here reads the clock.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List

from core.cadence import (
    build_cadence_classifiers,
    cadence_length_days,
    classify_cadence,
    posting_intervals,
    project_next_due_date,
)
from core.dates import parse_posting_date
from core.merchant import merchant_key
from core.models import (
    DEFAULT_DETECTION_CONFIG,
    AmountCluster,
    DetectionConfig,
    Posting,
    RecurringSeries,
    Transaction,
)

logger = logging.getLogger(__name__)


class InvalidTransactionDateError(ValueError):
    """Raised under the "raise" policy when a posting date cannot be parsed."""

    def __init__(self, transaction: Transaction):
        self.transaction = transaction
        super().__init__(
            f"Transaction {transaction.transaction_id!r} has an unparseable date: {transaction.date!r}"
        )


class RecurringSeriesDetector:
    """
    Detects recurring monthly charges in a list of transactions.

    Usage:
        detector = RecurringSeriesDetector()
        series = detector.detect(transactions, today=date(2024, 6, 1))
    """

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DEFAULT_DETECTION_CONFIG
        self.classifiers = build_cadence_classifiers(self.config)

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def detect(self, transactions: Iterable[Transaction], *, today: date) -> List[RecurringSeries]:
        """
        Run recurring series detection.

        Args:
            transactions: Transactions in any order. Never mutated.
            today: The date due dates are projected against.

        Returns:
            List of RecurringSeries, ascending by next_due_date.

        Raises:
            InvalidTransactionDateError: Only when the config's
                invalid_date_policy is "raise".
        """
        groups = self._group_by_merchant(self._prepare(transactions))

        results: List[RecurringSeries] = []
        for postings in groups.values():
            for cluster in self._cluster_amounts(postings):
                series = self._build_series(cluster, today)
                if series is not None:
                    results.append(series)

        results.sort(key=lambda s: (s.next_due_date, s.merchant))
        logger.debug(
            f"Detection complete. Merchant groups: {len(groups):,}. Series: {len(results):,}."
        )
        return results

    # -------------------------------------------------------------------------
    # INTERNAL: FILTERING & GROUPING
    # -------------------------------------------------------------------------

    def _prepare(self, transactions: Iterable[Transaction]) -> List[Posting]:
        """Keeps expenses with a readable date. Refunds and deposits are dropped."""
        postings: List[Posting] = []
        for tx in transactions:
            try:
                amount = float(tx.amount)
            except (TypeError, ValueError):
                continue
            # NaN fails this comparison too
            if not amount > 0:
                continue

            posted = parse_posting_date(tx.date)
            if posted is None:
                if self.config.invalid_date_policy == "raise":
                    raise InvalidTransactionDateError(tx)
                logger.warning(
                    f"Skipping transaction {tx.transaction_id!r}: unparseable date {tx.date!r}."
                )
                continue

            postings.append(Posting(date=posted, amount=amount, transaction=tx))
        return postings

    @staticmethod
    def _group_by_merchant(postings: List[Posting]) -> Dict[str, List[Posting]]:
        """Partitions postings by merchant key, each group sorted by date."""
        grouped: Dict[str, List[Posting]] = defaultdict(list)
        for posting in postings:
            key = merchant_key(posting.transaction)
            if not key:
                continue
            grouped[key].append(posting)

        # sort is stable: same-day postings keep input order
        return {key: sorted(group, key=lambda p: p.date) for key, group in grouped.items()}

    # -------------------------------------------------------------------------
    # INTERNAL: AMOUNT CLUSTERING
    # -------------------------------------------------------------------------

    def _cluster_amounts(self, postings: List[Posting]) -> List[AmountCluster]:
        """
        Greedy first-fit clustering over date-ordered postings.

        Each posting joins the first existing cluster (in creation order)
        whose running mean is strictly within the effective tolerance, otherwise it
        seeds a new cluster.
        """
        clusters: List[AmountCluster] = []
        for posting in postings:
            target = next((c for c in clusters if c.accepts(posting.amount, self.config)), None)
            if target is None:
                clusters.append(AmountCluster.seeded_with(posting))
            else:
                target.add(posting)
        return clusters

    # -------------------------------------------------------------------------
    # INTERNAL: SERIES CONSTRUCTION
    # -------------------------------------------------------------------------

    def _build_series(self, cluster: AmountCluster, today: date) -> RecurringSeries | None:
        """
        Builds a RecurringSeries from one amount cluster.

        Returns None if the cluster is too small or its intervals match no
        known cadence.
        """
        # A single posting has no interval to read a cadence from
        if len(cluster) < max(self.config.min_occurrences, 2):
            return None

        ordered = sorted(cluster.postings, key=lambda p: p.date)
        intervals = posting_intervals([p.date for p in ordered])

        cadence = classify_cadence(intervals, self.classifiers)
        if cadence is None:
            return None

        last = ordered[-1]
        next_due = project_next_due_date(last.date, cadence_length_days(intervals), today)

        return RecurringSeries(
            merchant=last.transaction.display_name,
            average_amount=cluster.average_amount,
            cadence=cadence,
            last_transaction_date=last.date,
            next_due_date=next_due,
            occurrences=len(cluster),
        )


def detect(
    transactions: Iterable[Transaction],
    config: DetectionConfig | None = None,
    *,
    today: date,
) -> List[RecurringSeries]:
    """Functional shortcut for RecurringSeriesDetector(config).detect(...)."""
    return RecurringSeriesDetector(config).detect(transactions, today=today)
