"""
merchant.py
------------
Merchant normalization. Turns a transaction's display name into the key
used to group postings from the same counterparty.

    "NETFLIX.COM (ref #1234)"  ->  "netflixcom"
    "AT&T  Internet"           ->  "att internet"
"""

import re

from core.models import Transaction


_PARENTHETICAL = re.compile(r"\(.*?\)")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_merchant_key(name: str | None) -> str:
    """
    Canonical grouping key for a merchant name.

    Lowercases, drops parenthetical groups, strips anything that is not a
    letter, digit or whitespace, collapses whitespace and trims. May return
    an empty string; callers must not group on it.
    """
    if not name:
        return ""
    key = name.lower()
    key = _PARENTHETICAL.sub("", key)
    key = _NON_ALPHANUMERIC.sub("", key)
    key = _WHITESPACE_RUN.sub(" ", key)
    return key.strip()


def merchant_key(transaction: Transaction) -> str:
    """Grouping key from the transaction's most specific available name."""
    return normalize_merchant_key(transaction.display_name)
