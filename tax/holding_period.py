from __future__ import annotations

import datetime
from enum import Enum
from typing import Optional

LONG_TERM_THRESHOLD_DAYS = 365


class Classification(str, Enum):
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"

    @property
    def short_label(self) -> str:
        return "ST" if self is Classification.SHORT_TERM else "LT"


def _as_date(value) -> datetime.date:
    # datetime and pandas.Timestamp are date subclasses; drop the time part
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def holding_days(reference_date, as_of=None) -> int:
    """Calendar days from ``reference_date`` to ``as_of`` (today if None)."""
    end = datetime.date.today() if as_of is None else _as_date(as_of)
    return (end - _as_date(reference_date)).days


def classify(
    reference_date,
    as_of=None,
    threshold_days: Optional[int] = None,
) -> Classification:
    """
    Short-term if held for ``threshold_days`` or fewer, long-term otherwise.

    With ``as_of=None`` the holding period runs to today, so an open lot's
    classification changes over time. Passing the sell date instead fixes
    the classification of a realized gain permanently.
    """
    if threshold_days is None:
        threshold_days = LONG_TERM_THRESHOLD_DAYS
    if holding_days(reference_date, as_of) <= threshold_days:
        return Classification.SHORT_TERM
    return Classification.LONG_TERM
