"""
Realized capital gains: one entry per lot consumed by a sell, and the
STCG / STCL / LTCG / LTCL summary for a financial year.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Iterable, Optional

import pandas as pd

from config import FiscalYearConfig
from tax.holding_period import Classification


@dataclass(frozen=True)
class RealizedGainEntry:
    symbol: str
    exchange: str
    quantity: float
    sell_date: datetime.date
    sell_price: float
    purchase_price: float
    purchase_date: datetime.date
    gain_loss: float
    classification: Classification

    @property
    def sell_value(self) -> float:
        return self.quantity * self.sell_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.purchase_price


@dataclass
class RealizedGainsSummary:
    # Loss buckets hold positive magnitudes
    stcg: float = 0.0
    stcl: float = 0.0
    ltcg: float = 0.0
    ltcl: float = 0.0
    net_short_term: float = 0.0
    net_long_term: float = 0.0
    entries: list[RealizedGainEntry] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "RealizedGainsSummary":
        return cls()

    def to_frame(self) -> pd.DataFrame:
        """Entries as a DataFrame, one row per consumed lot."""
        columns = [
            "symbol", "exchange", "quantity", "sell_date", "sell_price",
            "purchase_price", "purchase_date", "gain_loss", "classification",
        ]
        rows = [
            {
                "symbol": e.symbol,
                "exchange": e.exchange,
                "quantity": e.quantity,
                "sell_date": e.sell_date,
                "sell_price": e.sell_price,
                "purchase_price": e.purchase_price,
                "purchase_date": e.purchase_date,
                "gain_loss": e.gain_loss,
                "classification": e.classification.value,
            }
            for e in self.entries
        ]
        return pd.DataFrame(rows, columns=columns)


def _as_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def fiscal_year_start(
    as_of: Optional[datetime.date] = None,
    config: Optional[FiscalYearConfig] = None,
) -> datetime.date:
    """First day of the financial year containing ``as_of`` (today if None)."""
    cfg = config or FiscalYearConfig()
    day = _as_date(as_of) if as_of is not None else datetime.date.today()
    start = datetime.date(day.year, cfg.start_month, cfg.start_day)
    if day < start:
        start = datetime.date(day.year - 1, cfg.start_month, cfg.start_day)
    return start


def fiscal_year_label(day: datetime.date, config: Optional[FiscalYearConfig] = None) -> str:
    """e.g. 2023-04-01 .. 2024-03-31 -> "FY 2023-24"."""
    start_year = fiscal_year_start(day, config).year
    return f"FY {start_year}-{str(start_year + 1)[-2:]}"


def summarize(
    entries: Iterable[RealizedGainEntry],
    fiscal_year_start: datetime.date,
) -> RealizedGainsSummary:
    """
    Bucket realized gains sold on or after ``fiscal_year_start``.

    Earlier entries are left out of the totals and the returned entry list
    but are not otherwise invalid.
    """
    cutoff = _as_date(fiscal_year_start)
    fy_entries = [e for e in (entries or []) if _as_date(e.sell_date) >= cutoff]

    stcg = stcl = ltcg = ltcl = 0.0
    for entry in fy_entries:
        if entry.classification is Classification.SHORT_TERM:
            if entry.gain_loss >= 0:
                stcg += entry.gain_loss
            else:
                stcl += abs(entry.gain_loss)
        else:
            if entry.gain_loss >= 0:
                ltcg += entry.gain_loss
            else:
                ltcl += abs(entry.gain_loss)

    return RealizedGainsSummary(
        stcg=stcg,
        stcl=stcl,
        ltcg=ltcg,
        ltcl=ltcl,
        net_short_term=stcg - stcl,
        net_long_term=ltcg - ltcl,
        entries=fy_entries,
    )
