"""
Applies current market prices to holdings: whole-holding P&L plus a
short-term / long-term split computed lot by lot.
"""
from __future__ import annotations

import dataclasses
import datetime
import logging
from typing import Any, Iterable, Mapping, Optional

import numpy as np

from models.holding import Holding, HoldingPnL, LotBreakdown
from portfolio.lots import Lot
from tax.holding_period import LONG_TERM_THRESHOLD_DAYS, holding_days

logger = logging.getLogger(__name__)


def _last_price(quote: Any) -> Optional[float]:
    """Accepts a Quote, a {"lastPrice": ...} / {"last_price": ...} mapping or a number."""
    if quote is None:
        return None
    if isinstance(quote, (int, float)):
        return float(quote)
    if isinstance(quote, Mapping):
        for key in ("lastPrice", "last_price"):
            if quote.get(key) is not None:
                return float(quote[key])
        return None
    price = getattr(quote, "last_price", None)
    return float(price) if price is not None else None


def split_lots_by_term(
    lots: list[Lot],
    current_price: float,
    as_of: Optional[datetime.date] = None,
    threshold_days: int = LONG_TERM_THRESHOLD_DAYS,
) -> tuple[LotBreakdown, LotBreakdown]:
    """
    Partition lots by their own age into (short_term, long_term) aggregates.

    Each aggregate carries its quantity, volume-weighted purchase price and
    unrealized P&L at ``current_price``.
    """
    if not lots:
        return LotBreakdown(), LotBreakdown()

    quantity = np.array([l.quantity for l in lots], dtype=float)
    cost = np.array([l.cost for l in lots], dtype=float)
    ages = np.array([holding_days(l.purchase_date, as_of) for l in lots])
    short = ages <= threshold_days

    def _aggregate(mask):
        qty = float(quantity[mask].sum())
        total_cost = float(cost[mask].sum())
        avg = total_cost / qty if qty > 0 else 0.0
        return LotBreakdown(quantity=qty, avg_price=avg, pnl=qty * current_price - total_cost)

    return _aggregate(short), _aggregate(~short)


def price_holding(
    holding: Holding,
    current_price: float,
    as_of: Optional[datetime.date] = None,
    threshold_days: int = LONG_TERM_THRESHOLD_DAYS,
) -> Holding:
    total_cost = holding.avg_purchase_price * holding.total_quantity
    pnl = current_price * holding.total_quantity - total_cost
    pnl_percent = pnl / total_cost * 100 if total_cost > 0 else 0.0
    as_of = datetime.date.today() if as_of is None else as_of
    short_term, long_term = split_lots_by_term(holding.lots, current_price, as_of, threshold_days)

    return dataclasses.replace(holding, pricing=HoldingPnL(
        current_price=current_price,
        pnl=pnl,
        pnl_percent=pnl_percent,
        is_loss=pnl < 0,
        short_term=short_term,
        long_term=long_term,
        as_of=as_of,
    ))


def apply_prices(
    holdings: Iterable[Holding],
    prices: Optional[Mapping[str, Any]],
    as_of: Optional[datetime.date] = None,
    threshold_days: int = LONG_TERM_THRESHOLD_DAYS,
) -> list[Holding]:
    """
    Return holdings with P&L filled in from ``prices`` (keyed by symbol).

    Holdings without a quote come back unchanged, keeping any pricing from
    an earlier call, so a partial price fetch can be applied and later
    completed by calling again with more quotes.
    """
    prices = prices or {}
    updated = []
    missing = []
    for holding in holdings:
        current_price = _last_price(prices.get(holding.symbol))
        if current_price is None:
            missing.append(holding.symbol)
            updated.append(holding)
            continue
        updated.append(price_holding(holding, current_price, as_of, threshold_days))

    if missing:
        logger.warning("No price for %d holding(s): %s", len(missing), ", ".join(missing))
    return updated
