"""
CSV export of holdings.

With prices applied the export carries current price and P&L columns;
without them only the tradebook-derived columns are written.
"""
from __future__ import annotations

import datetime
import logging
from typing import Optional

import pandas as pd

from models.holding import Holding

logger = logging.getLogger(__name__)

BASIC_COLUMNS = ["symbol", "exchange", "quantity", "purchaseDate", "avgPurchasePrice", "classification"]
FULL_COLUMNS = [
    "symbol", "exchange", "quantity", "purchaseDate", "avgPurchasePrice",
    "currentPrice", "pnl", "pnlPercent", "classification",
]


def _fmt(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


def holdings_to_frame(holdings: list[Holding]) -> pd.DataFrame:
    priced = any(h.is_priced for h in holdings)
    columns = FULL_COLUMNS if priced else BASIC_COLUMNS
    if not holdings:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame({
        "symbol": [h.symbol for h in holdings],
        "exchange": [h.exchange for h in holdings],
        "quantity": [h.total_quantity for h in holdings],
        "purchaseDate": [h.oldest_purchase_date.strftime("%Y-%m-%d") for h in holdings],
        "avgPurchasePrice": [_fmt(h.avg_purchase_price) for h in holdings],
        "currentPrice": [_fmt(h.current_price) for h in holdings],
        "pnl": [_fmt(h.pnl) for h in holdings],
        "pnlPercent": [_fmt(h.pnl_percent) for h in holdings],
        "classification": [h.classification.short_label for h in holdings],
    })
    return df[columns]


def export_filename(as_of: Optional[datetime.date] = None) -> str:
    day = as_of or datetime.date.today()
    return f"tax_harvesting_{day:%Y-%m-%d}.csv"


def export_holdings_csv(holdings: list[Holding], path: str) -> Optional[str]:
    """Write holdings to ``path``; returns the path, or None if there was nothing to write."""
    if not holdings:
        logger.warning("No holdings to export")
        return None
    holdings_to_frame(holdings).to_csv(path, index=False)
    return path
