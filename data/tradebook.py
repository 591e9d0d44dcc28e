"""
Reads broker tradebook CSV exports into TradeRecord lists.

Only equity (EQ segment) rows are kept. Rows with an unparseable date,
trade type, quantity or price, or without a trade id or symbol, are
skipped with a warning rather than failing the whole file.
"""
from __future__ import annotations

import datetime
import io
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from config import TradebookConfig
from models.trade import TradeRecord, TradeType
from tax.realized_gains import fiscal_year_label

logger = logging.getLogger(__name__)


@dataclass
class TradebookFile:
    name: str
    trades: list[TradeRecord] = field(default_factory=list)

    @property
    def trade_count(self) -> int:
        return len(self.trades)

    @property
    def date_range(self) -> Optional[tuple[datetime.date, datetime.date]]:
        if not self.trades:
            return None
        days = sorted(t.trade_day for t in self.trades)
        return days[0], days[-1]

    @property
    def fy_range(self) -> str:
        """e.g. "FY 2023-24", or "FY 2022-23 to FY 2023-24" when spanning years."""
        if self.date_range is None:
            return "No trades"
        first, last = (fiscal_year_label(d) for d in self.date_range)
        return first if first == last else f"{first} to {last}"


def _parse_date(value, formats: list[str]) -> Optional[datetime.date]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    # Some exports append a time ("2024-01-10 09:15:02"); only the date matters
    text = text.split(" ")[0].split("T")[0]
    for fmt in formats:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_number(value) -> Optional[float]:
    number = pd.to_numeric(str(value).strip(), errors="coerce")
    if pd.isna(number):
        return None
    return float(number)


def parse_tradebook(csv_content: Optional[str], config: Optional[TradebookConfig] = None) -> list[TradeRecord]:
    """Parse tradebook CSV text; returns [] for empty or malformed input."""
    cfg = config or TradebookConfig()
    if not csv_content or not isinstance(csv_content, str) or not csv_content.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(csv_content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.error("Failed to parse tradebook CSV: %s", exc)
        return []

    df.columns = [str(c).lower().strip() for c in df.columns]
    missing = [c for c in cfg.required_columns if c not in df.columns]
    if missing:
        logger.error("Invalid tradebook format: missing columns %s", missing)
        return []

    trades = []
    for row in df.to_dict("records"):
        if row["segment"].strip().upper() != cfg.segment:
            continue

        trade_date = _parse_date(row["trade_date"], cfg.date_formats)
        if trade_date is None:
            logger.warning("Skipping row with invalid trade_date: %r", row["trade_date"])
            continue

        trade_type = row["trade_type"].strip().lower()
        if trade_type not in (TradeType.BUY.value, TradeType.SELL.value):
            logger.warning("Skipping row with invalid trade_type: %r", row["trade_type"])
            continue

        quantity = _parse_number(row["quantity"])
        if quantity is None or quantity <= 0:
            logger.warning("Skipping row with invalid quantity: %r", row["quantity"])
            continue

        price = _parse_number(row["price"])
        if price is None or price < 0:
            logger.warning("Skipping row with invalid price: %r", row["price"])
            continue

        trade_id = row["trade_id"].strip()
        if not trade_id:
            logger.warning("Skipping row with missing trade_id")
            continue

        symbol = row["symbol"].strip()
        if not symbol:
            logger.warning("Skipping row with missing symbol")
            continue

        trades.append(TradeRecord(
            trade_id=trade_id,
            symbol=symbol,
            isin=row["isin"].strip(),
            trade_date=trade_date,
            exchange=row["exchange"].strip().upper() or cfg.default_exchange,
            trade_type=TradeType(trade_type),
            quantity=quantity,
            price=price,
        ))

    trades.sort(key=lambda t: t.sort_key)
    return trades


def load_tradebook(path: str, config: Optional[TradebookConfig] = None) -> TradebookFile:
    with open(path, encoding="utf-8-sig") as fh:
        content = fh.read()
    trades = parse_tradebook(content, config)
    if not trades:
        logger.warning(
            "No valid equity trades found in %s. Expected a Zerodha tradebook CSV "
            "with EQ segment trades.", path,
        )
    return TradebookFile(name=os.path.basename(path), trades=trades)
