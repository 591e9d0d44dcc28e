from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradeRecord:
    """
    One executed equity trade as it appears in a broker tradebook.

    Records are immutable. ``trade_id`` identifies the trade across
    overlapping tradebook exports and is what the merger deduplicates on.
    """

    trade_id: str
    symbol: str
    isin: str
    trade_date: datetime.date
    exchange: str
    trade_type: TradeType
    quantity: float
    price: float

    def __post_init__(self) -> None:
        if not self.trade_id:
            raise ValueError("trade_id must be non-empty")
        if not self.symbol:
            raise ValueError(f"symbol must be non-empty (trade {self.trade_id!r})")
        if not isinstance(self.trade_date, datetime.date):
            raise ValueError(
                f"trade_date must be a date, got {type(self.trade_date).__name__} "
                f"(trade {self.trade_id!r})"
            )
        try:
            trade_type = TradeType(self.trade_type)
        except ValueError:
            raise ValueError(
                f"Unknown trade type {self.trade_type!r} (trade {self.trade_id!r})"
            ) from None
        object.__setattr__(self, "trade_type", trade_type)
        if not self.quantity > 0:
            raise ValueError(f"quantity must be > 0, got {self.quantity} (trade {self.trade_id!r})")
        if not self.price >= 0:
            raise ValueError(f"price must be >= 0, got {self.price} (trade {self.trade_id!r})")

    @property
    def is_buy(self) -> bool:
        return self.trade_type is TradeType.BUY

    @property
    def trade_day(self) -> datetime.date:
        """Calendar date of the trade, dropping any time component."""
        if isinstance(self.trade_date, datetime.datetime):
            return self.trade_date.date()
        return self.trade_date

    @property
    def holding_key(self) -> tuple[str, str]:
        """(symbol, exchange): the same stock on NSE and BSE is two holdings."""
        return (self.symbol, self.exchange)

    @property
    def sort_key(self) -> datetime.datetime:
        """Trade time for chronological ordering; bare dates sort at midnight."""
        if isinstance(self.trade_date, datetime.datetime):
            return self.trade_date
        return datetime.datetime.combine(self.trade_date, datetime.time.min)
