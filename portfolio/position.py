from __future__ import annotations

import datetime
from typing import Optional

from models.holding import Holding
from models.trade import TradeRecord
from portfolio.lots import QUANTITY_EPSILON, Lot
from tax.holding_period import classify
from tax.realized_gains import RealizedGainEntry


class Position:
    """FIFO lot state for one (symbol, exchange) pair."""

    def __init__(self, symbol: str, exchange: str, isin: str = "") -> None:
        self.symbol = symbol
        self.exchange = exchange
        self.isin = isin
        self.lots: list[Lot] = []

    def total_quantity(self) -> float:
        return sum(l.quantity for l in self.lots)

    def avg_purchase_price(self) -> float:
        total = self.total_quantity()
        if total <= QUANTITY_EPSILON:
            return 0.0
        return sum(l.cost for l in self.lots) / total

    def buy(self, trade: TradeRecord) -> None:
        # Trades arrive in date order, so appending keeps lots oldest-first
        self.lots.append(Lot(trade.quantity, trade.price, trade.trade_day))

    def sell(self, trade: TradeRecord, threshold_days: Optional[int] = None) -> dict:
        """
        Consume lots oldest-first for a sell trade.

        Each lot touched produces its own realized gain entry, since lots
        bought on different dates can fall in different tax terms.
        Returns a dict with the entries and any quantity left unmatched
        once every lot is used up.
        """
        remaining = trade.quantity
        entries = []

        for lot in self.lots:
            if remaining <= QUANTITY_EPSILON:
                break

            taken = lot.consume(remaining)
            remaining -= taken

            entries.append(RealizedGainEntry(
                symbol=self.symbol,
                exchange=self.exchange,
                quantity=taken,
                sell_date=trade.trade_day,
                sell_price=trade.price,
                purchase_price=lot.purchase_price,
                purchase_date=lot.purchase_date,
                gain_loss=taken * (trade.price - lot.purchase_price),
                classification=classify(lot.purchase_date, trade.trade_day, threshold_days),
            ))

        self.lots = [l for l in self.lots if not l.is_empty]

        return {
            "entries": entries,
            "unmatched_quantity": remaining if remaining > QUANTITY_EPSILON else 0.0,
        }

    def to_holding(
        self,
        as_of: Optional[datetime.date] = None,
        threshold_days: Optional[int] = None,
    ) -> Optional[Holding]:
        """Snapshot of the open lots, or None once the position is fully sold."""
        if not self.lots or self.total_quantity() <= QUANTITY_EPSILON:
            return None

        dates = [l.purchase_date for l in self.lots]
        oldest = min(dates)
        return Holding(
            symbol=self.symbol,
            isin=self.isin,
            exchange=self.exchange,
            lots=[l.copy() for l in self.lots],
            total_quantity=self.total_quantity(),
            avg_purchase_price=self.avg_purchase_price(),
            oldest_purchase_date=oldest,
            newest_purchase_date=max(dates),
            classification=classify(oldest, as_of, threshold_days),
        )
