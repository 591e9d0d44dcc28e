from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import pandas as pd

from config import HoldingPeriodConfig
from models.holding import Holding
from models.trade import TradeRecord
from portfolio.position import Position
from tax.realized_gains import RealizedGainEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OversellWarning:
    """A sell that found fewer open shares than it tried to sell."""

    symbol: str
    exchange: str
    trade_id: str
    sell_date: datetime.date
    requested_quantity: float
    unmatched_quantity: float


@dataclass
class LedgerResult:
    holdings: list[Holding] = field(default_factory=list)
    realized_gains: list[RealizedGainEntry] = field(default_factory=list)
    warnings: list[OversellWarning] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """One row per open holding."""
        columns = [
            "symbol", "exchange", "isin", "total_quantity", "avg_purchase_price",
            "oldest_purchase_date", "newest_purchase_date", "classification", "lots",
        ]
        rows = [
            {
                "symbol": h.symbol,
                "exchange": h.exchange,
                "isin": h.isin,
                "total_quantity": h.total_quantity,
                "avg_purchase_price": h.avg_purchase_price,
                "oldest_purchase_date": h.oldest_purchase_date,
                "newest_purchase_date": h.newest_purchase_date,
                "classification": h.classification.value,
                "lots": len(h.lots),
            }
            for h in self.holdings
        ]
        return pd.DataFrame(rows, columns=columns)


class LotLedger:
    """
    Replays a trade history per (symbol, exchange) with FIFO lot matching.

    Every call to ``process`` starts from an empty book, so the same trades
    always give the same result. Groups never interact: NSE and BSE trades
    in the same stock are matched separately.
    """

    def __init__(
        self,
        as_of: Optional[datetime.date] = None,
        config: Optional[HoldingPeriodConfig] = None,
    ) -> None:
        if config is None:
            config = HoldingPeriodConfig()
        self.config = config
        self.as_of = as_of

    def process(self, trades: Optional[Iterable[TradeRecord]]) -> LedgerResult:
        result = LedgerResult()
        if not trades:
            return result

        threshold = self.config.long_term_threshold_days
        for key, group in self._group(trades).items():
            # A sell must never match a lot bought after it
            group = sorted(group, key=lambda t: t.sort_key)
            position = self._replay(group, threshold, result)

            holding = position.to_holding(as_of=self.as_of, threshold_days=threshold)
            if holding is None:
                logger.debug("%s:%s fully sold; no open holding", *key)
                continue
            result.holdings.append(holding)

        result.holdings.sort(key=lambda h: (h.symbol, h.exchange))
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _group(trades: Iterable[TradeRecord]) -> dict[tuple[str, str], list[TradeRecord]]:
        groups: dict[tuple[str, str], list[TradeRecord]] = {}
        for trade in trades:
            if not isinstance(trade, TradeRecord):
                raise TypeError(f"Expected TradeRecord, got {type(trade).__name__}")
            groups.setdefault(trade.holding_key, []).append(trade)
        return groups

    @staticmethod
    def _replay(group: list[TradeRecord], threshold: int, result: LedgerResult) -> Position:
        first = group[0]
        position = Position(first.symbol, first.exchange, isin=first.isin)

        for trade in group:
            if trade.isin and not position.isin:
                position.isin = trade.isin

            if trade.is_buy:
                position.buy(trade)
                continue

            sold = position.sell(trade, threshold_days=threshold)
            result.realized_gains.extend(sold["entries"])

            unmatched = sold["unmatched_quantity"]
            if unmatched > 0:
                logger.warning(
                    "Oversell on %s:%s (trade %s, %s): %g of %g shares "
                    "could not be matched to open lots",
                    trade.symbol, trade.exchange, trade.trade_id,
                    trade.trade_day, unmatched, trade.quantity,
                )
                result.warnings.append(OversellWarning(
                    symbol=trade.symbol,
                    exchange=trade.exchange,
                    trade_id=trade.trade_id,
                    sell_date=trade.trade_day,
                    requested_quantity=trade.quantity,
                    unmatched_quantity=unmatched,
                ))

        return position
