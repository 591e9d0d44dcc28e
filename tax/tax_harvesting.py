from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Iterable, Optional

from config import HarvestConfig, HoldingPeriodConfig
from models.holding import Holding, LotBreakdown
from tax.holding_period import Classification, classify


@dataclass(frozen=True)
class SellOrder:
    symbol: str
    exchange: str
    quantity: float
    purchase_price: float
    purchase_date: datetime.date
    current_price: float
    expected_loss: float    # positive magnitude


def filter_by_classification(holdings: Iterable[Holding], classification: Classification) -> list[Holding]:
    """Holdings whose oldest lot puts them in ``classification``."""
    return [h for h in holdings if h.classification is classification]


class TaxHarvestingEngine:
    """
    Picks holdings whose short-term or long-term lots are trading below
    cost, i.e. losses that could be realized to offset gains.

    Selection works on the per-lot split from the price overlay, not on the
    holding's overall classification: a LONG_TERM holding whose recent lots
    are under water shows up as a short-term opportunity, and a holding can
    be listed under both terms at once.
    """

    def __init__(
        self,
        config: Optional[HarvestConfig] = None,
        holding_period: Optional[HoldingPeriodConfig] = None,
    ) -> None:
        self.config = config or HarvestConfig()
        self.holding_period = holding_period or HoldingPeriodConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def short_term_opportunities(self, holdings: Iterable[Holding]) -> list[Holding]:
        return [h for h in holdings if h.pricing and self._qualifies(h.pricing.short_term)]

    def long_term_opportunities(self, holdings: Iterable[Holding]) -> list[Holding]:
        return [h for h in holdings if h.pricing and self._qualifies(h.pricing.long_term)]

    def total_harvestable_loss(self, holdings: Iterable[Holding]) -> tuple[float, float]:
        """(short_term, long_term) unrealized loss magnitudes across opportunities."""
        holdings = list(holdings)
        st = sum(-h.pricing.short_term.pnl for h in self.short_term_opportunities(holdings))
        lt = sum(-h.pricing.long_term.pnl for h in self.long_term_opportunities(holdings))
        return st, lt

    def sell_orders(
        self,
        holding: Holding,
        classification: Classification,
        as_of: Optional[datetime.date] = None,
    ) -> list[SellOrder]:
        """
        One order per lot of the given term that is below the current price,
        oldest lot first. Unpriced holdings yield no orders.

        Lots are classified as of the date the prices were applied unless
        ``as_of`` is given, so the orders cover the same lots as
        ``pricing.short_term`` / ``pricing.long_term``.
        """
        if holding.pricing is None:
            return []
        if as_of is None:
            as_of = holding.pricing.as_of

        price = holding.pricing.current_price
        threshold = self.holding_period.long_term_threshold_days
        orders = []
        for lot in holding.lots:
            if classify(lot.purchase_date, as_of, threshold) is not classification:
                continue
            if lot.purchase_price <= price:
                continue  # lot is at a gain
            orders.append(SellOrder(
                symbol=holding.symbol,
                exchange=holding.exchange,
                quantity=lot.quantity,
                purchase_price=lot.purchase_price,
                purchase_date=lot.purchase_date,
                current_price=price,
                expected_loss=lot.quantity * (lot.purchase_price - price),
            ))
        return orders

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _qualifies(self, breakdown: LotBreakdown) -> bool:
        return breakdown.is_loss and -breakdown.pnl > self.config.min_loss_threshold
