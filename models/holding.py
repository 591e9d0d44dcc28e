from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Optional

from portfolio.lots import Lot
from tax.holding_period import Classification


@dataclass(frozen=True)
class LotBreakdown:
    """Aggregate over the lots of one holding that fall in the same tax term."""

    quantity: float = 0.0
    avg_price: float = 0.0
    pnl: float = 0.0

    @property
    def is_loss(self) -> bool:
        return self.quantity > 0 and self.pnl < 0


@dataclass(frozen=True)
class HoldingPnL:
    """Market-price overlay for a holding; absent until a quote is applied."""

    current_price: float
    pnl: float
    pnl_percent: float
    is_loss: bool
    short_term: LotBreakdown
    long_term: LotBreakdown
    # Date the short_term / long_term split was evaluated at
    as_of: Optional[datetime.date] = None


@dataclass
class Holding:
    """
    Open position in one stock on one exchange, as a list of FIFO lots
    (oldest first).

    ``classification`` follows the oldest lot, so a LONG_TERM holding can
    still contain short-term lots. ``pricing.short_term`` / ``pricing.long_term``
    give the per-lot split once prices are applied.
    """

    symbol: str
    isin: str
    exchange: str
    lots: list[Lot]
    total_quantity: float
    avg_purchase_price: float
    oldest_purchase_date: datetime.date
    newest_purchase_date: datetime.date
    classification: Classification
    pricing: Optional[HoldingPnL] = field(default=None)

    @property
    def is_priced(self) -> bool:
        return self.pricing is not None

    @property
    def cost_basis(self) -> float:
        return self.avg_purchase_price * self.total_quantity

    # Flat accessors; None until prices are applied

    @property
    def current_price(self) -> Optional[float]:
        return self.pricing.current_price if self.pricing else None

    @property
    def pnl(self) -> Optional[float]:
        return self.pricing.pnl if self.pricing else None

    @property
    def pnl_percent(self) -> Optional[float]:
        return self.pricing.pnl_percent if self.pricing else None

    @property
    def is_loss(self) -> Optional[bool]:
        return self.pricing.is_loss if self.pricing else None

    @property
    def st_quantity(self) -> Optional[float]:
        return self.pricing.short_term.quantity if self.pricing else None

    @property
    def lt_quantity(self) -> Optional[float]:
        return self.pricing.long_term.quantity if self.pricing else None

    @property
    def st_avg_price(self) -> Optional[float]:
        return self.pricing.short_term.avg_price if self.pricing else None

    @property
    def lt_avg_price(self) -> Optional[float]:
        return self.pricing.long_term.avg_price if self.pricing else None

    @property
    def st_pnl(self) -> Optional[float]:
        return self.pricing.short_term.pnl if self.pricing else None

    @property
    def lt_pnl(self) -> Optional[float]:
        return self.pricing.long_term.pnl if self.pricing else None
