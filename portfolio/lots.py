from __future__ import annotations

import datetime

# Quantities below this are treated as fully consumed
QUANTITY_EPSILON = 1e-9


class Lot:
    """
    Shares bought in one buy trade and not yet sold.

    Only ``quantity`` changes after creation; ``purchase_date`` and
    ``purchase_price`` are read-only.
    """

    __slots__ = ("quantity", "_purchase_date", "_purchase_price")

    def __init__(
        self,
        quantity: float,
        purchase_price: float,
        purchase_date: datetime.date,
    ) -> None:
        self.quantity = quantity
        self._purchase_price = purchase_price
        self._purchase_date = purchase_date

    @property
    def purchase_date(self) -> datetime.date:
        return self._purchase_date

    @property
    def purchase_price(self) -> float:
        return self._purchase_price

    @property
    def cost(self) -> float:
        return self.quantity * self._purchase_price

    @property
    def is_empty(self) -> bool:
        return self.quantity <= QUANTITY_EPSILON

    def consume(self, quantity: float) -> float:
        """Take up to ``quantity`` shares out of the lot; returns the amount taken."""
        if quantity < 0:
            raise ValueError(f"Cannot consume a negative quantity ({quantity})")
        taken = min(self.quantity, quantity)
        self.quantity -= taken
        if self.quantity <= QUANTITY_EPSILON:
            self.quantity = 0.0
        return taken

    def copy(self) -> "Lot":
        return Lot(self.quantity, self._purchase_price, self._purchase_date)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Lot):
            return NotImplemented
        return (
            self.quantity == other.quantity
            and self._purchase_price == other._purchase_price
            and self._purchase_date == other._purchase_date
        )

    def __repr__(self) -> str:
        return (
            f"Lot(quantity={self.quantity!r}, purchase_price={self._purchase_price!r}, "
            f"purchase_date={self._purchase_date!r})"
        )
