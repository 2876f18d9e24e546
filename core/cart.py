"""In-memory cart used while an order is being composed."""
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from core.errors import InsufficientStock, OrderLocked
from core.models import CartLine, Order, Variety


class Cart:
    """Ordered line items, at most one per variety.

    ``editing_order_id`` is set while an UNPAID order is loaded for editing
    and cleared together with the lines.
    """

    def __init__(self):
        self._lines: Dict[int, CartLine] = {}
        self.editing_order_id: Optional[int] = None

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __iter__(self):
        return iter(self.lines)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def get(self, variety_id: int) -> Optional[CartLine]:
        return self._lines.get(variety_id)

    def quantity_of(self, variety_id: int) -> int:
        line = self._lines.get(variety_id)
        return line.quantity if line else 0

    def add_item(self, variety: Variety, requested_qty: int = 1) -> CartLine:
        """Add ``requested_qty`` units, snapshotting the price on first add."""
        if requested_qty <= 0:
            raise ValueError("Quantity must be positive")
        in_cart = self.quantity_of(variety.id)
        if variety.stock - in_cart < requested_qty:
            raise InsufficientStock(variety.name, in_cart + requested_qty, variety.stock)

        line = self._lines.get(variety.id)
        if line is None:
            line = CartLine(
                variety_id=variety.id,
                variety_name=variety.name,
                category=variety.category,
                quantity=requested_qty,
                unit_price=variety.selling_price,
                available=variety.stock,
            )
            self._lines[variety.id] = line
        else:
            line.quantity += requested_qty
            line.available = variety.stock
        return line

    def set_quantity(
        self, variety_id: int, new_qty: int, current: Optional[Variety] = None
    ) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes it.

        The stock check uses ``current`` when given, otherwise the stock
        known when the line was added or loaded (none if it was loaded
        without a catalog). Checkout re-checks against the store either way.
        """
        line = self._lines.get(variety_id)
        if line is None:
            return None
        if new_qty <= 0:
            self.remove_item(variety_id)
            return None
        if current is not None:
            line.available = current.stock
        if line.available is not None and new_qty > line.available:
            raise InsufficientStock(line.variety_name, new_qty, line.available)
        line.quantity = new_qty
        return line

    def remove_item(self, variety_id: int) -> None:
        self._lines.pop(variety_id, None)

    def total(self) -> float:
        return sum(line.line_total for line in self._lines.values())

    def clear(self) -> None:
        self._lines.clear()
        self.editing_order_id = None

    def load_from(self, order: Order, catalog: Optional[Mapping[int, Variety]] = None) -> None:
        """Replace the cart with a copy of an UNPAID order's items."""
        if order.is_paid:
            raise OrderLocked(f"Order #{order.order_number} is already paid")
        catalog = catalog or {}
        self._lines = {}
        for item in order.items:
            variety = catalog.get(item.variety_id)
            self._lines[item.variety_id] = CartLine(
                variety_id=item.variety_id,
                variety_name=item.variety_name,
                category=item.category,
                quantity=item.quantity,
                unit_price=item.unit_price,
                available=variety.stock if variety is not None else None,
            )
        self.editing_order_id = order.id
