"""Data models for the catalog and the order ledger."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from core.constants import CATEGORIES, STATUS_PAID


@dataclass
class Variety:
    id: Optional[int]
    name: str
    category: str
    stock: int = 0
    cost: float = 0.0
    selling_price: float = 0.0

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")
        if self.stock < 0:
            raise ValueError(f"Stock cannot be negative for {self.name}")
        if self.cost < 0 or self.selling_price < 0:
            raise ValueError(f"Prices cannot be negative for {self.name}")

    @classmethod
    def from_row(cls, row) -> "Variety":
        """Build from a (id, name, category, stock, cost, selling_price) row."""
        return cls(
            id=int(row[0]),
            name=row[1],
            category=row[2],
            stock=int(row[3] or 0),
            cost=float(row[4] or 0),
            selling_price=float(row[5] or 0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "stock": self.stock,
            "cost": self.cost,
            "selling_price": self.selling_price,
        }


@dataclass
class CartLine:
    variety_id: int
    variety_name: str
    category: str
    quantity: int
    unit_price: float
    # Stock known when the line was added or loaded; None means unknown
    available: Optional[int] = None

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class OrderItem:
    variety_id: int
    variety_name: str
    category: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price

    @classmethod
    def from_line(cls, line: CartLine) -> "OrderItem":
        return cls(
            variety_id=line.variety_id,
            variety_name=line.variety_name,
            category=line.category,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )


@dataclass
class Order:
    id: Optional[int]
    order_number: int
    status: str
    items: List[OrderItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    payment_method: Optional[str] = None

    @property
    def total(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def is_paid(self) -> bool:
        return self.status == STATUS_PAID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_number": self.order_number,
            "status": self.status,
            "total": self.total,
            "payment_method": self.payment_method,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "items": [
                {
                    "variety_id": i.variety_id,
                    "variety_name": i.variety_name,
                    "category": i.category,
                    "quantity": i.quantity,
                    "unit_price": i.unit_price,
                }
                for i in self.items
            ],
        }
