"""Errors raised by the order and stock core.

Pages catch ``CheckoutError`` around each button handler and show its
message to the operator.
"""
from __future__ import annotations


class CheckoutError(Exception):
    """Base class for every recoverable order/stock failure."""


class EmptyCart(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InsufficientStock(CheckoutError):
    """Requested quantity exceeds the stock on hand for a variety."""

    def __init__(self, variety_name: str, requested: int, available: int) -> None:
        self.variety_name = variety_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {variety_name}: requested {requested}, available {available}"
        )


class OrderLocked(CheckoutError):
    """The order is PAID (or missing) and can no longer be edited."""


class OrderNotFound(OrderLocked):
    pass


class VarietyNotFound(CheckoutError):
    pass


class StaleStock(CheckoutError):
    """A conditional stock update found a different value than expected."""


class StoreUnavailable(CheckoutError):
    """The backing database call failed."""
