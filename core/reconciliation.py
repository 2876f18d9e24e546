"""Turn a cart into a persisted order while keeping stock consistent.

All writes of one checkout share a single transaction: the order row, its
items and every stock decrement either all commit or all roll back. Stock
decrements are conditional on enough stock remaining at write time, and
order numbers are protected by a UNIQUE constraint (a collision with a
concurrent checkout is retried with a fresh number).
"""
from __future__ import annotations

import logging
from typing import Optional

from core import services
from core.cart import Cart
from core.constants import (
    ORDER_NUMBER_RETRIES,
    PAYMENT_CASH,
    PAYMENT_METHODS,
    STATUS_PAID,
    STATUS_UNPAID,
)
from core.errors import EmptyCart, InsufficientStock, OrderLocked, StoreUnavailable
from core.models import Order, OrderItem
from core.services import DBConnection

logger = logging.getLogger(__name__)


def _resolve_payment(target_status: str, payment_method: Optional[str]) -> Optional[str]:
    if target_status not in (STATUS_PAID, STATUS_UNPAID):
        raise ValueError(f"Unknown order status: {target_status}")
    if target_status == STATUS_UNPAID:
        return None
    method = payment_method or PAYMENT_CASH
    if method not in PAYMENT_METHODS:
        raise ValueError(f"Unknown payment method: {method}")
    return method


def _check_stock(conn: DBConnection, cart: Cart) -> None:
    """Re-check every line against the stock stored right now."""
    for line in cart.lines:
        variety = services.get_variety(conn, line.variety_id)
        if variety.stock < line.quantity:
            raise InsufficientStock(variety.name, line.quantity, variety.stock)


def checkout(
    conn: DBConnection,
    cart: Cart,
    target_status: str,
    editing_order_id: Optional[int] = None,
    payment_method: Optional[str] = None,
) -> Order:
    """Commit ``cart`` as a new order or over the UNPAID order being edited.

    Raises ``EmptyCart``, ``InsufficientStock``, ``OrderLocked`` or
    ``StoreUnavailable``; on any failure nothing is written and the cart is
    left untouched. On success the cart is cleared.
    """
    method = _resolve_payment(target_status, payment_method)
    if editing_order_id is None:
        editing_order_id = cart.editing_order_id

    if not cart:
        raise EmptyCart()

    if target_status == STATUS_PAID:
        _check_stock(conn, cart)

    existing = None
    if editing_order_id is not None:
        existing = services.get_order(conn, editing_order_id)
        if existing.is_paid:
            raise OrderLocked(f"Order #{existing.order_number} is already paid")

    items = [OrderItem.from_line(line) for line in cart.lines]

    if existing is not None:
        order = _update_existing(conn, existing, items, target_status, method)
    else:
        order = _insert_new(conn, items, target_status, method)

    cart.clear()
    logger.info(
        "Order #%s committed as %s (%d items, total %.2f)",
        order.order_number,
        order.status,
        len(order.items),
        order.total,
    )
    return order


def _decrement_all(conn: DBConnection, items) -> None:
    for item in items:
        services.decrement_stock(conn, item.variety_id, item.quantity, commit=False)


def _update_existing(
    conn: DBConnection,
    existing: Order,
    items,
    target_status: str,
    method: Optional[str],
) -> Order:
    with services.transaction(conn):
        services.replace_items(conn, existing.id, items, commit=False)
        if target_status == STATUS_PAID:
            services.update_order_status(conn, existing.id, STATUS_PAID, method, commit=False)
            _decrement_all(conn, items)
    return Order(
        id=existing.id,
        order_number=existing.order_number,
        status=target_status,
        items=list(items),
        created_at=existing.created_at,
        payment_method=method,
    )


def _insert_new(conn: DBConnection, items, target_status: str, method: Optional[str]) -> Order:
    for attempt in range(1, ORDER_NUMBER_RETRIES + 1):
        order_number = services.next_order_number(conn)
        created_at = services.now_iso()
        try:
            with services.transaction(conn):
                order_id = services.insert_order(
                    conn,
                    order_number,
                    target_status,
                    items,
                    payment_method=method,
                    created_at=created_at,
                    commit=False,
                )
                if target_status == STATUS_PAID:
                    _decrement_all(conn, items)
        except services.integrity_error(conn) as e:
            if attempt == ORDER_NUMBER_RETRIES:
                raise StoreUnavailable(f"Could not allocate an order number: {e}") from e
            logger.warning("Order number %s already taken, retrying", order_number)
            continue
        return Order(
            id=order_id,
            order_number=order_number,
            status=target_status,
            items=list(items),
            created_at=services.parse_timestamp(created_at),
            payment_method=method,
        )
    raise StoreUnavailable("Could not allocate an order number")


def pay_order(conn: DBConnection, order_id: int, payment_method: str = PAYMENT_CASH) -> Order:
    """Pay an UNPAID order exactly as it stands."""
    order = services.get_order(conn, order_id)
    cart = Cart()
    cart.load_from(order)
    return checkout(conn, cart, STATUS_PAID, editing_order_id=order.id, payment_method=payment_method)


def record_sale(
    conn: DBConnection,
    variety_id: int,
    quantity: int,
    payment_method: str = PAYMENT_CASH,
) -> Order:
    """Record a single-variety paid sale."""
    cart = Cart()
    cart.add_item(services.get_variety(conn, variety_id), quantity)
    return checkout(conn, cart, STATUS_PAID, payment_method=payment_method)
