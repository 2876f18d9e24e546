"""Tests for the in-memory cart."""
import pytest

from core.cart import Cart
from core.errors import InsufficientStock, OrderLocked
from core.models import Order, OrderItem, Variety


@pytest.fixture
def mango():
    return Variety(1, "Mango", "WATER BASE", stock=5, cost=40, selling_price=60)


@pytest.fixture
def oreo():
    return Variety(2, "Oreo", "MILK BASE", stock=2, cost=50, selling_price=80)


def test_add_item_creates_line_with_price_snapshot(mango):
    cart = Cart()
    line = cart.add_item(mango, 2)
    assert line.quantity == 2
    assert line.unit_price == 60
    assert line.line_total == 120
    assert len(cart) == 1


def test_re_adding_increments_instead_of_duplicating(mango):
    cart = Cart()
    cart.add_item(mango)
    cart.add_item(mango, 2)
    assert len(cart) == 1
    assert cart.quantity_of(mango.id) == 3


def test_add_item_rejects_more_than_stock_including_cart(mango):
    cart = Cart()
    cart.add_item(mango, 4)
    with pytest.raises(InsufficientStock) as exc:
        cart.add_item(mango, 2)
    assert exc.value.available == 5
    assert cart.quantity_of(mango.id) == 4


def test_add_item_rejects_non_positive_quantity(mango):
    with pytest.raises(ValueError):
        Cart().add_item(mango, 0)


def test_price_is_not_re_read_after_add(mango):
    cart = Cart()
    cart.add_item(mango)
    mango.selling_price = 999
    cart.add_item(mango)
    cart.set_quantity(mango.id, 3)
    assert cart.get(mango.id).unit_price == 60
    assert cart.total() == 180


def test_set_quantity_zero_removes_line(mango):
    cart = Cart()
    cart.add_item(mango, 2)
    assert cart.set_quantity(mango.id, 0) is None
    assert not cart


def test_set_quantity_above_stock_fails(oreo):
    cart = Cart()
    cart.add_item(oreo)
    with pytest.raises(InsufficientStock):
        cart.set_quantity(oreo.id, 3)
    assert cart.quantity_of(oreo.id) == 1


def test_set_quantity_checks_current_stock_when_given(mango):
    cart = Cart()
    cart.add_item(mango, 2)
    with pytest.raises(InsufficientStock):
        cart.set_quantity(mango.id, 3, Variety(1, "Mango", "WATER BASE", stock=2))
    assert cart.quantity_of(mango.id) == 2
    restocked = Variety(1, "Mango", "WATER BASE", stock=9)
    assert cart.set_quantity(mango.id, 8, restocked).quantity == 8


def test_remove_item_is_unconditional(mango):
    cart = Cart()
    cart.remove_item(42)
    cart.add_item(mango)
    cart.remove_item(mango.id)
    assert len(cart) == 0


def test_total_is_sum_of_lines(mango, oreo):
    cart = Cart()
    cart.add_item(mango, 3)
    cart.add_item(oreo, 2)
    assert cart.total() == sum(l.quantity * l.unit_price for l in cart.lines) == 340


def test_clear_resets_editing_marker(mango):
    cart = Cart()
    cart.add_item(mango)
    cart.editing_order_id = 7
    cart.clear()
    assert len(cart) == 0
    assert cart.editing_order_id is None


def test_load_from_unpaid_order_copies_items(mango):
    order = Order(
        id=7,
        order_number=3,
        status="UNPAID",
        items=[OrderItem(mango.id, "Mango", "WATER BASE", 2, 55.0)],
    )
    cart = Cart()
    cart.load_from(order, {mango.id: mango})
    assert cart.editing_order_id == 7
    line = cart.get(mango.id)
    assert (line.quantity, line.unit_price, line.available) == (2, 55.0, 5)


def test_load_from_paid_order_is_locked(mango):
    order = Order(id=1, order_number=1, status="PAID", items=[OrderItem(mango.id, "Mango", "WATER BASE", 1, 60)])
    cart = Cart()
    cart.add_item(mango)
    with pytest.raises(OrderLocked):
        cart.load_from(order)
    assert cart.quantity_of(mango.id) == 1
