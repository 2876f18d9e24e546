"""Tests for stock expressions and ad-hoc stock corrections."""
import pytest

from core import services
from core.errors import StaleStock
from core.reconciliation import record_sale
from core.stock import adjust_stock, apply_delta, set_stock


@pytest.mark.parametrize(
    "expression, current, expected",
    [
        ("+5", 3, 8),
        ("-10", 3, 0),
        ("-2", 3, 1),
        ("7", 3, 7),
        ("-0", 3, 3),
        (" +4 ", 1, 5),
        ("abc", 3, 3),
        ("", 3, 3),
        ("+", 3, 3),
        ("+x", 3, 3),
        ("+-5", 3, 3),
        ("--5", 3, 3),
        ("-+2", 3, 3),
        ("5abc", 3, 3),
        (None, 3, 3),
    ],
)
def test_apply_delta(expression, current, expected):
    assert apply_delta(expression, current) == expected


def test_adjust_stock_writes_and_logs(conn, catalog, stock_of):
    updated = adjust_stock(conn, catalog["mango"].id, "+5")
    assert updated.stock == 15
    assert stock_of(catalog["mango"]) == 15
    log = services.get_adjustments_df(conn)
    assert len(log) == 1
    assert log.iloc[0]["previous_stock"] == 10
    assert log.iloc[0]["new_stock"] == 15


def test_adjust_stock_floors_at_zero(conn, catalog):
    assert adjust_stock(conn, catalog["oreo"].id, "-10").stock == 0


def test_adjust_stock_non_numeric_is_noop(conn, catalog):
    assert adjust_stock(conn, catalog["mango"].id, "lots").stock == 10
    assert services.get_adjustments_df(conn).empty


def test_adjust_stock_retries_after_concurrent_write(conn, catalog, stock_of, monkeypatch):
    original = services.update_stock
    calls = []

    def racing_update(c, variety_id, new_stock, expected=None, commit=True):
        if not calls:
            calls.append(1)
            # Someone else sells two boxes between our read and our write
            original(c, variety_id, expected - 2)
        return original(c, variety_id, new_stock, expected=expected, commit=commit)

    monkeypatch.setattr(services, "update_stock", racing_update)
    updated = adjust_stock(conn, catalog["mango"].id, "+1")
    assert updated.stock == 9
    assert stock_of(catalog["mango"]) == 9


def test_update_stock_with_stale_expectation(conn, catalog, stock_of):
    with pytest.raises(StaleStock):
        services.update_stock(conn, catalog["mango"].id, 4, expected=9)
    assert stock_of(catalog["mango"]) == 10


def test_adjust_stock_ignores_doubled_sign(conn, catalog, stock_of):
    assert adjust_stock(conn, catalog["oreo"].id, "+-5").stock == 3
    assert stock_of(catalog["oreo"]) == 3
    assert services.get_adjustments_df(conn).empty


def test_set_stock_writes_and_logs(conn, catalog, stock_of):
    updated = set_stock(conn, catalog["mango"], 25, "admin")
    assert updated.stock == 25
    assert stock_of(catalog["mango"]) == 25
    log = services.get_adjustments_df(conn)
    assert log.iloc[0]["expression"] == "admin"
    assert log.iloc[0]["previous_stock"] == 10


def test_set_stock_refuses_to_overwrite_a_sale(conn, catalog, stock_of):
    seen = services.get_variety(conn, catalog["mango"].id)
    record_sale(conn, seen.id, 4)
    with pytest.raises(StaleStock):
        set_stock(conn, seen, 10, "admin")
    assert stock_of(seen) == 6
    assert services.get_adjustments_df(conn).empty
