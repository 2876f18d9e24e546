"""Tests for the catalog and ledger store functions."""
import sqlite3

import pytest

from core import services
from core.constants import STATUS_PAID, STATUS_UNPAID
from core.errors import OrderNotFound, StoreUnavailable, VarietyNotFound
from core.models import OrderItem, Variety
from core.reconciliation import record_sale


def test_init_db_is_idempotent(conn):
    services.init_db(conn)
    assert services.list_varieties(conn) == []


def test_add_and_get_variety(conn):
    added = services.add_variety(conn, Variety(None, " Pista ", "MILK BASE", 4, 45, 70))
    assert added.id is not None
    assert services.get_variety(conn, added.id) == Variety(added.id, "Pista", "MILK BASE", 4, 45.0, 70.0)


def test_duplicate_name_is_case_insensitive(conn, catalog):
    with pytest.raises(sqlite3.IntegrityError):
        services.add_variety(conn, Variety(None, "MANGO", "MILK BASE"))


def test_list_varieties_orders_and_filters(conn, catalog):
    names = [v.name for v in services.list_varieties(conn)]
    assert names == ["Vanilla - 4 L", "Oreo", "Mango"]
    assert [v.name for v in services.list_varieties(conn, category="MILK BASE")] == ["Oreo"]


def test_update_and_delete_variety(conn, catalog):
    mango = catalog["mango"]
    mango.selling_price = 65
    services.update_variety(conn, mango)
    assert services.get_variety(conn, mango.id).selling_price == 65

    services.delete_variety(conn, mango.id)
    with pytest.raises(VarietyNotFound):
        services.get_variety(conn, mango.id)
    with pytest.raises(VarietyNotFound):
        services.delete_variety(conn, mango.id)


def test_update_variety_keeps_stock_sold_since_read(conn, catalog):
    mango = services.get_variety(conn, catalog["mango"].id)
    record_sale(conn, mango.id, 4)
    mango.selling_price = 70
    mango.stock = 10
    services.update_variety(conn, mango)
    stored = services.get_variety(conn, mango.id)
    assert stored.selling_price == 70
    assert stored.stock == 6


def test_rename_to_existing_name_is_rejected(conn, catalog):
    oreo = catalog["oreo"]
    oreo.name = "mango"
    with pytest.raises(sqlite3.IntegrityError):
        services.update_variety(conn, oreo)


def test_variety_validation():
    with pytest.raises(ValueError):
        Variety(None, "Odd", "SORBET")
    with pytest.raises(ValueError):
        Variety(None, "Odd", "MILK BASE", stock=-1)


def test_ledger_round_trip(conn, catalog):
    items = [OrderItem(catalog["mango"].id, "Mango", "WATER BASE", 2, 60.0)]
    assert services.next_order_number(conn) == 1
    order_id = services.insert_order(conn, 1, STATUS_UNPAID, items)
    assert services.next_order_number(conn) == 2

    services.replace_items(conn, order_id, items + [OrderItem(catalog["oreo"].id, "Oreo", "MILK BASE", 1, 80.0)])
    services.update_order_status(conn, order_id, STATUS_PAID, "CASH")

    order = services.get_order(conn, order_id)
    assert order.status == STATUS_PAID
    assert order.payment_method == "CASH"
    assert order.total == 200
    assert [o.id for o in services.list_orders(conn, status=STATUS_PAID)] == [order_id]
    assert services.list_orders(conn, status=STATUS_UNPAID) == []


def test_missing_order(conn):
    with pytest.raises(OrderNotFound):
        services.get_order(conn, 5)
    with pytest.raises(OrderNotFound):
        services.update_order_status(conn, 5, STATUS_PAID)


def test_database_errors_become_store_unavailable(conn):
    conn.execute("DROP TABLE varieties")
    with pytest.raises(StoreUnavailable):
        services.list_varieties(conn)
    with pytest.raises(StoreUnavailable):
        services.update_stock(conn, 1, 3)


def test_sales_df_only_contains_paid_items(conn, catalog):
    items = [OrderItem(catalog["mango"].id, "Mango", "WATER BASE", 2, 60.0)]
    services.insert_order(conn, 1, STATUS_PAID, items, payment_method="CASH", created_at="2024-05-01T10:00:00+05:30")
    services.insert_order(conn, 2, STATUS_UNPAID, items, created_at="2024-05-01T11:00:00+05:30")

    sales = services.get_sales_df(conn)
    assert len(sales) == 1
    row = sales.iloc[0]
    assert row["quantity"] == 2
    assert row["cost"] == 40
    assert str(row["date"]) == "2024-05-01"


def test_varieties_df(conn, catalog):
    df = services.get_varieties_df(conn)
    assert list(df.columns) == ["id", "name", "category", "stock", "cost", "selling_price"]
    assert len(df) == 3
