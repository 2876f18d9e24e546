"""Database access for the catalog (varieties) and the order ledger."""
from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, List, Optional, Union

import pandas as pd

from core.constants import SHOP_TZ, STATUS_PAID
from core.errors import (
    InsufficientStock,
    OrderNotFound,
    StaleStock,
    StoreUnavailable,
    VarietyNotFound,
)
from core.models import Order, OrderItem, Variety

try:
    import psycopg2
    import psycopg2.extensions
except ImportError:
    psycopg2 = None

logger = logging.getLogger(__name__)

# Type alias for database connections
DBConnection = Union[sqlite3.Connection, 'psycopg2.extensions.connection']

VARIETY_COLUMNS = "id, name, category, stock, cost, selling_price"


def is_postgres(conn: DBConnection) -> bool:
    """Check if connection is PostgreSQL."""
    return psycopg2 is not None and isinstance(conn, psycopg2.extensions.connection)


def _placeholder(conn: DBConnection) -> str:
    return "%s" if is_postgres(conn) else "?"


def integrity_error(conn: DBConnection):
    return psycopg2.IntegrityError if is_postgres(conn) else sqlite3.IntegrityError


def _database_error(conn: DBConnection):
    return psycopg2.Error if is_postgres(conn) else sqlite3.Error


def now_iso() -> str:
    return datetime.now(SHOP_TZ).isoformat(timespec="seconds")


@contextmanager
def transaction(conn: DBConnection):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


@contextmanager
def _writing(conn: DBConnection, action: str, commit: bool = True):
    """Yield a cursor for a write.

    With ``commit`` the write is its own transaction; without it the caller
    owns the surrounding transaction. Integrity errors propagate unchanged,
    any other driver error becomes ``StoreUnavailable``.
    """
    cur = conn.cursor()
    try:
        yield cur
        if commit:
            conn.commit()
    except Exception as e:
        if commit:
            conn.rollback()
        if isinstance(e, integrity_error(conn)):
            raise
        if isinstance(e, _database_error(conn)):
            logger.exception("Failed to %s", action)
            raise StoreUnavailable(f"Could not {action}: {e}") from e
        raise


@contextmanager
def _reading(conn: DBConnection, action: str):
    cur = conn.cursor()
    try:
        yield cur
    except _database_error(conn) as e:
        logger.exception("Failed to %s", action)
        raise StoreUnavailable(f"Could not {action}: {e}") from e


def _insert_returning_id(conn: DBConnection, cur, query: str, params: tuple) -> int:
    if is_postgres(conn):
        cur.execute(query + " RETURNING id", params)
        return int(cur.fetchone()[0])
    cur.execute(query, params)
    return int(cur.lastrowid)


def init_db(conn: DBConnection) -> None:
    """Create tables for a new database (safe to run on existing DB)."""
    is_pg = is_postgres(conn)

    # Use SERIAL for PostgreSQL, INTEGER PRIMARY KEY AUTOINCREMENT for SQLite
    id_type = "SERIAL PRIMARY KEY" if is_pg else "INTEGER PRIMARY KEY AUTOINCREMENT"
    # Use NUMERIC for PostgreSQL, REAL for SQLite
    real_type = "NUMERIC(10,2)" if is_pg else "REAL"

    cur = conn.cursor()
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS varieties (
            id {id_type},
            name TEXT UNIQUE NOT NULL,
            category TEXT NOT NULL,
            stock INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
            cost {real_type} DEFAULT 0,
            selling_price {real_type} DEFAULT 0
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS orders (
            id {id_type},
            order_number INTEGER UNIQUE NOT NULL,
            status TEXT NOT NULL,
            total {real_type} DEFAULT 0,
            payment_method TEXT,
            created_at TEXT
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS order_items (
            id {id_type},
            order_id INTEGER NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            variety_id INTEGER,
            variety_name TEXT NOT NULL,
            category TEXT,
            quantity INTEGER NOT NULL CHECK (quantity > 0),
            unit_price {real_type} NOT NULL
        )
        """
    )
    cur.execute(
        f"""
        CREATE TABLE IF NOT EXISTS stock_adjustments (
            id {id_type},
            variety_id INTEGER NOT NULL,
            variety_name TEXT,
            previous_stock INTEGER,
            new_stock INTEGER,
            expression TEXT,
            adjusted_at TEXT
        )
        """
    )
    conn.commit()


# ============================================================================
# Catalog store
# ============================================================================

def list_varieties(conn: DBConnection, category: Optional[str] = None) -> List[Variety]:
    """Return varieties ordered by category then name."""
    placeholder = _placeholder(conn)
    query = f"SELECT {VARIETY_COLUMNS} FROM varieties"
    params: tuple = ()
    if category:
        query += f" WHERE category = {placeholder}"
        params = (category,)
    query += " ORDER BY category, name"
    with _reading(conn, "list varieties") as cur:
        cur.execute(query, params)
        rows = cur.fetchall()
    return [Variety.from_row(r) for r in rows]


def get_variety(conn: DBConnection, variety_id: int) -> Variety:
    placeholder = _placeholder(conn)
    with _reading(conn, "read variety") as cur:
        cur.execute(
            f"SELECT {VARIETY_COLUMNS} FROM varieties WHERE id = {placeholder}",
            (int(variety_id),),
        )
        row = cur.fetchone()
    if row is None:
        raise VarietyNotFound(f"Variety not found: {variety_id}")
    return Variety.from_row(row)


def find_variety_by_name(conn: DBConnection, name: str) -> Optional[Variety]:
    """Find a variety by name (case-insensitive)."""
    placeholder = _placeholder(conn)
    with _reading(conn, "find variety") as cur:
        cur.execute(
            f"SELECT {VARIETY_COLUMNS} FROM varieties WHERE LOWER(name) = {placeholder}",
            (name.strip().lower(),),
        )
        row = cur.fetchone()
    return Variety.from_row(row) if row else None


def add_variety(conn: DBConnection, variety: Variety) -> Variety:
    """Insert a new variety and return it with its id."""
    if find_variety_by_name(conn, variety.name) is not None:
        raise integrity_error(conn)("Duplicate variety name (case-insensitive)")
    placeholder = _placeholder(conn)
    placeholders = ", ".join([placeholder] * 5)
    with _writing(conn, "add variety") as cur:
        new_id = _insert_returning_id(
            conn,
            cur,
            f"INSERT INTO varieties (name, category, stock, cost, selling_price) VALUES ({placeholders})",
            (
                variety.name.strip(),
                variety.category,
                int(variety.stock),
                float(variety.cost),
                float(variety.selling_price),
            ),
        )
    logger.info("Added variety %s (%s)", variety.name, variety.category)
    return Variety(
        id=new_id,
        name=variety.name.strip(),
        category=variety.category,
        stock=variety.stock,
        cost=variety.cost,
        selling_price=variety.selling_price,
    )


def update_variety(conn: DBConnection, variety: Variety) -> None:
    """Update name, category and prices of an existing variety.

    Stock is left alone; it only changes through sales, ``update_stock``
    and the adjustments in ``core.stock``.
    """
    existing = find_variety_by_name(conn, variety.name)
    if existing is not None and existing.id != variety.id:
        raise integrity_error(conn)("Duplicate variety name (case-insensitive)")
    placeholder = _placeholder(conn)
    with _writing(conn, "update variety") as cur:
        cur.execute(
            f"""
            UPDATE varieties SET name={placeholder}, category={placeholder},
                                 cost={placeholder}, selling_price={placeholder}
            WHERE id={placeholder}
            """,
            (
                variety.name.strip(),
                variety.category,
                float(variety.cost),
                float(variety.selling_price),
                int(variety.id),
            ),
        )
        if cur.rowcount == 0:
            raise VarietyNotFound(f"Variety not found: {variety.id}")


def delete_variety(conn: DBConnection, variety_id: int) -> None:
    """Delete a variety. Past order items keep their name snapshot."""
    placeholder = _placeholder(conn)
    with _writing(conn, "delete variety") as cur:
        cur.execute(f"DELETE FROM varieties WHERE id={placeholder}", (int(variety_id),))
        if cur.rowcount == 0:
            raise VarietyNotFound(f"Variety not found: {variety_id}")


def update_stock(
    conn: DBConnection,
    variety_id: int,
    new_stock: int,
    expected: Optional[int] = None,
    commit: bool = True,
) -> None:
    """Set a variety's stock.

    When ``expected`` is given the write only happens if the stored stock
    still equals it; otherwise ``StaleStock`` is raised.
    """
    if new_stock < 0:
        raise ValueError("Stock cannot be negative")
    placeholder = _placeholder(conn)
    query = f"UPDATE varieties SET stock={placeholder} WHERE id={placeholder}"
    params: tuple = (int(new_stock), int(variety_id))
    if expected is not None:
        query += f" AND stock={placeholder}"
        params += (int(expected),)
    with _writing(conn, "update stock", commit=commit) as cur:
        cur.execute(query, params)
        if cur.rowcount == 0:
            # Distinguish a missing row from a lost race
            get_variety(conn, variety_id)
            raise StaleStock(f"Stock for variety {variety_id} changed since it was read")


def decrement_stock(
    conn: DBConnection, variety_id: int, quantity: int, commit: bool = True
) -> None:
    """Atomically take ``quantity`` units out of stock, never going below zero."""
    placeholder = _placeholder(conn)
    with _writing(conn, "decrement stock", commit=commit) as cur:
        cur.execute(
            f"""
            UPDATE varieties SET stock = stock - {placeholder}
            WHERE id = {placeholder} AND stock >= {placeholder}
            """,
            (int(quantity), int(variety_id), int(quantity)),
        )
        if cur.rowcount == 0:
            variety = get_variety(conn, variety_id)
            raise InsufficientStock(variety.name, int(quantity), variety.stock)


def record_stock_adjustment(
    conn: DBConnection,
    variety: Variety,
    new_stock: int,
    expression: str,
    commit: bool = True,
) -> None:
    placeholder = _placeholder(conn)
    placeholders = ", ".join([placeholder] * 6)
    with _writing(conn, "log stock adjustment", commit=commit) as cur:
        cur.execute(
            f"""
            INSERT INTO stock_adjustments (variety_id, variety_name, previous_stock,
                                           new_stock, expression, adjusted_at)
            VALUES ({placeholders})
            """,
            (
                int(variety.id),
                variety.name,
                int(variety.stock),
                int(new_stock),
                expression,
                now_iso(),
            ),
        )


# ============================================================================
# Order ledger
# ============================================================================

def next_order_number(conn: DBConnection) -> int:
    """Return max(order_number) + 1, starting at 1."""
    with _reading(conn, "allocate order number") as cur:
        cur.execute("SELECT MAX(order_number) FROM orders")
        row = cur.fetchone()
    return int(row[0] or 0) + 1


def _insert_items(conn: DBConnection, cur, order_id: int, items: Iterable[OrderItem]) -> None:
    placeholder = _placeholder(conn)
    placeholders = ", ".join([placeholder] * 6)
    for item in items:
        cur.execute(
            f"""
            INSERT INTO order_items (order_id, variety_id, variety_name, category,
                                     quantity, unit_price)
            VALUES ({placeholders})
            """,
            (
                int(order_id),
                int(item.variety_id),
                item.variety_name,
                item.category,
                int(item.quantity),
                float(item.unit_price),
            ),
        )


def insert_order(
    conn: DBConnection,
    order_number: int,
    status: str,
    items: List[OrderItem],
    payment_method: Optional[str] = None,
    created_at: Optional[str] = None,
    commit: bool = True,
) -> int:
    """Insert an order with its items and return the new order id."""
    placeholder = _placeholder(conn)
    placeholders = ", ".join([placeholder] * 5)
    total = sum(i.line_total for i in items)
    with _writing(conn, "insert order", commit=commit) as cur:
        order_id = _insert_returning_id(
            conn,
            cur,
            f"""
            INSERT INTO orders (order_number, status, total, payment_method, created_at)
            VALUES ({placeholders})
            """,
            (int(order_number), status, float(total), payment_method, created_at or now_iso()),
        )
        _insert_items(conn, cur, order_id, items)
    return order_id


def replace_items(
    conn: DBConnection, order_id: int, items: List[OrderItem], commit: bool = True
) -> None:
    """Delete an order's items, insert the new set and refresh its total."""
    placeholder = _placeholder(conn)
    total = sum(i.line_total for i in items)
    with _writing(conn, "replace order items", commit=commit) as cur:
        cur.execute(f"DELETE FROM order_items WHERE order_id={placeholder}", (int(order_id),))
        _insert_items(conn, cur, order_id, items)
        cur.execute(
            f"UPDATE orders SET total={placeholder} WHERE id={placeholder}",
            (float(total), int(order_id)),
        )


def update_order_status(
    conn: DBConnection,
    order_id: int,
    status: str,
    payment_method: Optional[str] = None,
    commit: bool = True,
) -> None:
    placeholder = _placeholder(conn)
    with _writing(conn, "update order status", commit=commit) as cur:
        cur.execute(
            f"UPDATE orders SET status={placeholder}, payment_method={placeholder} WHERE id={placeholder}",
            (status, payment_method, int(order_id)),
        )
        if cur.rowcount == 0:
            raise OrderNotFound(f"Order not found: {order_id}")


def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def _load_items(conn: DBConnection, order_ids: List[int]) -> dict:
    if not order_ids:
        return {}
    placeholder = _placeholder(conn)
    marks = ", ".join([placeholder] * len(order_ids))
    with _reading(conn, "read order items") as cur:
        cur.execute(
            f"""
            SELECT order_id, variety_id, variety_name, category, quantity, unit_price
            FROM order_items WHERE order_id IN ({marks}) ORDER BY id
            """,
            tuple(order_ids),
        )
        rows = cur.fetchall()
    items: dict = {oid: [] for oid in order_ids}
    for order_id, variety_id, name, category, quantity, unit_price in rows:
        items[int(order_id)].append(
            OrderItem(
                variety_id=int(variety_id) if variety_id is not None else None,
                variety_name=name,
                category=category,
                quantity=int(quantity),
                unit_price=float(unit_price),
            )
        )
    return items


def list_orders(conn: DBConnection, status: Optional[str] = None) -> List[Order]:
    """Return orders (newest number first) with their items."""
    placeholder = _placeholder(conn)
    query = "SELECT id, order_number, status, payment_method, created_at FROM orders"
    params: tuple = ()
    if status:
        query += f" WHERE status = {placeholder}"
        params = (status,)
    query += " ORDER BY order_number DESC"
    with _reading(conn, "list orders") as cur:
        cur.execute(query, params)
        rows = cur.fetchall()
    items = _load_items(conn, [int(r[0]) for r in rows])
    return [
        Order(
            id=int(r[0]),
            order_number=int(r[1]),
            status=r[2],
            payment_method=r[3],
            created_at=parse_timestamp(r[4]),
            items=items.get(int(r[0]), []),
        )
        for r in rows
    ]


def get_order(conn: DBConnection, order_id: int) -> Order:
    placeholder = _placeholder(conn)
    with _reading(conn, "read order") as cur:
        cur.execute(
            f"""
            SELECT id, order_number, status, payment_method, created_at
            FROM orders WHERE id = {placeholder}
            """,
            (int(order_id),),
        )
        row = cur.fetchone()
    if row is None:
        raise OrderNotFound(f"Order not found: {order_id}")
    items = _load_items(conn, [int(row[0])])
    return Order(
        id=int(row[0]),
        order_number=int(row[1]),
        status=row[2],
        payment_method=row[3],
        created_at=parse_timestamp(row[4]),
        items=items.get(int(row[0]), []),
    )


# ============================================================================
# DataFrame readers for pages
# ============================================================================

def get_varieties_df(conn: DBConnection) -> pd.DataFrame:
    """Return the catalog as a DataFrame (empty on failure)."""
    try:
        return pd.read_sql(f"SELECT {VARIETY_COLUMNS} FROM varieties ORDER BY category, name", conn)
    except Exception as e:
        logger.error(f"Error fetching varieties: {e}")
        return pd.DataFrame(columns=VARIETY_COLUMNS.split(", "))


def get_sales_df(conn: DBConnection) -> pd.DataFrame:
    """Return one row per item of every PAID order, with a ``date`` column."""
    placeholder = _placeholder(conn)
    query = f"""
        SELECT o.id AS order_id, o.order_number, o.created_at, o.payment_method,
               i.variety_id, i.variety_name, i.category, i.quantity, i.unit_price,
               COALESCE(v.cost, 0) AS cost
        FROM order_items i
        JOIN orders o ON o.id = i.order_id
        LEFT JOIN varieties v ON v.id = i.variety_id
        WHERE o.status = {placeholder}
    """
    try:
        df = pd.read_sql(query, conn, params=(STATUS_PAID,))
    except Exception as e:
        logger.exception("Failed to read sales: %s", e)
        df = pd.DataFrame(
            columns=[
                "order_id", "order_number", "created_at", "payment_method",
                "variety_id", "variety_name", "category", "quantity",
                "unit_price", "cost",
            ]
        )
    # created_at is stored in shop-local ISO form, so its date prefix is the sale day
    df["date"] = pd.to_datetime(df["created_at"].astype(str).str[:10], errors="coerce").dt.date
    return df


def get_adjustments_df(conn: DBConnection, days: Optional[int] = None) -> pd.DataFrame:
    query = "SELECT * FROM stock_adjustments"
    try:
        df = pd.read_sql(query + " ORDER BY id DESC", conn)
    except Exception as e:
        logger.exception("Failed to read stock adjustments: %s", e)
        return pd.DataFrame()
    if days and not df.empty:
        cutoff = (pd.Timestamp(datetime.now(SHOP_TZ).date()) - pd.Timedelta(days=int(days))).date()
        dates = pd.to_datetime(df["adjusted_at"].astype(str).str[:10], errors="coerce").dt.date
        df = df[dates >= cutoff]
    return df