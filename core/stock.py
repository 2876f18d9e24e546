"""Ad-hoc stock corrections typed on the inventory screen.

``"+5"`` adds, ``"-3"`` removes (never below zero) and a bare ``"12"``
sets the stock outright. Anything else leaves the stock as it was.
``set_stock`` writes an absolute value from the admin form or an import.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from core import services
from core.errors import StaleStock
from core.models import Variety
from core.services import DBConnection

logger = logging.getLogger(__name__)


def _parse_int(text: str):
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def apply_delta(expression, current: int) -> int:
    """Return the stock after applying ``expression`` to ``current``."""
    if expression is None:
        return current
    text = str(expression).strip()
    if not text:
        return current

    if text[0] in "+-":
        amount = _parse_int(text[1:])
        if amount is None:
            return current
        if text[0] == "+":
            return max(0, current + amount)
        return max(0, current - amount)

    value = _parse_int(text)
    if value is None:
        return current
    return max(0, value)


def adjust_stock(conn: DBConnection, variety_id: int, expression: str, retries: int = 1) -> Variety:
    """Apply ``expression`` to a variety's stored stock and log the change.

    The write is conditional on the stock read just before it; if another
    writer got in first the adjustment is recomputed from a fresh read.
    """
    for attempt in range(retries + 1):
        variety = services.get_variety(conn, variety_id)
        new_stock = apply_delta(expression, variety.stock)
        if new_stock == variety.stock:
            return variety
        try:
            with services.transaction(conn):
                services.update_stock(conn, variety.id, new_stock, expected=variety.stock, commit=False)
                services.record_stock_adjustment(conn, variety, new_stock, str(expression).strip(), commit=False)
        except StaleStock:
            if attempt == retries:
                raise
            logger.warning("Stock for %s changed during adjustment, retrying", variety.name)
            continue
        logger.info("Stock for %s: %s -> %s (%s)", variety.name, variety.stock, new_stock, expression)
        return replace(variety, stock=new_stock)
    return services.get_variety(conn, variety_id)


def set_stock(conn: DBConnection, variety: Variety, new_stock: int, note: str) -> Variety:
    """Overwrite the stock of ``variety`` with ``new_stock`` and log the change.

    ``variety.stock`` is the value the caller saw. If a sale or another
    correction has changed it since, ``StaleStock`` is raised and nothing
    is written.
    """
    if new_stock == variety.stock:
        return variety
    with services.transaction(conn):
        services.update_stock(conn, variety.id, new_stock, expected=variety.stock, commit=False)
        services.record_stock_adjustment(conn, variety, new_stock, note, commit=False)
    logger.info("Stock for %s set: %s -> %s (%s)", variety.name, variety.stock, new_stock, note)
    return replace(variety, stock=new_stock)
