"""Shared fixtures: an in-memory database with a small catalog."""
import sqlite3

import pytest

from core import services
from core.models import Variety


@pytest.fixture
def conn():
    c = sqlite3.connect(":memory:")
    services.init_db(c)
    yield c
    c.close()


@pytest.fixture
def catalog(conn):
    """Three varieties keyed by a short name."""
    rows = {
        "mango": Variety(None, "Mango", "WATER BASE", stock=10, cost=40, selling_price=60),
        "oreo": Variety(None, "Oreo", "MILK BASE", stock=3, cost=50, selling_price=80),
        "tub": Variety(None, "Vanilla - 4 L", "4L TUBS", stock=0, cost=400, selling_price=650),
    }
    return {key: services.add_variety(conn, v) for key, v in rows.items()}


@pytest.fixture
def stock_of(conn):
    """Read a variety's stored stock."""
    def _stock(variety):
        return services.get_variety(conn, variety.id).stock
    return _stock
