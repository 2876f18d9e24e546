"""Tests for the starting catalog."""
from core import services
from core.seed import SEED_VARIETIES, seed_catalog


def test_seed_fills_empty_catalog_once(conn):
    expected = sum(len(names) for names in SEED_VARIETIES.values())
    assert seed_catalog(conn) == expected
    assert seed_catalog(conn) == 0
    assert len(services.list_varieties(conn)) == expected


def test_seed_disambiguates_shared_names(conn):
    seed_catalog(conn)
    mango = services.find_variety_by_name(conn, "mango")
    milk_mango = services.find_variety_by_name(conn, "Mango (Milk Base)")
    assert mango.category == "WATER BASE"
    assert milk_mango.category == "MILK BASE"
    assert milk_mango.stock == 0


def test_seed_skips_non_empty_catalog(conn, catalog):
    assert seed_catalog(conn) == 0
