"""Tests for catalog export and import."""
from io import BytesIO

import pandas as pd

from core import services
from core.errors import StoreUnavailable
from core.exports import catalog_frame, import_catalog, parse_catalog_upload, to_excel_bytes, to_pdf_bytes
from core.models import Variety
from core.reconciliation import record_sale


def test_excel_export_reads_back(conn, catalog):
    from core.services import get_varieties_df

    frame = catalog_frame(get_varieties_df(conn))
    data = to_excel_bytes(frame)
    assert data[:2] == b"PK"
    back = pd.read_excel(BytesIO(data))
    assert list(back.columns) == ["Name", "Category", "Stock", "Cost", "Selling Price"]
    assert set(back["Name"]) == {"Mango", "Oreo", "Vanilla - 4 L"}


def test_excel_export_of_empty_catalog():
    frame = catalog_frame(pd.DataFrame())
    assert to_excel_bytes(frame)[:2] == b"PK"


def test_pdf_export():
    df = pd.DataFrame({"Date": ["2024-05-10"], "Boxes Sold": [8], "Profit": [210]})
    assert to_pdf_bytes(df, title="Weekly report").startswith(b"%PDF")


def test_parse_catalog_upload_accepts_aliases_and_reports_bad_rows():
    upload = pd.DataFrame(
        {
            "Variety": ["Pista", "Kulfi", "", "Shamam"],
            "Category": ["milk base", "SORBET", "WATER BASE", "MILK BASE"],
            "Stock": [5, 2, 1, None],
            "Cost": [45, 40, 1, 30],
            "Price": [70, 60, 1, "fifty"],
        }
    )
    varieties, errors = parse_catalog_upload(upload)

    assert [(v.name, v.category, v.stock, v.selling_price) for v in varieties] == [
        ("Pista", "MILK BASE", 5, 70.0)
    ]
    assert len(errors) == 2
    assert errors[0].startswith("Row 3")
    assert errors[1].startswith("Row 5")


def test_parse_catalog_upload_requires_columns():
    varieties, errors = parse_catalog_upload(pd.DataFrame({"Stock": [1]}))
    assert varieties == []
    assert "name" in errors[0]


def test_import_catalog_adds_and_updates(conn, catalog):
    result = import_catalog(
        conn,
        [
            Variety(None, "Pista", "MILK BASE", stock=5, cost=45, selling_price=70),
            Variety(None, "mango", "WATER BASE", stock=12, cost=40, selling_price=65),
        ],
    )
    assert (result.added, result.updated, result.stale, result.error) == (1, 1, [], None)
    mango = services.get_variety(conn, catalog["mango"].id)
    assert (mango.name, mango.stock, mango.selling_price) == ("mango", 12, 65)
    assert services.find_variety_by_name(conn, "Pista").stock == 5


def test_import_catalog_keeps_stock_sold_during_import(conn, catalog, stock_of, monkeypatch):
    original = services.update_variety

    def update_then_sell(c, variety):
        original(c, variety)
        record_sale(c, variety.id, 4)

    monkeypatch.setattr(services, "update_variety", update_then_sell)
    result = import_catalog(conn, [Variety(None, "Mango", "WATER BASE", stock=15, cost=40, selling_price=62)])
    assert result.stale == ["Mango"]
    assert result.error is None
    assert stock_of(catalog["mango"]) == 6


def test_import_catalog_stops_on_failure(conn, catalog, monkeypatch):
    def broken_add(c, variety):
        raise StoreUnavailable("Could not add variety: disk I/O error")

    monkeypatch.setattr(services, "add_variety", broken_add)
    result = import_catalog(
        conn,
        [
            Variety(None, "Mango", "WATER BASE", stock=10, cost=40, selling_price=61),
            Variety(None, "Pista", "MILK BASE", stock=5),
            Variety(None, "Kulfi", "MILK BASE", stock=5),
        ],
    )
    assert result.updated == 1
    assert result.added == 0
    assert result.error.startswith("Pista")
    assert services.find_variety_by_name(conn, "Kulfi") is None
