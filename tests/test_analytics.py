"""Tests for the dashboard and analytics figures."""
from datetime import date

import pandas as pd
import pytest

from core import analytics

DAY = date(2024, 5, 10)
PREV = date(2024, 5, 9)


@pytest.fixture
def sales():
    return pd.DataFrame(
        [
            {"order_id": 1, "date": DAY, "variety_name": "Mango", "category": "WATER BASE", "quantity": 3, "unit_price": 60.0, "cost": 40.0},
            {"order_id": 1, "date": DAY, "variety_name": "Oreo", "category": "MILK BASE", "quantity": 1, "unit_price": 80.0, "cost": 50.0},
            {"order_id": 2, "date": DAY, "variety_name": "Oreo", "category": "MILK BASE", "quantity": 4, "unit_price": 80.0, "cost": 50.0},
            {"order_id": 3, "date": PREV, "variety_name": "Mango", "category": "WATER BASE", "quantity": 2, "unit_price": 60.0, "cost": 40.0},
        ]
    )


@pytest.fixture
def varieties():
    return pd.DataFrame(
        [
            {"id": 1, "name": "Mango", "category": "WATER BASE", "stock": 2, "cost": 40.0, "selling_price": 60.0},
            {"id": 2, "name": "Oreo", "category": "MILK BASE", "stock": 0, "cost": 50.0, "selling_price": 80.0},
            {"id": 3, "name": "Litchi", "category": "WATER BASE", "stock": 4, "cost": 40.0, "selling_price": 60.0},
            {"id": 4, "name": "Pista", "category": "MILK BASE", "stock": 12, "cost": 45.0, "selling_price": 70.0},
        ]
    )


def test_daily_summary(sales):
    summary = analytics.daily_summary(sales, DAY)
    assert summary == {"units": 8, "revenue": 580.0, "profit": 210.0, "orders": 2}


def test_daily_summary_without_sales(sales):
    assert analytics.daily_summary(sales, date(2024, 1, 1))["units"] == 0


def test_category_breakdown_keeps_catalog_order_and_drops_zeros(sales):
    out = analytics.category_breakdown(sales, DAY)
    assert out.to_dict("records") == [
        {"category": "WATER BASE", "units": 3},
        {"category": "MILK BASE", "units": 5},
    ]


def test_top_sellers(sales):
    top = analytics.top_sellers(sales, DAY, n=1)
    assert top.iloc[0]["variety_name"] == "Oreo"
    assert top.iloc[0]["units"] == 5
    assert list(analytics.top_sellers(sales)["variety_name"]) == ["Mango", "Oreo"]


def test_low_stock_excludes_empty_and_sorts_ascending(varieties):
    low = analytics.low_stock(varieties, threshold=5)
    assert list(low["name"]) == ["Mango", "Litchi"]
    assert list(analytics.out_of_stock(varieties)["name"]) == ["Oreo"]


def test_daily_series_is_zero_filled_oldest_first(sales):
    series = analytics.daily_series(sales, days=3, end=DAY)
    assert list(series["date"]) == [date(2024, 5, 8), PREV, DAY]
    assert list(series["units"]) == [0, 2, 8]
    assert list(series["profit"]) == [0, 40, 210]


def test_daily_series_without_sales():
    empty = pd.DataFrame(columns=["date", "quantity", "unit_price", "cost"])
    series = analytics.daily_series(empty, days=7, end=DAY)
    assert len(series) == 7
    assert series["units"].sum() == 0


def test_inventory_value(varieties):
    assert analytics.inventory_value(varieties) == {
        "cost_value": 80 + 160 + 540,
        "retail_value": 120 + 240 + 840,
        "potential_profit": 1200 - 780,
    }
