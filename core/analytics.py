"""Daily and weekly sales figures computed from the sales DataFrame.

``sales`` is the frame returned by ``services.get_sales_df``: one row per
item of a PAID order with ``date``, ``category``, ``variety_name``,
``quantity``, ``unit_price``, ``cost`` and ``order_id`` columns.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

import pandas as pd

from core.constants import CATEGORIES, LOW_STOCK_THRESHOLD_DEFAULT


def _for_day(sales: pd.DataFrame, day: date) -> pd.DataFrame:
    if sales.empty:
        return sales
    return sales[sales["date"] == day]


def _with_amounts(sales: pd.DataFrame) -> pd.DataFrame:
    sales = sales.copy()
    sales["revenue"] = sales["quantity"] * sales["unit_price"]
    sales["profit"] = (sales["unit_price"] - sales["cost"].fillna(0)) * sales["quantity"]
    return sales


def daily_summary(sales: pd.DataFrame, day: date) -> dict:
    """Units sold, revenue, profit and order count for one day."""
    rows = _for_day(sales, day)
    if rows.empty:
        return {"units": 0, "revenue": 0.0, "profit": 0.0, "orders": 0}
    rows = _with_amounts(rows)
    return {
        "units": int(rows["quantity"].sum()),
        "revenue": round(float(rows["revenue"].sum()), 2),
        "profit": round(float(rows["profit"].sum()), 2),
        "orders": int(rows["order_id"].nunique()),
    }


def category_breakdown(sales: pd.DataFrame, day: Optional[date] = None) -> pd.DataFrame:
    """Units sold per category in catalog order, categories with no sales dropped."""
    rows = sales if day is None else _for_day(sales, day)
    if rows.empty:
        return pd.DataFrame(columns=["category", "units"])
    units = rows.groupby("category")["quantity"].sum()
    out = pd.DataFrame(
        {"category": CATEGORIES, "units": [int(units.get(c, 0)) for c in CATEGORIES]}
    )
    return out[out["units"] > 0].reset_index(drop=True)


def top_sellers(sales: pd.DataFrame, day: Optional[date] = None, n: int = 5) -> pd.DataFrame:
    """The ``n`` varieties with the most units sold."""
    rows = sales if day is None else _for_day(sales, day)
    if rows.empty:
        return pd.DataFrame(columns=["variety_name", "category", "units"])
    grouped = (
        rows.groupby(["variety_name", "category"], as_index=False)["quantity"]
        .sum()
        .rename(columns={"quantity": "units"})
    )
    return grouped.sort_values(["units", "variety_name"], ascending=[False, True]).head(n).reset_index(drop=True)


def low_stock(
    varieties: pd.DataFrame, threshold: int = LOW_STOCK_THRESHOLD_DEFAULT, limit: Optional[int] = 5
) -> pd.DataFrame:
    """Varieties still in stock but below ``threshold``, lowest first."""
    if varieties.empty:
        return varieties
    low = varieties[(varieties["stock"] > 0) & (varieties["stock"] < threshold)]
    low = low.sort_values(["stock", "name"])
    if limit:
        low = low.head(limit)
    return low.reset_index(drop=True)


def out_of_stock(varieties: pd.DataFrame) -> pd.DataFrame:
    if varieties.empty:
        return varieties
    return varieties[varieties["stock"] == 0].reset_index(drop=True)


def daily_series(sales: pd.DataFrame, days: int = 7, end: Optional[date] = None) -> pd.DataFrame:
    """Units and profit per day for the last ``days`` days, oldest first, zero-filled."""
    end = end or date.today()
    all_days = [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    if sales.empty:
        units = pd.Series(dtype="int64")
        profit = pd.Series(dtype="float64")
    else:
        rows = _with_amounts(sales)
        units = rows.groupby("date")["quantity"].sum()
        profit = rows.groupby("date")["profit"].sum()
    return pd.DataFrame(
        {
            "date": all_days,
            "units": [int(units.get(d, 0)) for d in all_days],
            "profit": [int(round(float(profit.get(d, 0.0)))) for d in all_days],
        }
    )


def inventory_value(varieties: pd.DataFrame) -> dict:
    """Stock value at cost and at selling price."""
    if varieties.empty:
        return {"cost_value": 0.0, "retail_value": 0.0, "potential_profit": 0.0}
    cost_value = float((varieties["stock"] * varieties["cost"]).sum())
    retail_value = float((varieties["stock"] * varieties["selling_price"]).sum())
    return {
        "cost_value": round(cost_value, 2),
        "retail_value": round(retail_value, 2),
        "potential_profit": round(retail_value - cost_value, 2),
    }
