"""Reusable UI components."""
import streamlit as st

from core.constants import CATEGORIES

CATEGORY_COLORS = {
    "WATER BASE": "#A8E6C1",
    "MILK BASE": "#FFB3D9",
    "FAMILY PACK": "#FFE199",
    "4L TUBS": "#FFF6DB",
}

ALL_CATEGORIES = "All"


def category_chip(category: str) -> str:
    """Inline HTML badge for a category."""
    color = CATEGORY_COLORS.get(category, "#EEEEEE")
    return (
        f"<span style='background:{color};border-radius:999px;padding:2px 10px;"
        f"font-size:0.75rem;font-weight:600;color:#333'>{category}</span>"
    )


def category_filter(key: str) -> str:
    """Horizontal category selector; returns a category or ``ALL_CATEGORIES``."""
    return st.radio(
        "Category",
        [ALL_CATEGORIES] + CATEGORIES,
        horizontal=True,
        key=key,
        label_visibility="collapsed",
    )


def filter_varieties(df, search: str = "", category: str = ALL_CATEGORIES):
    """Case-insensitive name search plus optional category filter."""
    if df.empty:
        return df
    if category and category != ALL_CATEGORIES:
        df = df[df["category"] == category]
    if search:
        df = df[df["name"].str.contains(search, case=False, na=False, regex=False)]
    return df.sort_values("name", key=lambda s: s.str.casefold())


def render_varieties_table(df):
    """Render varieties as a table with friendly headers."""
    if df.empty:
        st.info("No varieties to show")
        return

    table_cols = ["name", "category", "stock", "cost", "selling_price"]
    display_df = df.copy()
    for c in table_cols:
        if c not in display_df.columns:
            display_df[c] = ""
    display_df = display_df[table_cols].rename(
        columns={
            "name": "Variety",
            "category": "Category",
            "stock": "Stock",
            "cost": "Cost",
            "selling_price": "Price",
        }
    )
    st.dataframe(
        display_df,
        width="stretch",
        hide_index=True,
        column_config={
            "Cost": st.column_config.NumberColumn("Cost", format="₹%.2f"),
            "Price": st.column_config.NumberColumn("Price", format="₹%.2f"),
        },
    )
