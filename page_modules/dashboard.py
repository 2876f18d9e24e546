"""Home screen: today's sales at a glance."""
from datetime import datetime

import plotly.express as px
import streamlit as st

from core.analytics import (
    category_breakdown,
    daily_summary,
    inventory_value,
    low_stock,
    out_of_stock,
    top_sellers,
)
from core.constants import MENU_ANALYTICS, MENU_INVENTORY, SHOP_NAME, SHOP_TZ
from ui.components import CATEGORY_COLORS, category_chip
from ui.data import get_sales, get_varieties
from ui.navigation import go_to


def render(conn):
    """Render the dashboard page."""
    col_title, col_date = st.columns([3, 2])
    col_title.title(f"\U0001F366 {SHOP_NAME}")
    today = datetime.now(SHOP_TZ).date()
    day = col_date.date_input("Date", value=today, max_value=today, key="home_date")
    st.caption(
        "Today" if day == today else day.strftime("%A, %d %B %Y")
    )

    sales = get_sales(conn)
    varieties = get_varieties(conn)

    # Row 1: sales for the selected day
    summary = daily_summary(sales, day)
    col1, col2, col3 = st.columns(3)
    col1.metric("Boxes Sold", summary["units"])
    col2.metric("Revenue", f"₹{summary['revenue']:,.0f}")
    col3.metric("Profit", f"₹{summary['profit']:,.0f}")

    # Row 2: stock on hand
    value = inventory_value(varieties)
    col1, col2, col3 = st.columns(3)
    col1.metric("In Stock", int(varieties["stock"].sum()) if not varieties.empty else 0)
    col2.metric("Stock Value", f"₹{value['retail_value']:,.0f}")
    col3.metric("Out of Stock", len(out_of_stock(varieties)))

    st.markdown("---")

    st.subheader("\U0001F4CA Sales by Category")
    breakdown = category_breakdown(sales, day)
    if breakdown.empty:
        st.info("No sales recorded for this day")
    else:
        fig = px.bar(
            breakdown,
            x="category",
            y="units",
            color="category",
            color_discrete_map=CATEGORY_COLORS,
            labels={"category": "Category", "units": "Boxes"},
        )
        fig.update_layout(showlegend=False, height=260, margin=dict(t=10, b=10))
        st.plotly_chart(fig, width="stretch")

    st.subheader("\U0001F3C6 Top Sellers")
    top = top_sellers(sales, day)
    if top.empty:
        st.info("No sales yet")
    else:
        for rank, row in enumerate(top.itertuples(index=False), start=1):
            st.markdown(
                f"**{rank}. {row.variety_name}** &nbsp; {category_chip(row.category)} &nbsp; · {row.units}",
                unsafe_allow_html=True,
            )

    low = low_stock(varieties)
    if not low.empty:
        st.subheader("⚠️ Low Stock Alert")
        for row in low.itertuples(index=False):
            st.markdown(
                f"{row.name} &nbsp; {category_chip(row.category)} &nbsp; **{row.stock}** left",
                unsafe_allow_html=True,
            )

    col1, col2 = st.columns(2)
    if col1.button("\U0001F4E6 Inventory", width="stretch"):
        go_to(MENU_INVENTORY)
        st.rerun()
    if col2.button("\U0001F4C8 Analytics", width="stretch"):
        go_to(MENU_ANALYTICS)
        st.rerun()
