"""Analytics page: last 7 days of sales and profit."""
from datetime import datetime

import plotly.express as px
import streamlit as st

from core.analytics import category_breakdown, daily_series, top_sellers
from core.constants import SHOP_NAME, SHOP_TZ
from core.exports import to_pdf_bytes
from ui.components import CATEGORY_COLORS
from ui.data import get_sales


def render(conn):
    """Render the analytics page."""
    st.header("\U0001F4C8 Analytics")
    today = datetime.now(SHOP_TZ).date()
    sales = get_sales(conn)

    st.subheader("Daily Sales & Profit")
    series = daily_series(sales, days=7, end=today)
    chart_df = series.copy()
    chart_df["day"] = chart_df["date"].map(lambda d: d.strftime("%d %b"))
    fig = px.line(
        chart_df,
        x="day",
        y=["units", "profit"],
        markers=True,
        labels={"day": "Date", "value": "", "variable": ""},
    )
    fig.update_layout(height=280, margin=dict(t=10, b=10))
    st.plotly_chart(fig, width="stretch")

    st.subheader("Today's Category Share")
    breakdown = category_breakdown(sales, today)
    if breakdown.empty:
        st.info("No sales recorded today")
    else:
        fig = px.pie(
            breakdown,
            values="units",
            names="category",
            color="category",
            color_discrete_map=CATEGORY_COLORS,
        )
        fig.update_layout(height=300, margin=dict(t=10, b=10))
        st.plotly_chart(fig, width="stretch")

    st.subheader("Weekly Comparison")
    fig = px.bar(chart_df, x="day", y="units", labels={"day": "Date", "units": "Boxes sold"})
    fig.update_traces(marker_color="#D81B60")
    fig.update_layout(height=250, margin=dict(t=10, b=10))
    st.plotly_chart(fig, width="stretch")

    st.subheader("Week's Top Sellers")
    week = sales[sales["date"] >= series["date"].iloc[0]] if not sales.empty else sales
    top = top_sellers(week, n=10)
    if top.empty:
        st.info("No sales in the last 7 days")
    else:
        st.dataframe(
            top.rename(columns={"variety_name": "Variety", "category": "Category", "units": "Boxes"}),
            width="stretch",
            hide_index=True,
        )

    report = series.rename(columns={"date": "Date", "units": "Boxes Sold", "profit": "Profit"})
    st.download_button(
        "Export 7-day report (PDF)",
        data=to_pdf_bytes(report, title=f"{SHOP_NAME} · Sales {report['Date'].iloc[0]} to {today}"),
        file_name=f"icebay_sales_{today.isoformat()}.pdf",
        mime="application/pdf",
    )
