"""Inventory page: browse varieties and correct stock levels."""
import logging

import streamlit as st

from core.errors import CheckoutError
from core.stock import adjust_stock
from ui.components import category_chip, category_filter, filter_varieties
from ui.data import bump_cache_version, get_adjustments, get_varieties

logger = logging.getLogger(__name__)


def _submit_adjustment(conn, variety_id: int, name: str, key: str, before: int) -> None:
    """on_change handler for a variety's stock input."""
    expression = st.session_state.get(key, "")
    st.session_state[key] = ""
    if not str(expression).strip():
        return
    try:
        updated = adjust_stock(conn, variety_id, expression)
    except CheckoutError as e:
        st.toast(f"❌ {e}", icon="⚠️")
        return
    except Exception as e:
        logger.exception("Stock adjustment failed for %s", name)
        st.error(f"Could not update stock for {name}: {e}")
        return
    if updated.stock != before:
        st.toast(f"{name} updated · Stock: {before} → {updated.stock}", icon="\U0001F4E6")
        bump_cache_version("varieties")


def render(conn):
    """Render the inventory page."""
    st.header("\U0001F4E6 Inventory")
    df = get_varieties(conn)

    search = st.text_input("Search flavors...", key="inv_search")
    category = category_filter("inv_category")
    df = filter_varieties(df, search, category)
    st.caption(f"{len(df)} varieties")

    if df.empty:
        st.info("No varieties found. Try adjusting your filters or search")
        return

    for row in df.itertuples(index=False):
        with st.container(border=True):
            col_name, col_stock = st.columns([3, 1])
            col_name.markdown(
                f"**{row.name}** &nbsp; {category_chip(row.category)}",
                unsafe_allow_html=True,
            )
            col_stock.metric("Stock", int(row.stock))
            key = f"stock_expr_{row.id}"
            st.text_input(
                "Update Stock (e.g., 10, +5, or -3)",
                key=key,
                placeholder="Type and press Enter",
                on_change=_submit_adjustment,
                args=(conn, int(row.id), row.name, key, int(row.stock)),
            )

    with st.expander("\U0001F501 Recent stock corrections"):
        log = get_adjustments(conn, days=7)
        if log.empty:
            st.info("No stock corrections in the last 7 days")
        else:
            st.dataframe(
                log[["variety_name", "previous_stock", "new_stock", "expression", "adjusted_at"]].rename(
                    columns={
                        "variety_name": "Variety",
                        "previous_stock": "Before",
                        "new_stock": "After",
                        "expression": "Entry",
                        "adjusted_at": "When",
                    }
                ),
                width="stretch",
                hide_index=True,
            )
