"""Daily sales entry: pick a variety and record a paid sale."""
import logging

import streamlit as st

from core.constants import PAYMENT_METHODS
from core.errors import CheckoutError
from core.reconciliation import record_sale
from ui.components import category_chip, category_filter, filter_varieties
from ui.data import flash, get_varieties, invalidate_after_checkout

logger = logging.getLogger(__name__)


def _reset_form():
    st.session_state.pop("sale_variety", None)
    st.session_state["sale_qty"] = ""


def render(conn):
    """Render the daily sales page."""
    st.header("\U0001F6D2 Daily Sales")
    if st.session_state.pop("reset_sale_form", False):
        _reset_form()
    if st.session_state.pop("clear_sale_qty", False):
        st.session_state["sale_qty"] = ""

    df = get_varieties(conn)
    selected_id = st.session_state.get("sale_variety")
    selected = df[df["id"] == selected_id] if selected_id is not None and not df.empty else df.iloc[0:0]

    if not selected.empty:
        row = selected.iloc[0]
        with st.container(border=True):
            st.markdown(
                f"### {row['name']} &nbsp; {category_chip(row['category'])}",
                unsafe_allow_html=True,
            )
            col1, col2 = st.columns(2)
            col1.metric("Remaining", int(row["stock"]))
            col2.metric("Price", f"₹{float(row['selling_price']):,.0f}")

            qty_input = st.text_input("Quantity", key="sale_qty", placeholder="Enter quantity")
            method = st.radio("Payment", PAYMENT_METHODS, horizontal=True, key="sale_payment")
            try:
                qty_val = int(qty_input)
                valid_qty = qty_val > 0
            except ValueError:
                valid_qty = False
            insufficient = valid_qty and qty_val > int(row["stock"])

            col_ok, col_cancel = st.columns(2)
            if col_ok.button("Record Sale", disabled=not valid_qty or insufficient, width="stretch"):
                try:
                    order = record_sale(conn, int(row["id"]), qty_val, method)
                except CheckoutError as e:
                    st.toast(f"❌ {e}", icon="⚠️")
                except Exception as e:
                    logger.exception("Failed to record sale of %s", row["name"])
                    st.error(f"Could not record sale: {e}")
                else:
                    invalidate_after_checkout()
                    flash(
                        f"Sold {qty_val} boxes of {row['name']} (order #{order.order_number})",
                        icon="\U0001F366",
                    )
                    st.session_state["reset_sale_form"] = True
                    st.rerun()
            if col_cancel.button("Cancel", width="stretch"):
                st.session_state["reset_sale_form"] = True
                st.rerun()
            if insufficient:
                st.error(f"Not enough stock remaining: only {int(row['stock'])} available.")

    search = st.text_input("Search ice cream flavors...", key="sale_search")
    category = category_filter("sale_category")
    filtered = filter_varieties(df, search, category)

    st.subheader("Select Variety")
    if filtered.empty:
        st.info("No varieties found. Try adjusting your filters or search")
        return
    for row in filtered.itertuples(index=False):
        label = f"{row.name} · {row.category} · {int(row.stock)} left"
        if st.button(
            label,
            key=f"pick_{row.id}",
            width="stretch",
            type="primary" if row.id == selected_id else "secondary",
            disabled=int(row.stock) == 0,
        ):
            st.session_state["sale_variety"] = int(row.id)
            st.session_state["clear_sale_qty"] = True
            st.rerun()
