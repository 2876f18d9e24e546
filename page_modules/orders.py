"""Orders page: compose a cart, save it unpaid or take payment."""
import logging

import streamlit as st

from core import services
from core.constants import PAYMENT_METHODS, STATUS_PAID, STATUS_UNPAID
from core.errors import CheckoutError
from core.models import Variety
from core.reconciliation import checkout, pay_order
from ui.data import flash, get_cart, get_varieties, invalidate_after_checkout

logger = logging.getLogger(__name__)


def _variety_from_row(row) -> Variety:
    return Variety(
        id=int(row["id"]),
        name=row["name"],
        category=row["category"],
        stock=int(row["stock"]),
        cost=float(row["cost"]),
        selling_price=float(row["selling_price"]),
    )


def _current_variety(df, variety_id):
    if df.empty:
        return None
    match = df[df["id"] == variety_id]
    return _variety_from_row(match.iloc[0]) if not match.empty else None


def _render_picker(df, cart):
    if df.empty:
        st.info("No varieties available")
        return
    df = df.sort_values("name", key=lambda s: s.str.casefold())
    labels = {
        int(r.id): f"{r.name} ({r.category}) · ₹{float(r.selling_price):,.0f} · {int(r.stock)} left"
        for r in df.itertuples(index=False)
    }
    col_pick, col_qty, col_add = st.columns([4, 1, 1], vertical_alignment="bottom")
    variety_id = col_pick.selectbox(
        "Variety", list(labels), format_func=labels.get, key="order_pick"
    )
    qty = col_qty.number_input("Qty", min_value=1, value=1, step=1, key="order_pick_qty")
    if col_add.button("➕ Add", width="stretch"):
        row = df[df["id"] == variety_id].iloc[0]
        try:
            cart.add_item(_variety_from_row(row), int(qty))
        except CheckoutError as e:
            st.toast(f"❌ {e}", icon="⚠️")
        else:
            st.rerun()


def _render_cart(cart, df):
    if not cart:
        st.info("Cart is empty")
        return
    for line in cart.lines:
        col_name, col_minus, col_qty, col_plus, col_total, col_del = st.columns(
            [4, 1, 1, 1, 2, 1], vertical_alignment="center"
        )
        col_name.markdown(f"**{line.variety_name}**  \n₹{line.unit_price:,.0f} each")
        if col_minus.button("➖", key=f"minus_{line.variety_id}"):
            cart.set_quantity(line.variety_id, line.quantity - 1)
            st.rerun()
        col_qty.markdown(f"**{line.quantity}**")
        if col_plus.button("➕", key=f"plus_{line.variety_id}"):
            try:
                cart.set_quantity(line.variety_id, line.quantity + 1, _current_variety(df, line.variety_id))
            except CheckoutError as e:
                st.toast(f"❌ {e}", icon="⚠️")
            else:
                st.rerun()
        col_total.markdown(f"₹{line.line_total:,.2f}")
        if col_del.button("\U0001F5D1️", key=f"del_{line.variety_id}"):
            cart.remove_item(line.variety_id)
            st.rerun()
    st.markdown(f"### Total: ₹{cart.total():,.2f}")


def _commit(conn, cart, status, method=None):
    editing = cart.editing_order_id
    try:
        order = checkout(conn, cart, status, editing_order_id=editing, payment_method=method)
    except CheckoutError as e:
        st.toast(f"❌ {e}", icon="⚠️")
        return
    except Exception as e:
        logger.exception("Checkout failed")
        st.error(f"Could not save the order: {e}")
        return
    invalidate_after_checkout()
    if status == STATUS_PAID:
        flash(f"Order #{order.order_number} paid ({order.payment_method}) · ₹{order.total:,.2f}", icon="\U0001F4B0")
    else:
        verb = "updated" if editing else "saved"
        flash(f"Order #{order.order_number} {verb} as unpaid · ₹{order.total:,.2f}", icon="\U0001F4DD")
    st.rerun()


def _render_unpaid(conn, cart):
    try:
        unpaid = services.list_orders(conn, status=STATUS_UNPAID)
    except CheckoutError as e:
        st.error(str(e))
        return
    if not unpaid:
        st.info("No unpaid orders")
        return
    for order in unpaid:
        with st.container(border=True):
            items = ", ".join(f"{i.variety_name} × {i.quantity}" for i in order.items)
            when = order.created_at.strftime("%d %b %H:%M") if order.created_at else ""
            st.markdown(f"**Order #{order.order_number}** · ₹{order.total:,.2f} · {when}  \n{items}")
            col_edit, col_method, col_pay = st.columns([1, 2, 1], vertical_alignment="bottom")
            if col_edit.button("✏️ Edit", key=f"edit_{order.id}", width="stretch"):
                catalog = {v.id: v for v in services.list_varieties(conn)}
                try:
                    cart.load_from(order, catalog)
                except CheckoutError as e:
                    st.toast(f"❌ {e}", icon="⚠️")
                else:
                    st.rerun()
            method = col_method.selectbox(
                "Payment", PAYMENT_METHODS, key=f"pay_method_{order.id}", label_visibility="collapsed"
            )
            if col_pay.button("\U0001F4B0 Pay", key=f"pay_{order.id}", width="stretch"):
                try:
                    paid = pay_order(conn, order.id, method)
                except CheckoutError as e:
                    st.toast(f"❌ {e}", icon="⚠️")
                except Exception as e:
                    logger.exception("Failed to pay order %s", order.order_number)
                    st.error(f"Could not pay order #{order.order_number}: {e}")
                else:
                    if cart.editing_order_id == order.id:
                        cart.clear()
                    invalidate_after_checkout()
                    flash(f"Order #{paid.order_number} paid ({paid.payment_method})", icon="\U0001F4B0")
                    st.rerun()


def render(conn):
    """Render the orders page."""
    st.header("\U0001F9FE Orders")
    cart = get_cart()
    df = get_varieties(conn)

    if cart.editing_order_id is not None:
        col_msg, col_cancel = st.columns([3, 1], vertical_alignment="center")
        col_msg.warning("Editing an unpaid order")
        if col_cancel.button("Cancel edit", width="stretch"):
            cart.clear()
            st.rerun()

    _render_picker(df, cart)
    st.subheader("\U0001F6D2 Cart")
    _render_cart(cart, df)

    if cart:
        method = st.radio("Payment", PAYMENT_METHODS, horizontal=True, key="order_payment")
        col_unpaid, col_paid = st.columns(2)
        if col_unpaid.button("\U0001F4DD Save as Unpaid", width="stretch"):
            _commit(conn, cart, STATUS_UNPAID)
        if col_paid.button("\U0001F4B0 Pay Now", type="primary", width="stretch"):
            _commit(conn, cart, STATUS_PAID, method)

    st.markdown("---")
    st.subheader("⏳ Unpaid Orders")
    _render_unpaid(conn, cart)
