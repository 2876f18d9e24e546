"""Session state and cached reads shared by the pages."""
import streamlit as st

from core.cart import Cart
from core.services import get_adjustments_df, get_sales_df, get_varieties_df


def bump_cache_version(*names: str) -> None:
    """Invalidate cached reads after a write (e.g. ``"varieties"``, ``"sales"``)."""
    for name in names:
        key = f"{name}_cache_version"
        st.session_state[key] = st.session_state.get(key, 0) + 1
    st.cache_data.clear()


def invalidate_after_checkout() -> None:
    bump_cache_version("varieties", "sales", "orders")


def get_varieties(conn):
    """Catalog DataFrame, cached for 30 seconds or until the next write."""
    @st.cache_data(ttl=30)
    def _fetch_varieties(cache_key: str):
        return get_varieties_df(conn)

    cache_version = st.session_state.get("varieties_cache_version", 0)
    return _fetch_varieties(f"varieties_{cache_version}")


def get_sales(conn):
    """Sales DataFrame (PAID order items), cached for 10 seconds."""
    @st.cache_data(ttl=10)
    def _fetch_sales(cache_key: str):
        return get_sales_df(conn)

    cache_version = st.session_state.get("sales_cache_version", 0)
    return _fetch_sales(f"sales_{cache_version}")


def get_adjustments(conn, days=None):
    @st.cache_data(ttl=10)
    def _fetch_adjustments(cache_key: str, days=None):
        return get_adjustments_df(conn, days)

    cache_version = st.session_state.get("varieties_cache_version", 0)
    return _fetch_adjustments(f"adjustments_{days}_{cache_version}", days)


def get_cart() -> Cart:
    """The cart being composed in this browser session."""
    if "cart" not in st.session_state:
        st.session_state.cart = Cart()
    return st.session_state.cart


def flash(message: str, icon: str = "✅") -> None:
    """Queue a toast to show after the next rerun."""
    st.session_state["flash_msg"] = (message, icon)


def show_flash() -> None:
    pending = st.session_state.pop("flash_msg", None)
    if pending:
        message, icon = pending
        st.toast(message, icon=icon)
