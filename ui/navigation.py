"""Footer tab navigation shared by every screen."""
import streamlit as st

from core.constants import (
    MENU_ADMIN,
    MENU_ANALYTICS,
    MENU_DAILY,
    MENU_HOME,
    MENU_INVENTORY,
    MENU_ORDERS,
)

MENU = [MENU_HOME, MENU_INVENTORY, MENU_DAILY, MENU_ORDERS, MENU_ANALYTICS, MENU_ADMIN]


def go_to(label: str) -> None:
    """Switch tab on the next rerun (used by in-page shortcut buttons)."""
    st.session_state["nav_target"] = label


def render_footer_nav() -> str:
    """Render the tab bar and return the selected menu label."""
    target = st.session_state.pop("nav_target", None)
    if target in MENU:
        st.session_state.menu_selection = target
    if st.session_state.get("menu_selection") not in MENU:
        st.session_state.menu_selection = MENU[0]

    st.markdown("<div class='footer-nav-marker'></div>", unsafe_allow_html=True)
    return st.radio(
        "Navigate",
        MENU,
        horizontal=True,
        key="menu_selection",
        label_visibility="collapsed",
    )
