"""ICE BAY POS - Main Application Entry Point."""
import logging

import streamlit as st

from core.constants import (
    MENU_ADMIN,
    MENU_ANALYTICS,
    MENU_DAILY,
    MENU_HOME,
    MENU_INVENTORY,
    MENU_ORDERS,
    SHOP_NAME,
)
from core.db_init import init_db
from core.mobile_styles import apply_mobile_styles
from ui.data import show_flash
from ui.navigation import render_footer_nav

# Import page render functions
from page_modules import admin, analytics, daily_sales, dashboard, inventory, orders

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Page configuration
st.set_page_config(
    page_title=f"{SHOP_NAME} POS",
    page_icon="\U0001F366",
    layout="centered",
)

# Apply mobile-friendly styles
apply_mobile_styles()


# Initialize database connection (cached to avoid reconnecting on every interaction)
@st.cache_resource
def get_db_connection():
    return init_db()


conn = get_db_connection()

show_flash()

# Page body is drawn above the footer even though the footer is read first
body = st.container()
menu = render_footer_nav()

pages = {
    MENU_HOME: lambda: dashboard.render(conn),
    MENU_INVENTORY: lambda: inventory.render(conn),
    MENU_DAILY: lambda: daily_sales.render(conn),
    MENU_ORDERS: lambda: orders.render(conn),
    MENU_ANALYTICS: lambda: analytics.render(conn),
    MENU_ADMIN: lambda: admin.render(conn),
}

with body:
    pages.get(menu, pages[MENU_HOME])()
