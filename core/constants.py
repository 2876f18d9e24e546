"""Project-wide constants and configuration helpers."""
import os
from typing import List
from zoneinfo import ZoneInfo

# Shop timezone (India)
SHOP_TZ = ZoneInfo("Asia/Kolkata")

SHOP_NAME = "ICE BAY"

CATEGORIES: List[str] = [
    "WATER BASE",
    "MILK BASE",
    "FAMILY PACK",
    "4L TUBS",
]

STATUS_PAID = "PAID"
STATUS_UNPAID = "UNPAID"
ORDER_STATUSES: List[str] = [STATUS_PAID, STATUS_UNPAID]

PAYMENT_CASH = "CASH"
PAYMENT_ONLINE = "ONLINE"
PAYMENT_METHODS: List[str] = [PAYMENT_CASH, PAYMENT_ONLINE]

LOW_STOCK_THRESHOLD_DEFAULT: int = 5

# Default prices for seeded varieties
DEFAULT_SELLING_PRICE: float = 60.0
DEFAULT_COST: float = 40.0

# Retries when two checkouts race for the same order number
ORDER_NUMBER_RETRIES: int = 3

DB_PATH = os.environ.get("ICEBAY_DB_PATH", "data/icebay.db")

# Footer tab labels (keep in sync across app and navigation)
MENU_HOME = "\U0001F3E0 Home"
MENU_INVENTORY = "\U0001F4E6 Inventory"
MENU_DAILY = "\U0001F6D2 Daily Sales"
MENU_ORDERS = "\U0001F9FE Orders"
MENU_ANALYTICS = "\U0001F4C8 Analytics"
MENU_ADMIN = "⚙️ Admin"
