import os

CURRENCY: str = os.getenv("CURRENCY", "AED")
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

MONGODB_URI = os.getenv(
    "MONGODB_URI"
)
DB_NAME      = os.getenv("DB_NAME", "orders_dashboard")
MENU_COLL    = os.getenv("MENU_COLLECTION", "menu_items")
