import logging
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from bundle_pricing.config import LOG_LEVEL
from bundle_pricing.router import selection, orders

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Bundle Allocation & Pricing", version="1.0")

app.include_router(selection.router, tags=["selection"])
app.include_router(orders.router)  # exposes POST /order/finalize
