import logging
from functools import lru_cache
from typing import List
from fastapi import HTTPException
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from bundle_pricing.db.mongo import menu_items
from bundle_pricing.schemas.models import CatalogItem

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _load_all_menu_items() -> tuple:
    try:
        return tuple(menu_items.find({"isDeleted": {"$ne": True}}))
    except PyMongoError as e:
        raise HTTPException(status_code=503, detail=f"Database unavailable: {e}")


def load_catalog() -> List[CatalogItem]:
    out = []
    for doc in _load_all_menu_items():
        try:
            out.append(CatalogItem.model_validate(doc))
        except ValidationError as e:
            log.warning(f"Skipping malformed menu item {doc.get('_id')}: {e.error_count()} errors")
    return out


def get_catalog() -> List[CatalogItem]:
    """FastAPI dependency; overridden in tests."""
    return load_catalog()


def refresh_catalog() -> None:
    _load_all_menu_items.cache_clear()
