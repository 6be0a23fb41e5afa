import pytest

from bundle_pricing.schemas.models import CatalogItem
from bundle_pricing.services import allocation_engine

FOUR = "For 4 people"
EIGHT = "For 8 people"
JAR = "250ml jar"

# menu items the way the backend sends them
MENU_DOCS = [
    {
        "_id": "turkey",
        "name": "Turkey",
        "category": "roasts",
        "pricing": [{"servingSize": FOUR, "price": 450}, {"servingSize": EIGHT, "price": 700}],
        "isAvailable": True,
    },
    {
        "_id": "turkey-sides",
        "name": "Turkey with Sides",
        "category": "roasts",
        "pricing": [{"servingSize": FOUR, "price": 650}, {"servingSize": EIGHT, "price": 850}],
        "isAvailable": True,
        "bundleConfig": [
            {
                "servingSize": FOUR,
                "maxPortions": 2,
                "maxSauces": 1,
                "allowMixing": False,
                "portionValues": [
                    {"servingSize": FOUR, "portionValue": 1},
                    {"servingSize": EIGHT, "portionValue": 2},
                ],
            },
            {"servingSize": EIGHT, "maxPortions": 4, "maxSauces": 1, "allowMixing": True},
        ],
    },
    {
        "_id": "classic-turkey",
        "name": "Classic Turkey with Sides",
        "category": "roasts",
        "pricing": [{"servingSize": FOUR, "price": 650}, {"servingSize": EIGHT, "price": 850}],
        "isAvailable": True,
    },
    {
        "_id": "ham",
        "name": "Honey Smoked Ham",
        "category": "roasts",
        "pricing": [{"servingSize": EIGHT, "price": 600}],
        "isAvailable": True,
    },
    {
        "_id": "salmon",
        "name": "Smoked Salmon Platter",
        "category": "smoked-salmon",
        "pricing": [{"servingSize": FOUR, "price": 300}],
        "isAvailable": True,
    },
    {
        "_id": "roast-potatoes",
        "name": "Roast Potatoes",
        "category": "potatoes",
        "pricing": [{"servingSize": FOUR, "price": 120}, {"servingSize": EIGHT, "price": 220}],
        "isAvailable": True,
    },
    {
        "_id": "mash",
        "name": "Creamy Mash",
        "category": "potato",
        "pricing": [{"servingSize": FOUR, "price": 110}, {"servingSize": EIGHT, "price": 200}],
        "isAvailable": True,
    },
    {
        "_id": "carrots",
        "name": "Honey Glazed Carrots",
        "category": "vegetables",
        "pricing": [{"servingSize": FOUR, "price": 100}, {"servingSize": EIGHT, "price": 180}],
        "isAvailable": True,
    },
    {
        "_id": "sprouts",
        "name": "Brussels Sprouts",
        "category": "vegetables",
        "pricing": [
            {"servingSize": FOUR, "price": 100},
            {"servingSize": EIGHT, "price": 180},
            {"servingSize": "Family tray", "price": 260},
        ],
        "isAvailable": True,
    },
    {
        "_id": "stuffing",
        "name": "Chestnut Stuffing",
        "category": "vegetables",
        "pricing": [{"servingSize": FOUR, "price": 90}],
        "isAvailable": False,
    },
    {
        "_id": "gravy",
        "name": "Turkey Gravy",
        "category": "sauces",
        "pricing": [{"servingSize": JAR, "price": 40}],
        "isAvailable": True,
    },
    {
        "_id": "cranberry",
        "name": "Cranberry Sauce",
        "category": "sauces",
        "pricing": [{"servingSize": JAR, "price": 35}],
        "isAvailable": True,
    },
    {
        "_id": "pudding",
        "name": "Christmas Pudding",
        "category": "desserts",
        "pricing": [{"servingSize": EIGHT, "price": 150}],
        "isAvailable": True,
    },
    {
        "_id": "mince-pies",
        "name": "Mince Pies",
        "category": "off_the_menu",
        "pricing": [{"servingSize": "Box of 6", "price": 60}],
        "isAvailable": True,
    },
]


@pytest.fixture
def catalog():
    return [CatalogItem.model_validate(doc) for doc in MENU_DOCS]


@pytest.fixture
def select(catalog):
    """Toggle (item_id, serving_size) pairs on, in order, starting from `selection`."""
    def _select(*pairs, selection=None, items=None):
        sel = list(selection or [])
        for item_id, size in pairs:
            sel = allocation_engine.toggle(sel, items or catalog, item_id, size)
        return sel
    return _select


def line(selection, item_id, serving_size):
    return next(ln for ln in selection if ln.key == (item_id, serving_size))
