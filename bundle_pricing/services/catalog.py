from typing import Dict, List, Optional, Set
from bundle_pricing.schemas.models import (
    CatalogItem, CatalogGroup, MenuCategory, SelectionLine, SizeClass,
    SIDE_CATEGORIES, SAUCE_CATEGORIES, looks_like_combo, guess_size_class, guess_mixing_classes,
)

CATEGORY_ORDER = [
    MenuCategory.ROASTS,
    MenuCategory.SMOKED_SALMON,
    MenuCategory.POTATOES,
    MenuCategory.VEGETABLES,
    MenuCategory.SAUCES,
    MenuCategory.DESSERTS,
]

CATEGORY_TITLES = {
    MenuCategory.ROASTS: "Roasts",
    MenuCategory.SMOKED_SALMON: "Smoked Salmon",
    MenuCategory.POTATOES: "Potatoes",
    MenuCategory.VEGETABLES: "Vegetables",
    MenuCategory.SAUCES: "Sauces",
    MenuCategory.DESSERTS: "Desserts",
}

ROASTS_ITEM_ORDER = [
    "Turkey",
    "Turkey with Sides",
    "Honey Smoked Ham",
    "Wild Mushroom and Chickpea Wellington",
]


def index_catalog(catalog: List[CatalogItem]) -> Dict[str, CatalogItem]:
    return {it.id: it for it in catalog or []}


def is_side(item: Optional[CatalogItem]) -> bool:
    return bool(item) and item.category in SIDE_CATEGORIES


def is_sauce(item: Optional[CatalogItem]) -> bool:
    return bool(item) and item.category in SAUCE_CATEGORIES


def is_bundle_eligible(item: Optional[CatalogItem]) -> bool:
    return is_side(item) or is_sauce(item)


def unit_price_for(item: CatalogItem, serving_size: str) -> Optional[float]:
    opt = item.price_option(serving_size)
    return None if opt is None else float(opt.price)


def size_class_for(serving_size: str, item: Optional[CatalogItem] = None) -> SizeClass:
    """Tagged size class of a serving size; label heuristic when the item or size is unknown."""
    if item is not None:
        opt = item.price_option(serving_size)
        if opt is not None and opt.size_class is not None:
            return opt.size_class
    return guess_size_class(serving_size)


def mixing_classes_for(serving_size: str, item: Optional[CatalogItem] = None) -> Set[SizeClass]:
    """Size classes a side occupies for the no-mixing rule."""
    if item is not None:
        opt = item.price_option(serving_size)
        if opt is not None and opt.mixing_classes is not None:
            return set(opt.mixing_classes)
    return guess_mixing_classes(serving_size)


def line_is_combo(line: SelectionLine, idx: Dict[str, CatalogItem]) -> bool:
    item = idx.get(line.menu_item)
    if item is not None:
        return bool(item.is_combo)
    return looks_like_combo(line.name)


def _roast_rank(item: CatalogItem) -> int:
    # first name contained in the item name wins, so "Turkey with Sides" ranks with "Turkey"
    n = item.name.lower()
    for i, name in enumerate(ROASTS_ITEM_ORDER):
        if name.lower() in n:
            return i
    return -1


def sort_roasts(items: List[CatalogItem]) -> List[CatalogItem]:
    ranked = [(_roast_rank(it), i, it) for i, it in enumerate(items)]
    known = sorted([x for x in ranked if x[0] != -1], key=lambda x: (x[0], x[1]))
    unknown = [x for x in ranked if x[0] == -1]
    return [x[2] for x in known + unknown]


def group_catalog(catalog: List[CatalogItem]) -> List[CatalogGroup]:
    """Catalog grouped by category in menu display order."""
    grouped: Dict[MenuCategory, List[CatalogItem]] = {}
    for it in catalog or []:
        grouped.setdefault(it.category, []).append(it)

    out = []
    for cat in CATEGORY_ORDER:
        items = grouped.get(cat)
        if not items:
            continue
        if cat == MenuCategory.ROASTS:
            items = sort_roasts(items)
        out.append(CatalogGroup(category=cat, title=CATEGORY_TITLES[cat], items=items))
    return out
