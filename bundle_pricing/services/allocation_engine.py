"""
Allocation of combo budget to side and sauce lines.

Every edit is decided locally and greedily: a line is (re)allocated only by
the edit that touches it, against the budget the *other* lines hold at that
moment. Removing or shrinking a line frees budget but never hands it to
untouched siblings; they keep their allocation until they are edited or
recompute() is called explicitly.

All functions return a new selection list and leave the input untouched.
"""
import logging
import math
from typing import List, Optional, Tuple

from bundle_pricing.schemas.models import ActiveBundle, CatalogItem, SelectionLine, SizeClass
from bundle_pricing.services.bundle_policy import resolve
from bundle_pricing.services.catalog import (
    index_catalog, is_bundle_eligible, is_side, is_sauce, mixing_classes_for, unit_price_for,
)
from bundle_pricing.services.portion_accounting import portion_weight, tally, used_by_others
from bundle_pricing.utils.common import money

log = logging.getLogger(__name__)


def _find_line(selection: List[SelectionLine], key: Tuple[str, str]) -> Optional[SelectionLine]:
    return next((ln for ln in selection or [] if ln.key == key), None)


def _full_price(line: SelectionLine) -> SelectionLine:
    return line.model_copy(update={
        "charged_total": money(line.unit_price * line.quantity),
        "included_in_bundle": False,
    })


# ---------------------------------------------------------------------
# TOGGLE PATH
# ---------------------------------------------------------------------

def should_include(
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    item: CatalogItem,
    serving_size: str,
) -> bool:
    """
    Whether a freshly toggled (item, serving_size) line starts out free.

    Evaluated against the selection without any existing line for the same
    key, so asking again for an already-added line gives the same answer.
    """
    others = [ln for ln in selection or [] if ln.key != (item.id, serving_size)]
    bundle = resolve(others, catalog)
    if bundle is None or not is_bundle_eligible(item):
        return False

    t = tally(others, catalog, bundle)

    if is_side(item):
        needed = portion_weight(bundle, serving_size, item)
        if not bundle.allow_mixing:
            classes = mixing_classes_for(serving_size, item)
            if SizeClass.EIGHT in classes and SizeClass.FOUR in t.size_classes_used:
                return False
            if SizeClass.FOUR in classes and SizeClass.EIGHT in t.size_classes_used:
                return False
        return needed <= bundle.max_portions - t.portions_used

    if is_sauce(item):
        return t.sauces_used < bundle.max_sauces

    return False


def toggle(
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    item_id: str,
    serving_size: str,
) -> List[SelectionLine]:
    """Add the (item, serving_size) line if unselected, remove it otherwise."""
    key = (item_id, serving_size)
    current = list(selection or [])

    if _find_line(current, key) is not None:
        remaining = [ln for ln in current if ln.key != key]
        if resolve(remaining, catalog) is None:
            # combo host gone: nothing can stay free
            return [_full_price(ln) for ln in remaining]
        return remaining

    item = index_catalog(catalog).get(item_id)
    if item is None:
        log.warning(f"Toggle ignored: unknown menu item {item_id!r}")
        return current
    if not item.is_available:
        log.warning(f"Toggle ignored: {item.name!r} is unavailable")
        return current

    price = unit_price_for(item, serving_size)
    if price is None:
        log.warning(f"Toggle ignored: {item.name!r} has no serving size {serving_size!r}")
        return current

    included = should_include(current, catalog, item, serving_size)
    if included:
        log.debug(f"{item.name!r} ({serving_size}) included in bundle")

    current.append(SelectionLine(
        menu_item=item.id,
        name=item.name,
        serving_size=serving_size,
        quantity=1,
        unit_price=price,
        charged_total=0.0 if included else money(price),
        included_in_bundle=included,
    ))
    return current


# ---------------------------------------------------------------------
# QUANTITY PATH
# ---------------------------------------------------------------------

def _allocate(
    line: SelectionLine,
    quantity: int,
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    bundle: Optional[ActiveBundle],
) -> SelectionLine:
    item = index_catalog(catalog).get(line.menu_item)
    if bundle is None or not is_bundle_eligible(item):
        return _full_price(line.model_copy(update={"quantity": quantity}))

    used = used_by_others(selection, catalog, bundle, line.key)

    if is_side(item):
        remaining = bundle.max_portions - used["portions"]
        weight = portion_weight(bundle, line.serving_size, item)
        if weight > 0:
            included_units = math.floor(remaining / weight)
        else:
            # weightless sides are free while the budget is not overdrawn
            included_units = quantity if remaining >= 0 else 0
    else:
        remaining = bundle.max_sauces - used["sauces"]
        included_units = min(quantity, remaining)

    included_units = int(max(0, min(quantity, included_units)))
    charged_units = quantity - included_units

    return line.model_copy(update={
        "quantity": quantity,
        "charged_total": money(line.unit_price * charged_units),
        "included_in_bundle": included_units > 0,
    })


def update_quantity(
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    item_id: str,
    serving_size: str,
    quantity: int,
) -> List[SelectionLine]:
    """
    Set a line's quantity and re-split it into free and charged units.

    The free share is whatever budget the other included lines leave over.
    The no-mixing rule is not applied here, only on toggle.
    """
    current = list(selection or [])
    if quantity < 1:
        return current

    key = (item_id, serving_size)
    target = _find_line(current, key)
    if target is None:
        log.warning(f"Quantity change ignored: {item_id!r} ({serving_size}) is not selected")
        return current

    bundle = resolve(current, catalog)
    updated = _allocate(target, quantity, current, catalog, bundle)
    return [updated if ln.key == key else ln for ln in current]


def update_notes(
    selection: List[SelectionLine],
    item_id: str,
    serving_size: str,
    notes: str,
) -> List[SelectionLine]:
    key = (item_id, serving_size)
    return [ln.model_copy(update={"notes": notes or ""}) if ln.key == key else ln for ln in selection or []]


def recompute(selection: List[SelectionLine], catalog: List[CatalogItem]) -> List[SelectionLine]:
    """
    Re-run the quantity rule on every line, in selection order.

    Each line sees the allocation of the lines evaluated before it, so when
    lines compete for the last slot the outcome follows array order.
    """
    current = list(selection or [])
    bundle = resolve(current, catalog)
    for i, ln in enumerate(current):
        current[i] = _allocate(ln, ln.quantity, current, catalog, bundle)
    return current
