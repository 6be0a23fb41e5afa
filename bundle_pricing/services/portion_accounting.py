from typing import Dict, List, Optional, Tuple

from bundle_pricing.schemas.models import (
    ActiveBundle, BundleSummary, BundleTally, CatalogItem, SelectionLine,
)
from bundle_pricing.services.bundle_policy import resolve
from bundle_pricing.services.catalog import index_catalog, is_side, is_sauce, mixing_classes_for, size_class_for


def portion_weight(bundle: ActiveBundle, serving_size: str, item: Optional[CatalogItem] = None) -> float:
    return bundle.weight_for(serving_size, size_class_for(serving_size, item))


def tally(
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    bundle: Optional[ActiveBundle] = None,
) -> BundleTally:
    """
    Budget consumed by included lines, as seen when a new line is toggled on.

    Each included side counts its serving-size weight once, whatever its
    quantity; each included sauce line counts as one sauce.
    """
    if bundle is None:
        bundle = resolve(selection, catalog)
    if bundle is None:
        return BundleTally()

    idx = index_catalog(catalog)
    out = BundleTally()
    for ln in selection or []:
        if not ln.included_in_bundle:
            continue
        item = idx.get(ln.menu_item)
        if is_side(item):
            out.portions_used += portion_weight(bundle, ln.serving_size, item)
            out.size_classes_used.update(mixing_classes_for(ln.serving_size, item))
        elif is_sauce(item):
            out.sauces_used += 1
    return out


def used_by_others(
    selection: List[SelectionLine],
    catalog: List[CatalogItem],
    bundle: ActiveBundle,
    target_key: Tuple[str, str],
) -> Dict[str, float]:
    """
    Budget consumed by the other included lines, as seen on a quantity change.

    Unlike tally(), quantities multiply here: sides add weight x quantity,
    sauces add their quantity.
    """
    idx = index_catalog(catalog)
    portions = 0.0
    sauces = 0
    for ln in selection or []:
        if ln.key == target_key or not ln.included_in_bundle:
            continue
        item = idx.get(ln.menu_item)
        if is_side(item):
            portions += portion_weight(bundle, ln.serving_size, item) * ln.quantity
        elif is_sauce(item):
            sauces += ln.quantity
    return {"portions": portions, "sauces": sauces}


def bundle_summary(selection: List[SelectionLine], catalog: List[CatalogItem]) -> Optional[BundleSummary]:
    bundle = resolve(selection, catalog)
    if bundle is None:
        return None
    t = tally(selection, catalog, bundle)
    return BundleSummary(
        price=bundle.price,
        source=bundle.source,
        portions_used=t.portions_used,
        max_portions=bundle.max_portions,
        sauces_used=t.sauces_used,
        max_sauces=bundle.max_sauces,
        allow_mixing=bundle.allow_mixing,
        size_classes_used=sorted(t.size_classes_used, key=lambda s: s.value),
    )
