import logging
from typing import List, Optional

from bundle_pricing.schemas.models import ActiveBundle, CatalogItem, SelectionLine
from bundle_pricing.services.catalog import index_catalog, line_is_combo
from bundle_pricing.utils.common import money

log = logging.getLogger(__name__)

# Combos created before per-size policies existed, keyed by host unit price.
# 650: 4-person combo, 2 portions + 1 sauce, no mixing of 4/8 sides
# 850: 8-person combo, 4 portions (mixed freely) + 1 sauce
LEGACY_BUNDLES = {
    650.0: {"max_portions": 2, "max_sauces": 1, "allow_mixing": False},
    850.0: {"max_portions": 4, "max_sauces": 1, "allow_mixing": True},
}


def find_combo_line(selection: List[SelectionLine], catalog: List[CatalogItem]) -> Optional[SelectionLine]:
    idx = index_catalog(catalog)
    return next((ln for ln in selection or [] if line_is_combo(ln, idx)), None)


def resolve(selection: List[SelectionLine], catalog: List[CatalogItem]) -> Optional[ActiveBundle]:
    """
    Active combo budget for the current selection, or None.

    - host = first line whose item is tagged as a combo
    - policy = host item's bundle config for the host serving size
    - no policy -> legacy table keyed by the host unit price
    - no match in either -> no bundle, everything charged
    """
    host = find_combo_line(selection, catalog)
    if host is None:
        return None

    item = index_catalog(catalog).get(host.menu_item)
    policy = item.policy_for(host.serving_size) if item else None
    if policy is not None:
        log.info(f"Bundle active from policy: {host.name!r} ({host.serving_size})")
        return ActiveBundle(
            host_item_id=host.menu_item,
            host_serving_size=host.serving_size,
            price=host.unit_price,
            max_portions=policy.max_portions,
            max_sauces=policy.max_sauces,
            allow_mixing=policy.allow_mixing,
            portion_weights=dict(policy.portion_weights),
            source="policy",
        )

    legacy = LEGACY_BUNDLES.get(money(host.unit_price))
    if legacy is None:
        log.info(f"Combo line {host.name!r} ({host.serving_size}) has no bundle policy; charging all lines")
        return None

    log.info(f"Bundle active from legacy price table: {host.name!r} at {money(host.unit_price)}")
    return ActiveBundle(
        host_item_id=host.menu_item,
        host_serving_size=host.serving_size,
        price=host.unit_price,
        portion_weights={},
        source="legacy",
        **legacy,
    )
