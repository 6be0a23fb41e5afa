from typing import Any, Dict, List, Optional

from bundle_pricing.config import CURRENCY
from bundle_pricing.schemas.models import LineState, LineView, OrderTotals, SelectionLine
from bundle_pricing.utils.common import money, format_amount


def total(selection: List[SelectionLine]) -> float:
    return money(sum(ln.charged_total or 0.0 for ln in selection or []))


def included_units(line: SelectionLine) -> int:
    """Free units implied by the line's charged total."""
    if not line.included_in_bundle:
        return 0
    if line.unit_price <= 0:
        return line.quantity
    charged_units = round((line.charged_total or 0.0) / line.unit_price)
    return max(0, min(line.quantity, line.quantity - charged_units))


def line_state(line: SelectionLine) -> LineState:
    free = included_units(line)
    if free <= 0:
        return LineState.CHARGED
    if free >= line.quantity:
        return LineState.INCLUDED
    return LineState.PARTIAL


def line_view(line: SelectionLine, currency: str = CURRENCY) -> LineView:
    state = line_state(line)
    if state == LineState.INCLUDED:
        charged = 0.0
        label = "FREE"
    elif state == LineState.PARTIAL:
        charged = money(line.charged_total or 0.0)
        label = f"{format_amount(charged, currency)} (partial bundle)"
    else:
        charged = money(line.unit_price * line.quantity)
        label = format_amount(charged, currency)

    return LineView(
        menu_item=line.menu_item,
        name=line.name,
        serving_size=line.serving_size,
        quantity=line.quantity,
        unit_price=line.unit_price,
        charged_total=charged,
        included_units=included_units(line),
        state=state,
        label=label,
    )


def order_totals(
    selection: List[SelectionLine],
    discount_percentage: float = 0,
    discount_name: Optional[str] = None,
) -> OrderTotals:
    subtotal = total(selection)
    pct = float(discount_percentage or 0)
    discount_amt = money(subtotal * pct / 100) if pct > 0 else 0.0
    return OrderTotals(
        subtotal=subtotal,
        discount_percentage=pct,
        discount_name=(discount_name or None) if pct > 0 else None,
        discount_amount=discount_amt,
        total=money(subtotal - discount_amt),
    )


def build_order_payload(
    selection: List[SelectionLine],
    discount_percentage: float = 0,
    discount_name: Optional[str] = None,
    totals: Optional[OrderTotals] = None,
) -> Dict[str, Any]:
    """Items and amounts in the order backend's wire names; `totals` skips recomputing them."""
    if totals is None:
        totals = order_totals(selection, discount_percentage, discount_name)
    items = []
    for ln in selection or []:
        items.append({
            "menuItem": ln.menu_item,
            "name": ln.name,
            "servingSize": ln.serving_size,
            "quantity": ln.quantity,
            "price": ln.unit_price,
            "totalPrice": money(ln.charged_total or 0.0),
            "status": ln.status.value,
            "notes": ln.notes,
            "isIncludedInBundle": ln.included_in_bundle,
        })

    payload = {
        "items": items,
        "subtotalAmount": totals.subtotal,
        "discountAmount": totals.discount_amount,
        "totalAmount": totals.total,
    }
    if totals.discount_percentage > 0:
        payload["discountPercentage"] = totals.discount_percentage
        if totals.discount_name:
            payload["discountName"] = totals.discount_name
    return payload
