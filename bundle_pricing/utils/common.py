import json
from typing import Any, Dict, List

def money(n: float) -> float:
    # bankers-safe rounding to 2dp
    return round((n + 1e-12) * 100) / 100

def _maybe_json(value):
    if isinstance(value, str):
        v = value.strip()
        if not v:
            return None
        try:
            return json.loads(v)
        except ValueError:
            return value
    return value

def _coerce_selection_list(v) -> List[Dict[str, Any]]:
    """Accept a selection sent as a list, a JSON string, or a list of JSON strings."""
    v = _maybe_json(v)
    if v is None:
        return []
    if isinstance(v, str):
        return []
    out = []
    if isinstance(v, list):
        for it in v:
            it = _maybe_json(it)
            if not isinstance(it, dict):
                # already-built models pass through untouched
                if hasattr(it, "menu_item"):
                    out.append(it)
                continue
            if "quantity" not in it and "qty" in it:
                it["quantity"] = it.pop("qty")
            out.append(it)
    return out

def format_amount(amount: float, currency: str) -> str:
    return f"{currency} {money(amount):.2f}"
