from typing import Any, Dict, Iterable, Mapping, Optional
from storefront.orders.constants import CUSTOM_TEXT_FIELDS


def resolve_custom_text(item: Optional[Mapping[str, Any]], fields=CUSTOM_TEXT_FIELDS) -> str:
    if not item:
        return ""
    for field in fields:
        value = item.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def item_custom_text(item) -> str:
    """Stored customization, falling back to the raw fields older clients sent."""
    if item.custom_text and item.custom_text.strip():
        return item.custom_text.strip()
    return resolve_custom_text(item.attributes)


def build_items_summary(items: Iterable, with_custom: bool = True) -> str:
    """"Coxinha x2 (no onion), Kibe x1" """
    parts = []
    for it in items:
        name = (it.name_snapshot or "").strip()
        if not name:
            continue
        base = f"{name} x{it.qty}" if it.qty and it.qty > 0 else name
        custom = item_custom_text(it) if with_custom else ""
        parts.append(f"{base} ({custom})" if custom else base)
    return ", ".join(parts)


def compute_order_totals(lines: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    revenue = 0
    cost = 0
    for line in lines:
        qty = int(line["qty"])
        revenue += int(line["unit_price"]) * qty
        cost += int(line["unit_cost"]) * qty
    return {"revenue": revenue, "cost": cost, "profit": revenue - cost}
