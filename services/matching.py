"""Name-based joins between order lines, menu items and inventory items.

Order lines reference menu items by free-text name rather than by id, and the
inventory is linked to the menu the same way. Both joins live here so that an
id-based join can replace them without touching the aggregators.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import InventoryItem, Order, OrderItem

LOGGER = logging.getLogger(__name__)


def match_by_name(orders: Iterable[Order], name: str) -> List[OrderItem]:
    """Return every order line whose ``item_name`` equals ``name`` exactly."""
    return [
        item
        for order in orders
        for item in order.order_items
        if item.item_name == name
    ]


def index_by_name(
    orders: Iterable[Order],
) -> Tuple[Dict[str, List[OrderItem]], Dict[str, List[Order]]]:
    """Group order lines and their orders by item name in a single pass.

    Returns ``(lines, containing)``: every line per name, and every order that
    carries at least one line of that name (each order once). Both mappings
    and their lists keep first-seen order.
    """

    lines: Dict[str, List[OrderItem]] = {}
    containing: Dict[str, List[Order]] = {}
    for order in orders:
        for item in order.order_items:
            lines.setdefault(item.item_name, []).append(item)
            seen = containing.setdefault(item.item_name, [])
            if not seen or seen[-1] is not order:
                seen.append(order)
    return lines, containing


def order_contains(order: Order, name: str) -> bool:
    return any(item.item_name == name for item in order.order_items)


def match_inventory_item(
    inventory_items: Optional[Sequence[InventoryItem]], menu_name: str
) -> Optional[InventoryItem]:
    """Find the inventory item whose name contains ``menu_name`` or vice versa.

    Matching is case-insensitive and the first candidate wins. When more than
    one inventory item qualifies a warning is logged.
    """

    if not inventory_items:
        return None
    needle = menu_name.lower()
    candidates = [
        item
        for item in inventory_items
        if needle in item.name.lower() or item.name.lower() in needle
    ]
    if not candidates:
        return None
    if len(candidates) > 1:
        LOGGER.warning(
            "Ambiguous inventory match for menu item '%s': %s; using '%s'",
            menu_name,
            ", ".join(candidate.name for candidate in candidates),
            candidates[0].name,
        )
    return candidates[0]


__all__ = ["index_by_name", "match_by_name", "match_inventory_item", "order_contains"]
