"""Menu item performance: per-item rollups, rankings and co-purchases."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from .estimators import Estimator
from .matching import index_by_name, match_by_name, match_inventory_item, order_contains
from .models import InventoryItem, MenuCategory, MenuItem, Order, OrderItem
from .time_buckets import (
    QUADRANTS,
    classify_quadrant,
    empty_quadrants,
    short_date_label,
    trailing_days,
)

LOGGER = logging.getLogger(__name__)

COST_RATIO_ESTIMATE = 0.35
TREND_DAYS = 7
COMBINATION_LIMIT = 5
PERFORMER_LIMIT = 5
POPULAR_LIMIT = 10
TIME_SLOT_LIMIT = 5
RATING_SHARES = ((5, 0.45), (4, 0.35), (3, 0.13), (2, 0.05), (1, 0.02))
UNCATEGORIZED = "Uncategorized"


# ---------------------------------------------------------------------------
# Per-item building blocks
# ---------------------------------------------------------------------------


def popular_combinations(
    orders: Sequence[Order], item_name: str, limit: int = COMBINATION_LIMIT
) -> List[Dict[str, Any]]:
    """Other items most often bought alongside ``item_name``.

    Every line of a qualifying order counts once. Ties keep the order in which
    the co-purchased names were first encountered.
    """

    occurrences: Counter[str] = Counter()
    for order in orders:
        if not order_contains(order, item_name):
            continue
        for line in order.order_items:
            if line.item_name != item_name:
                occurrences[line.item_name] += 1
    ranked = sorted(occurrences.items(), key=lambda entry: entry[1], reverse=True)
    return [
        {"itemName": name, "occurrences": count} for name, count in ranked[:limit]
    ]


def quadrant_distribution(lines: Sequence[OrderItem]) -> Dict[str, int]:
    counts = empty_quadrants()
    for line in lines:
        counts[classify_quadrant(line.created_at.hour)] += 1
    return counts


def daily_quantities(lines: Sequence[OrderItem]) -> Dict[date, int]:
    totals: Dict[date, int] = defaultdict(int)
    for line in lines:
        totals[line.created_at.date()] += line.quantity
    return totals


def sales_trend(
    lines: Sequence[OrderItem], now: datetime, days: int = TREND_DAYS
) -> List[Dict[str, Any]]:
    quantities: Dict[date, int] = defaultdict(int)
    revenues: Dict[date, float] = defaultdict(float)
    for line in lines:
        day = line.created_at.date()
        quantities[day] += line.quantity
        revenues[day] += line.line_total
    return [
        {
            "date": short_date_label(day),
            "quantity": quantities.get(day, 0),
            "revenue": revenues.get(day, 0.0),
        }
        for day in trailing_days(now, days)
    ]


def customer_feedback(
    item_name: str, lines: Sequence[OrderItem], estimator: Estimator
) -> Dict[str, Any]:
    total = len(lines)
    if total == 0:
        return {
            "averageRating": 0,
            "totalRatings": 0,
            "ratingDistribution": {stars: 0 for stars, _ in RATING_SHARES},
        }
    return {
        "averageRating": estimator.average_rating(item_name, total),
        "totalRatings": total,
        "ratingDistribution": {stars: int(total * share) for stars, share in RATING_SHARES},
    }


def profit_margin(
    menu_item: MenuItem,
    total_quantity: float,
    total_revenue: float,
    inventory_items: Optional[Sequence[InventoryItem]],
) -> float:
    """Margin (%) after ingredient cost, never below zero.

    The unit cost comes from the inventory item matched by name, or is
    estimated as a fixed share of the menu price.
    """

    if total_revenue == 0:
        return 0.0
    match = match_inventory_item(inventory_items, menu_item.name)
    unit_cost = match.cost_per_unit if match is not None else menu_item.price * COST_RATIO_ESTIMATE
    margin = (total_revenue - total_quantity * unit_cost) / total_revenue * 100
    return max(0.0, margin)


def analyze_menu_item(
    menu_item: MenuItem,
    orders: Sequence[Order],
    inventory_items: Optional[Sequence[InventoryItem]],
    now: datetime,
    estimator: Estimator,
    *,
    lines: Optional[Sequence[OrderItem]] = None,
    containing: Optional[Sequence[Order]] = None,
) -> Dict[str, Any]:
    """Rollup for one menu item.

    ``lines`` and ``containing`` are the item's order lines and the orders
    carrying them, as grouped by :func:`index_by_name`. When omitted they are
    looked up in ``orders``.
    """

    if lines is None:
        lines = match_by_name(orders, menu_item.name)
    if containing is None:
        containing = [order for order in orders if order_contains(order, menu_item.name)]
    total_orders = len(lines)
    total_quantity = sum(line.quantity for line in lines)
    total_revenue = sum((line.line_total for line in lines), 0.0)
    per_day = daily_quantities(lines)

    return {
        "id": menu_item.id,
        "name": menu_item.name,
        "totalOrders": total_orders,
        "totalQuantity": total_quantity,
        "totalRevenue": total_revenue,
        "averageOrderValue": total_revenue / total_orders if total_orders else 0.0,
        "popularCombinations": popular_combinations(containing, menu_item.name),
        "ordersByTimeOfDay": quadrant_distribution(lines),
        "salesTrend": sales_trend(lines, now),
        "customerFeedback": customer_feedback(menu_item.name, lines, estimator),
        "profitMargin": profit_margin(menu_item, total_quantity, total_revenue, inventory_items),
        "wastageRate": estimator.wastage_rate(menu_item.name, list(per_day.values()))
        if total_quantity
        else 0.0,
        "preparationTime": estimator.preparation_time(menu_item.name, total_orders),
    }


def _performer(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": entry["id"],
        "name": entry["name"],
        "revenue": entry["totalRevenue"],
        "quantity": entry["totalQuantity"],
    }


def analyze_items(
    menu_items: Sequence[MenuItem],
    orders: Sequence[Order],
    inventory_items: Optional[Sequence[InventoryItem]],
    now: datetime,
    estimator: Estimator,
) -> Dict[str, Any]:
    """Roll up every menu item and rank them by revenue.

    ``topPerformers`` and ``lowPerformers`` are the first and last five of the
    ranking; with fewer than ten menu items they overlap.
    """

    lines_by_name, orders_by_name = index_by_name(orders)
    per_item: Dict[str, Dict[str, Any]] = {}
    for menu_item in menu_items:
        per_item[menu_item.id] = analyze_menu_item(
            menu_item,
            orders,
            inventory_items,
            now,
            estimator,
            lines=lines_by_name.get(menu_item.name, []),
            containing=orders_by_name.get(menu_item.name, []),
        )
    ranked = sorted(per_item.values(), key=lambda entry: entry["totalRevenue"], reverse=True)
    LOGGER.debug("Analysed %s menu items across %s orders", len(per_item), len(orders))
    return {
        "items": per_item,
        "topPerformers": [_performer(entry) for entry in ranked[:PERFORMER_LIMIT]],
        "lowPerformers": [_performer(entry) for entry in ranked[-PERFORMER_LIMIT:]],
    }


# ---------------------------------------------------------------------------
# Snapshot-wide item views
# ---------------------------------------------------------------------------


def _peak_hour(containing: Sequence[Order]) -> int:
    """Busiest hour among ``containing``; ties go to the earliest hour."""
    hours: Counter[int] = Counter(order.created_at.hour for order in containing)
    if not hours:
        return 0
    return min(hours.items(), key=lambda entry: (-entry[1], entry[0]))[0]


def _completion_rate(containing: Sequence[Order]) -> float:
    if not containing:
        return 0.0
    completed = sum(1 for order in containing if order.status == "completed")
    return completed / len(containing) * 100


def popular_items(orders: Sequence[Order], limit: int = POPULAR_LIMIT) -> List[Dict[str, Any]]:
    """Best sellers by line revenue across every name that appears on an order."""
    lines_by_name, orders_by_name = index_by_name(orders)
    entries = []
    for name, lines in lines_by_name.items():
        quantity = sum(line.quantity for line in lines)
        revenue = sum((line.line_total for line in lines), 0.0)
        entries.append(
            {
                "name": name,
                "quantity": quantity,
                "revenue": revenue,
                "averageOrderValue": revenue / quantity if quantity else 0.0,
                "peakHour": _peak_hour(orders_by_name[name]),
                "completionRate": _completion_rate(orders_by_name[name]),
            }
        )
    entries.sort(key=lambda entry: entry["revenue"], reverse=True)
    return entries[:limit]


def items_by_time(orders: Sequence[Order], limit: int = TIME_SLOT_LIMIT) -> Dict[str, List[Dict[str, Any]]]:
    counts: Dict[str, Counter[str]] = {quadrant: Counter() for quadrant in QUADRANTS}
    for order in orders:
        slot = counts[classify_quadrant(order.created_at.hour)]
        for line in order.order_items:
            slot[line.item_name] += line.quantity
    result: Dict[str, List[Dict[str, Any]]] = {}
    for quadrant in QUADRANTS:
        ranked = sorted(counts[quadrant].items(), key=lambda entry: entry[1], reverse=True)
        result[quadrant] = [{"name": name, "count": count} for name, count in ranked[:limit]]
    return result


def category_breakdown(
    categories: Sequence[MenuCategory],
    menu_items: Sequence[MenuItem],
    item_rollups: Dict[str, Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Quantity and revenue per menu category, in menu display order.

    Menu items pointing at an unknown category are grouped under
    ``Uncategorized``.
    """

    ordered = sorted(categories, key=lambda category: category.order)
    buckets: Dict[Optional[str], Dict[str, Any]] = {
        category.id: {
            "id": category.id,
            "title": category.title,
            "itemCount": 0,
            "quantity": 0,
            "revenue": 0.0,
        }
        for category in ordered
    }
    for menu_item in menu_items:
        rollup = item_rollups.get(menu_item.id)
        if rollup is None:
            continue
        key = menu_item.category_id if menu_item.category_id in buckets else None
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[None] = {
                "id": None,
                "title": UNCATEGORIZED,
                "itemCount": 0,
                "quantity": 0,
                "revenue": 0.0,
            }
        bucket["itemCount"] += 1
        bucket["quantity"] += rollup["totalQuantity"]
        bucket["revenue"] += rollup["totalRevenue"]
    return list(buckets.values())


__all__ = [
    "analyze_items",
    "analyze_menu_item",
    "category_breakdown",
    "customer_feedback",
    "items_by_time",
    "popular_combinations",
    "popular_items",
    "profit_margin",
    "sales_trend",
]
