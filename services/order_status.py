"""Order counts keyed by lifecycle status, hour and quadrant of day."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Sequence

from .models import ORDER_STATUSES, Order
from .revenue import orders_since, period_boundaries
from .time_buckets import classify_quadrant, empty_quadrants, hour_label

BASE_PREPARATION_MINUTES = 15
MINUTES_PER_LINE_ITEM = 3


def orders_by_status(orders: Sequence[Order]) -> List[Dict[str, Any]]:
    """Count and revenue for each known status.

    Orders whose status is not one of :data:`ORDER_STATUSES` are left out of
    every bucket.
    """

    buckets = {status: {"status": status, "count": 0, "revenue": 0.0} for status in ORDER_STATUSES}
    for order in orders:
        bucket = buckets.get(order.status)
        if bucket is None:
            continue
        bucket["count"] += 1
        bucket["revenue"] += order.total_amount
    return list(buckets.values())


def orders_by_hour(orders: Sequence[Order]) -> List[Dict[str, Any]]:
    counts = [0] * 24
    for order in orders:
        counts[order.created_at.hour] += 1
    return [{"hour": hour_label(hour), "count": counts[hour]} for hour in range(24)]


def orders_by_time_of_day(orders: Sequence[Order]) -> Dict[str, int]:
    counts = empty_quadrants()
    for order in orders:
        counts[classify_quadrant(order.created_at.hour)] += 1
    return counts


def average_order_time(orders: Sequence[Order]) -> int:
    """Estimated minutes to fulfil a completed order, from its line count."""
    completed = [order for order in orders if order.status == "completed"]
    if not completed:
        return 0
    average_lines = sum(len(order.order_items) for order in completed) / len(completed)
    return round(BASE_PREPARATION_MINUTES + average_lines * MINUTES_PER_LINE_ITEM)


def summarize_orders(orders: Sequence[Order], now: datetime) -> Dict[str, Any]:
    boundaries = period_boundaries(now)
    by_status = orders_by_status(orders)
    summary: Dict[str, Any] = {
        "total": len(orders),
        "today": len(orders_since(orders, boundaries["today"])),
        "last24Hours": len(orders_since(orders, boundaries["last24Hours"])),
    }
    for bucket in by_status:
        summary[bucket["status"]] = bucket["count"]
    summary["averageTime"] = average_order_time(orders)
    summary["byStatus"] = by_status
    summary["byHour"] = orders_by_hour(orders)
    summary["byTimeOfDay"] = orders_by_time_of_day(orders)
    return summary


__all__ = [
    "average_order_time",
    "orders_by_hour",
    "orders_by_status",
    "orders_by_time_of_day",
    "summarize_orders",
]
