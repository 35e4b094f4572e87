"""Per-table activity, spend and turnover estimates."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Sequence

from .models import Order
from .revenue import sum_revenue

DINING_SLOT = timedelta(hours=1)
MOST_ACTIVE_LIMIT = 5
TABLE_PEAK_LIMIT = 3


def group_by_table(orders: Sequence[Order]) -> Dict[int, List[Order]]:
    groups: Dict[int, List[Order]] = {}
    for order in orders:
        groups.setdefault(order.table_number, []).append(order)
    return groups


def turnover_rate(orders: Sequence[Order]) -> float:
    """Orders per idle hour for one table.

    Each order is assumed to hold the table for :data:`DINING_SLOT`. Positive
    gaps between one slot ending and the next order arriving are summed, and
    the rate is the order count over that idle time, floored at one hour.
    """

    ordered = sorted(orders, key=lambda order: order.created_at)
    idle_hours = 0.0
    for previous, current in zip(ordered, ordered[1:]):
        gap = (current.created_at - (previous.created_at + DINING_SLOT)).total_seconds() / 3600
        if gap > 0:
            idle_hours += gap
    return len(ordered) / max(idle_hours, 1.0)


def table_peak_hours(orders: Sequence[Order], limit: int = TABLE_PEAK_LIMIT) -> List[Dict[str, int]]:
    hours: Counter[int] = Counter(order.created_at.hour for order in orders)
    ranked = sorted(hours.items(), key=lambda entry: (-entry[1], entry[0]))
    return [{"hour": hour, "orders": count} for hour, count in ranked[:limit]]


def table_metrics(orders: Sequence[Order], now: datetime) -> Dict[str, Any]:
    since = now - timedelta(hours=24)
    metrics = []
    for number, table_orders in group_by_table(orders).items():
        count = len(table_orders)
        metrics.append(
            {
                "number": number,
                "orders": count,
                "last24HourOrders": sum(1 for order in table_orders if order.created_at >= since),
                "averageOrderValue": sum_revenue(table_orders) / count if count else 0.0,
                "turnoverRate": turnover_rate(table_orders),
                "peaks": table_peak_hours(table_orders),
            }
        )

    most_active = sorted(metrics, key=lambda entry: entry["orders"], reverse=True)
    return {
        "mostActive": [
            {
                "number": entry["number"],
                "orders": entry["orders"],
                "last24HourOrders": entry["last24HourOrders"],
                "averageOrderValue": entry["averageOrderValue"],
                "turnoverRate": entry["turnoverRate"],
            }
            for entry in most_active[:MOST_ACTIVE_LIMIT]
        ],
        "averageOrderValue": [
            {"number": entry["number"], "value": entry["averageOrderValue"]} for entry in metrics
        ],
        "turnoverRate": [
            {"number": entry["number"], "rate": entry["turnoverRate"]} for entry in metrics
        ],
        "peakHours": [
            {"number": entry["number"], "peaks": entry["peaks"]} for entry in metrics
        ],
    }


__all__ = ["group_by_table", "table_metrics", "table_peak_hours", "turnover_rate"]
