"""Growth, peak-hour and service-level ratios across the whole snapshot."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .models import Order
from .revenue import sum_revenue
from .time_buckets import hour_label

PEAK_HOUR_LIMIT = 3


def growth_rate(current_orders: Sequence[Order], reference_orders: Sequence[Order]) -> float:
    """Percentage change of revenue from the reference period to the current one.

    Returns 0 when the reference period earned nothing.
    """

    current = sum_revenue(current_orders)
    reference = sum_revenue(reference_orders)
    if reference == 0:
        return 0.0
    return (current - reference) / reference * 100


def peak_hours(orders: Sequence[Order], limit: int = PEAK_HOUR_LIMIT) -> List[Dict[str, Any]]:
    """Busiest ``HH:00`` labels by order count.

    Labels with equal counts keep the order in which they were first seen in
    ``orders``.
    """

    buckets: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        label = hour_label(order.created_at.hour)
        bucket = buckets.setdefault(label, {"hour": label, "orders": 0, "revenue": 0.0})
        bucket["orders"] += 1
        bucket["revenue"] += order.total_amount
    ranked = sorted(buckets.values(), key=lambda entry: entry["orders"], reverse=True)
    return ranked[:limit]


def _status_share(orders: Sequence[Order], status: str) -> float:
    if not orders:
        return 0.0
    matching = sum(1 for order in orders if order.status == status)
    return matching / len(orders) * 100


def completion_rate(orders: Sequence[Order]) -> float:
    return _status_share(orders, "completed")


def cancellation_rate(orders: Sequence[Order]) -> float:
    return _status_share(orders, "cancelled")


def average_order_value(orders: Sequence[Order]) -> float:
    if not orders:
        return 0.0
    return sum_revenue(orders) / len(orders)


def summarize_performance(orders: Sequence[Order]) -> Dict[str, Any]:
    return {
        "completionRate": completion_rate(orders),
        "cancellationRate": cancellation_rate(orders),
        "averageOrderValue": average_order_value(orders),
        "peakHours": peak_hours(orders),
    }


__all__ = [
    "average_order_value",
    "cancellation_rate",
    "completion_rate",
    "growth_rate",
    "peak_hours",
    "summarize_performance",
]
