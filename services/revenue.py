"""Revenue rollups over order totals.

Every function expects order timestamps and ``now`` to already be expressed in
the report timezone (see :func:`services.time_buckets.localize`).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import PAYMENT_METHODS, DateRange, Order
from .time_buckets import (
    day_key,
    days_between,
    hour_label,
    month_key,
    short_date_label,
    trailing_days,
    week_key,
)

TRAILING_DAY_COUNT = 7


def sum_revenue(orders: Iterable[Order]) -> float:
    return sum((order.total_amount for order in orders), 0.0)


def orders_since(orders: Iterable[Order], boundary: datetime) -> List[Order]:
    return [order for order in orders if order.created_at >= boundary]


def orders_between(
    orders: Iterable[Order], start: datetime, end: datetime
) -> List[Order]:
    """Orders created in the half-open window ``[start, end)``."""
    return [order for order in orders if start <= order.created_at < end]


def period_boundaries(now: datetime) -> Dict[str, datetime]:
    return {
        "today": day_key(now),
        "thisWeek": week_key(now),
        "thisMonth": month_key(now),
        "last24Hours": now - timedelta(hours=24),
    }


def revenue_by_payment_method(orders: Iterable[Order]) -> Dict[str, float]:
    totals = {method: 0.0 for method in PAYMENT_METHODS}
    for order in orders:
        if order.payment_method in totals:
            totals[order.payment_method] += order.total_amount
    return totals


def revenue_by_date(orders: Iterable[Order]) -> Dict[date, float]:
    totals: Dict[date, float] = defaultdict(float)
    for order in orders:
        totals[order.created_at.date()] += order.total_amount
    return totals


def revenue_by_day(
    orders: Sequence[Order], now: datetime, explicit_range: Optional[DateRange] = None
) -> List[Dict[str, Any]]:
    """Daily revenue series, oldest first.

    Without ``explicit_range`` the series covers the trailing seven days ending
    today; with one it covers every day of the range.
    """

    if explicit_range is not None:
        days = days_between(explicit_range.start, explicit_range.end)
    else:
        days = trailing_days(now, TRAILING_DAY_COUNT)
    totals = revenue_by_date(orders)
    return [
        {"date": short_date_label(day), "amount": totals.get(day, 0.0)}
        for day in days
    ]


def revenue_by_hour(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    amounts = [0.0] * 24
    counts = [0] * 24
    for order in orders:
        hour = order.created_at.hour
        amounts[hour] += order.total_amount
        counts[hour] += 1
    return [
        {"hour": hour_label(hour), "amount": amounts[hour], "orders": counts[hour]}
        for hour in range(24)
    ]


def summarize_revenue(
    orders: Sequence[Order], now: datetime, explicit_range: Optional[DateRange] = None
) -> Dict[str, Any]:
    summary: Dict[str, Any] = {"total": sum_revenue(orders)}
    for period, boundary in period_boundaries(now).items():
        summary[period] = sum_revenue(orders_since(orders, boundary))
    summary["byPaymentMethod"] = revenue_by_payment_method(orders)
    summary["byHour"] = revenue_by_hour(orders)
    summary["byDay"] = revenue_by_day(orders, now, explicit_range)
    return summary


__all__ = [
    "orders_between",
    "orders_since",
    "period_boundaries",
    "revenue_by_day",
    "revenue_by_hour",
    "revenue_by_payment_method",
    "sum_revenue",
    "summarize_revenue",
]
