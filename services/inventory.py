"""Inventory health: stock value, low stock, expiry, suppliers and alerts.

An unavailable inventory (``None``) is a supported input and produces a
zeroed section rather than an error.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from .estimators import Estimator
from .items import COST_RATIO_ESTIMATE
from .models import InventoryItem, Order
from .revenue import revenue_by_date
from .time_buckets import iso_date_label, trailing_days

LOGGER = logging.getLogger(__name__)

EXPIRY_WINDOW_DAYS = 7
EXPIRY_ALERT_DAYS = 3
COST_TREND_DAYS = 30
UNKNOWN_SUPPLIER = "Unknown"


def _format_quantity(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)}"
    return f"{value:g}"


def days_until_expiry(item: InventoryItem, now: datetime) -> Optional[int]:
    """Whole days until ``item`` expires, rounded up; ``None`` without a date."""
    expires_at = item.expires_at
    if expires_at is None:
        return None
    return math.ceil((expires_at - now).total_seconds() / 86400)


def is_low_stock(item: InventoryItem) -> bool:
    return item.quantity <= item.min_quantity


def low_stock_items(items: Sequence[InventoryItem]) -> List[Dict[str, Any]]:
    return [
        {"name": item.name, "quantity": item.quantity, "reorderPoint": item.min_quantity}
        for item in items
        if is_low_stock(item)
    ]


def expiring_items(items: Sequence[InventoryItem], now: datetime) -> List[Dict[str, Any]]:
    expiring = []
    for item in items:
        days = days_until_expiry(item, now)
        if days is not None and 0 <= days <= EXPIRY_WINDOW_DAYS:
            expiring.append(
                {"name": item.name, "quantity": item.quantity, "expiryDate": item.expiry_date}
            )
    return expiring


def supplier_performance(
    items: Sequence[InventoryItem], estimator: Estimator
) -> List[Dict[str, Any]]:
    """One entry per supplier.

    ``itemCount`` and ``stockValue`` come from the inventory itself; the
    ``estimated`` block holds synthetic figures from ``estimator``.
    """

    groups: Dict[str, List[InventoryItem]] = {}
    for item in items:
        groups.setdefault(item.supplier or UNKNOWN_SUPPLIER, []).append(item)

    performance = []
    for name, supplied in groups.items():
        performance.append(
            {
                "name": name,
                "itemCount": len(supplied),
                "stockValue": sum((item.stock_value for item in supplied), 0.0),
                "estimated": {
                    "reliability": estimator.supplier_reliability(name),
                    "averageDeliveryTime": estimator.supplier_delivery_days(name),
                    "qualityRating": estimator.supplier_quality(name),
                    "totalOrders": len(supplied) * estimator.supplier_order_multiplier(name),
                },
            }
        )
    return performance


def cost_trends(
    orders: Sequence[Order], now: datetime, days: int = COST_TREND_DAYS
) -> List[Dict[str, Any]]:
    """Daily ingredient cost estimated as a fixed share of revenue, oldest first."""
    revenue = revenue_by_date(orders)
    return [
        {"date": iso_date_label(day), "totalCost": revenue.get(day, 0.0) * COST_RATIO_ESTIMATE}
        for day in trailing_days(now, days)
    ]


def inventory_alerts(items: Sequence[InventoryItem], now: datetime) -> List[Dict[str, Any]]:
    """Low-stock alerts for every item, followed by near-expiry alerts."""
    alerts: List[Dict[str, Any]] = []
    for item in items:
        if is_low_stock(item):
            alerts.append(
                {
                    "type": "low_stock",
                    "itemName": item.name,
                    "message": f"{item.name} is running low "
                    f"({_format_quantity(item.quantity)} {item.unit} remaining)",
                    "severity": "high" if item.quantity == 0 else "medium",
                }
            )
    for item in items:
        days = days_until_expiry(item, now)
        if days is None or not 0 <= days <= EXPIRY_ALERT_DAYS:
            continue
        alerts.append(
            {
                "type": "expiring",
                "itemName": item.name,
                "message": f"{item.name} expires in {days} day{'' if days == 1 else 's'}",
                "severity": "high" if days <= 1 else "medium",
            }
        )
    return alerts


def _empty_analytics() -> Dict[str, Any]:
    return {
        "totalItems": 0,
        "totalValue": 0.0,
        "lowStockItems": [],
        "expiringItems": [],
        "restockHistory": [],
        "wastageAnalytics": {"totalWastage": 0, "wastageByItem": [], "wastageByReason": {}},
        "supplierPerformance": [],
        "costTrends": [],
    }


def summarize_inventory(
    items: Optional[Sequence[InventoryItem]],
    orders: Sequence[Order],
    now: datetime,
    estimator: Estimator,
) -> Dict[str, Any]:
    if items is None:
        LOGGER.debug("Inventory unavailable; reporting an empty inventory section")
        return {"current": {}, "analytics": _empty_analytics(), "alerts": []}

    analytics = _empty_analytics()
    analytics.update(
        {
            "totalItems": len(items),
            "totalValue": sum((item.stock_value for item in items), 0.0),
            "lowStockItems": low_stock_items(items),
            "expiringItems": expiring_items(items, now),
            "supplierPerformance": supplier_performance(items, estimator),
            "costTrends": cost_trends(orders, now),
        }
    )
    return {
        "current": {item.id: item.to_dict() for item in items},
        "analytics": analytics,
        "alerts": inventory_alerts(items, now),
    }


__all__ = [
    "cost_trends",
    "days_until_expiry",
    "expiring_items",
    "inventory_alerts",
    "low_stock_items",
    "summarize_inventory",
    "supplier_performance",
]
