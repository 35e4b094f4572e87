"""Analytics engine powering the café owner dashboard.

:func:`compute_analytics` turns an in-memory snapshot of orders, menu and
inventory into a single :class:`AnalyticsReport`. It performs no I/O and keeps
no state between calls; the caller supplies the reference ``now``.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, Optional, Sequence

from .estimators import Estimator, RandomEstimator
from .inventory import summarize_inventory
from .items import analyze_items, category_breakdown, items_by_time, popular_items
from .models import DateRange, InventoryItem, MenuCategory, MenuItem, Order
from .order_status import summarize_orders
from .performance import growth_rate, summarize_performance
from .revenue import orders_between, orders_since, summarize_revenue
from .snapshot import CafeSnapshot
from .tables import table_metrics
from .time_buckets import day_key, localize, resolve_timezone, week_key

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsReport:
    """Immutable result of one analytics run.

    Each section is a plain mapping shaped for the dashboard. Use
    :meth:`to_dict` to obtain an independent, JSON-ready copy.
    """

    generated_at: datetime
    timezone: str
    revenue: Dict[str, Any] = field(default_factory=dict)
    orders: Dict[str, Any] = field(default_factory=dict)
    items: Dict[str, Any] = field(default_factory=dict)
    tables: Dict[str, Any] = field(default_factory=dict)
    performance: Dict[str, Any] = field(default_factory=dict)
    item_analytics: Dict[str, Any] = field(default_factory=dict)
    inventory: Dict[str, Any] = field(default_factory=dict)
    categories: Sequence[Dict[str, Any]] = ()

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(
            {
                "generatedAt": self.generated_at.isoformat(),
                "timezone": self.timezone,
                "revenue": self.revenue,
                "orders": self.orders,
                "items": self.items,
                "tables": self.tables,
                "performance": self.performance,
                "itemAnalytics": self.item_analytics,
                "inventory": self.inventory,
                "categories": list(self.categories),
            }
        )


def _localize_order(order: Order, tz: tzinfo) -> Order:
    return replace(
        order,
        created_at=localize(order.created_at, tz),
        order_items=tuple(
            replace(item, created_at=localize(item.created_at, tz)) for item in order.order_items
        ),
    )


def _growth(orders: Sequence[Order], now: datetime) -> Dict[str, float]:
    today_start = day_key(now)
    yesterday_start = day_key(today_start - timedelta(days=1))
    week_start = week_key(now)
    previous_week_start = week_key(week_start - timedelta(days=1))
    return {
        "daily": growth_rate(
            orders_since(orders, today_start),
            orders_between(orders, yesterday_start, today_start),
        ),
        "weekly": growth_rate(
            orders_since(orders, week_start),
            orders_between(orders, previous_week_start, week_start),
        ),
    }


def compute_analytics(
    orders: Sequence[Order],
    menu_items: Sequence[MenuItem],
    inventory_items: Optional[Sequence[InventoryItem]],
    now: datetime,
    explicit_range: Optional[DateRange] = None,
    *,
    menu_categories: Sequence[MenuCategory] = (),
    estimator: Optional[Estimator] = None,
    timezone_name: str = "UTC",
) -> AnalyticsReport:
    """Build the full analytics report for one snapshot.

    ``inventory_items`` may be ``None`` when the inventory could not be
    loaded; the inventory section is then zeroed. ``explicit_range`` only
    narrows the daily revenue chart; every period figure is measured from
    ``now``. Synthetic figures come from ``estimator`` (a fresh
    :class:`RandomEstimator` when omitted).
    """

    tz = resolve_timezone(timezone_name)
    local_now = localize(now, tz)
    local_orders = [_localize_order(order, tz) for order in orders]
    estimator = estimator or RandomEstimator()

    revenue = summarize_revenue(local_orders, local_now, explicit_range)
    revenue["growth"] = _growth(local_orders, local_now)

    item_analytics = analyze_items(menu_items, local_orders, inventory_items, local_now, estimator)

    LOGGER.debug(
        "Computed analytics for %s orders, %s menu items (timezone %s)",
        len(local_orders),
        len(menu_items),
        getattr(tz, "zone", timezone_name),
    )
    return AnalyticsReport(
        generated_at=local_now,
        timezone=getattr(tz, "zone", timezone_name),
        revenue=revenue,
        orders=summarize_orders(local_orders, local_now),
        items={"popular": popular_items(local_orders), "byTime": items_by_time(local_orders)},
        tables=table_metrics(local_orders, local_now),
        performance=summarize_performance(local_orders),
        item_analytics=item_analytics,
        inventory=summarize_inventory(inventory_items, local_orders, local_now, estimator),
        categories=category_breakdown(menu_categories, menu_items, item_analytics["items"]),
    )


class AnalyticsEngine:
    """Binds a reporting timezone and estimator to :func:`compute_analytics`."""

    def __init__(self, timezone_name: str = "UTC", estimator: Optional[Estimator] = None) -> None:
        self.timezone_name = timezone_name
        self.estimator = estimator or RandomEstimator()

    def run(
        self,
        snapshot: CafeSnapshot,
        now: datetime,
        explicit_range: Optional[DateRange] = None,
        *,
        timezone_name: Optional[str] = None,
    ) -> AnalyticsReport:
        return compute_analytics(
            snapshot.orders,
            snapshot.menu_items,
            snapshot.inventory_items,
            now,
            explicit_range,
            menu_categories=snapshot.menu_categories,
            estimator=self.estimator,
            timezone_name=timezone_name or self.timezone_name,
        )


_engine_instance: Optional[AnalyticsEngine] = None


def get_analytics_engine() -> AnalyticsEngine:
    """Return the process-wide engine configured from the environment."""
    global _engine_instance
    if _engine_instance is None:
        seed_text = os.getenv("CAFE_ESTIMATOR_SEED")
        try:
            seed = int(seed_text) if seed_text else None
        except ValueError:
            LOGGER.warning("Ignoring non-integer CAFE_ESTIMATOR_SEED %r", seed_text)
            seed = None
        _engine_instance = AnalyticsEngine(
            timezone_name=os.getenv("CAFE_TIMEZONE", "UTC"),
            estimator=RandomEstimator(seed),
        )
    return _engine_instance


def reset_analytics_engine() -> None:
    global _engine_instance
    _engine_instance = None


__all__ = [
    "AnalyticsEngine",
    "AnalyticsReport",
    "compute_analytics",
    "get_analytics_engine",
    "reset_analytics_engine",
]
