from datetime import date, datetime, timedelta, timezone

from services.models import DateRange
from services.revenue import (
    orders_since,
    period_boundaries,
    revenue_by_day,
    revenue_by_hour,
    revenue_by_payment_method,
    summarize_revenue,
)


def _at(day, hour=12, minute=0):
    return datetime(2024, 3, day, hour, minute, tzinfo=timezone.utc)


def test_empty_orders_give_zero_everywhere(now):
    summary = summarize_revenue([], now)
    assert summary["total"] == 0
    assert summary["today"] == 0
    assert summary["thisWeek"] == 0
    assert summary["thisMonth"] == 0
    assert summary["last24Hours"] == 0
    assert summary["byPaymentMethod"] == {"cash": 0, "online": 0}
    assert len(summary["byHour"]) == 24
    assert all(entry["amount"] == 0 and entry["orders"] == 0 for entry in summary["byHour"])
    assert [entry["amount"] for entry in summary["byDay"]] == [0] * 7


def test_period_revenue_is_measured_from_now(now, make_order):
    orders = [
        make_order(_at(16, 9), total=100),  # today
        make_order(_at(15, 18), total=50),  # yesterday, within 24h
        make_order(_at(11, 10), total=30),  # this week (Monday)
        make_order(_at(2, 10), total=20),  # this month, previous week
        make_order(datetime(2024, 2, 28, 10, tzinfo=timezone.utc), total=10),
    ]
    summary = summarize_revenue(orders, now)
    assert summary["total"] == 210
    assert summary["today"] == 100
    assert summary["last24Hours"] == 150
    assert summary["thisWeek"] == 180
    assert summary["thisMonth"] == 200


def test_today_partitions_total(now, make_order):
    orders = [
        make_order(_at(16, 1), total=12.5),
        make_order(_at(16, 14), total=7.5),
        make_order(_at(14, 9), total=40),
        make_order(_at(1, 9), total=3),
    ]
    summary = summarize_revenue(orders, now)
    before_today = sum(
        order.total_amount for order in orders if order.created_at < period_boundaries(now)["today"]
    )
    assert summary["today"] + before_today == summary["total"]


def test_payment_split_keeps_both_keys_and_ignores_unknown(now, make_order):
    orders = [
        make_order(_at(16), total=80, payment="online"),
        make_order(_at(16), total=20, payment="voucher"),
    ]
    assert revenue_by_payment_method(orders) == {"cash": 0, "online": 80}


def test_revenue_uses_stored_total_not_line_items(now, make_order):
    order = make_order(_at(16), total=90, items=[("Latte", 2, 60)])
    assert summarize_revenue([order], now)["total"] == 90


def test_revenue_by_day_trailing_week(now, make_order):
    orders = [make_order(_at(16), total=5), make_order(_at(10), total=7), make_order(_at(9), total=100)]
    series = revenue_by_day(orders, now)
    assert [entry["date"] for entry in series] == [
        "Mar 10",
        "Mar 11",
        "Mar 12",
        "Mar 13",
        "Mar 14",
        "Mar 15",
        "Mar 16",
    ]
    assert series[0]["amount"] == 7
    assert series[-1]["amount"] == 5


def test_explicit_range_only_changes_daily_series(now, make_order):
    orders = [make_order(_at(2), total=40), make_order(_at(16), total=60)]
    explicit = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 3))
    summary = summarize_revenue(orders, now, explicit)
    assert [entry["date"] for entry in summary["byDay"]] == ["Mar 01", "Mar 02", "Mar 03"]
    assert [entry["amount"] for entry in summary["byDay"]] == [0, 40, 0]
    assert summary["today"] == 60
    assert summary["total"] == 100


def test_revenue_by_hour_counts_and_sums(make_order):
    orders = [make_order(_at(16, 9), total=10), make_order(_at(15, 9, 45), total=5), make_order(_at(16, 23), total=1)]
    series = revenue_by_hour(orders)
    assert series[9] == {"hour": "09:00", "amount": 15, "orders": 2}
    assert series[23] == {"hour": "23:00", "amount": 1, "orders": 1}
    assert series[0] == {"hour": "00:00", "amount": 0, "orders": 0}


def test_orders_since_is_inclusive(now, make_order):
    boundary = now - timedelta(hours=24)
    exactly = make_order(boundary, total=1)
    assert orders_since([exactly], boundary) == [exactly]
