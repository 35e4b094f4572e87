"""Immutable café entities consumed by the analytics engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from dateutil.parser import parse as dateutil_parse

ORDER_STATUSES: Tuple[str, ...] = ("pending", "preparing", "completed", "cancelled")
PAYMENT_METHODS: Tuple[str, ...] = ("cash", "online")
MAX_RANGE_DAYS = 366


class AnalyticsInputError(ValueError):
    """Raised when a snapshot record cannot be placed on the calendar."""


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    try:
        parsed = dateutil_parse(str(value))
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _float(value: Any) -> float:
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _int(value: Any) -> int:
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _optional_text(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)


def _serialise_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_serialise_value(entry) for entry in value]
    if isinstance(value, dict):
        return {key: _serialise_value(entry) for key, entry in value.items()}
    return value


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range used to restrict the daily revenue chart."""

    start: date
    end: date

    @classmethod
    def parse(cls, start: Any, end: Any) -> "DateRange":
        start_dt = _parse_datetime(start)
        end_dt = _parse_datetime(end)
        if start_dt is None or end_dt is None:
            raise ValueError(f"Could not parse date range '{start}' to '{end}'")
        first, last = start_dt.date(), end_dt.date()
        if last < first:
            raise ValueError(f"Date range ends before it starts: '{start}' to '{end}'")
        if (last - first).days + 1 > MAX_RANGE_DAYS:
            raise ValueError(f"Date range may span at most {MAX_RANGE_DAYS} days")
        return cls(start=first, end=last)


@dataclass(frozen=True)
class OrderItem:
    """A single line on an order; ``item_name`` is the join key to the menu."""

    item_name: str
    quantity: int
    price: float
    created_at: datetime
    id: Optional[str] = None
    order_id: Optional[str] = None

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_dict(
        cls, payload: Mapping[str, Any], *, order_created_at: datetime
    ) -> "OrderItem":
        created_at = _parse_datetime(payload.get("created_at")) or order_created_at
        return cls(
            item_name=str(payload.get("item_name") or ""),
            quantity=_int(payload.get("quantity")),
            price=_float(payload.get("price")),
            created_at=created_at,
            id=_optional_text(payload.get("id")),
            order_id=_optional_text(payload.get("order_id")),
        )


@dataclass(frozen=True)
class Order:
    id: str
    table_number: int
    status: str
    payment_method: str
    total_amount: float
    created_at: datetime
    order_items: Tuple[OrderItem, ...] = ()
    customer_name: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Order":
        """Build an order from a data-layer row with nested ``order_items``.

        The timestamp is the only field the engine cannot work without, so an
        unusable ``created_at`` raises :class:`AnalyticsInputError`. Every other
        field is coerced without validation.
        """

        order_id = str(payload.get("id") or "")
        created_at = _parse_datetime(payload.get("created_at"))
        if created_at is None:
            raise AnalyticsInputError(
                f"Order '{order_id}' has an unusable created_at value "
                f"{payload.get('created_at')!r}"
            )
        items = tuple(
            OrderItem.from_dict(entry, order_created_at=created_at)
            for entry in payload.get("order_items") or []
        )
        return cls(
            id=order_id,
            table_number=_int(payload.get("table_number")),
            status=str(payload.get("status") or ""),
            payment_method=str(payload.get("payment_method") or ""),
            total_amount=_float(payload.get("total_amount")),
            created_at=created_at,
            order_items=items,
            customer_name=_optional_text(payload.get("customer_name")),
        )


@dataclass(frozen=True)
class MenuCategory:
    id: str
    title: str
    note: Optional[str] = None
    order: int = 0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MenuCategory":
        return cls(
            id=str(payload.get("id") or ""),
            title=str(payload.get("title") or ""),
            note=_optional_text(payload.get("note")),
            order=_int(payload.get("order")),
        )


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    price: float
    category_id: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MenuItem":
        order_value = payload.get("order")
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            price=_float(payload.get("price")),
            category_id=_optional_text(payload.get("category_id")),
            image_url=_optional_text(payload.get("image_url")),
            order=_int(order_value) if order_value not in (None, "") else None,
        )


@dataclass(frozen=True)
class InventoryItem:
    id: str
    name: str
    quantity: float
    unit: str
    min_quantity: float
    cost_per_unit: float
    category: Optional[str] = None
    supplier: Optional[str] = None
    location: Optional[str] = None
    expiry_date: Optional[str] = None
    description: Optional[str] = None
    reorder_quantity: float = 0.0
    last_ordered_date: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def stock_value(self) -> float:
        return self.quantity * self.cost_per_unit

    @property
    def expires_at(self) -> Optional[datetime]:
        return _parse_datetime(self.expiry_date)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload.pop("extra")
        payload.update(self.extra)
        return _serialise_value(payload)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "InventoryItem":
        known = {
            "id",
            "name",
            "quantity",
            "unit",
            "min_quantity",
            "cost_per_unit",
            "category",
            "supplier",
            "location",
            "expiry_date",
            "description",
            "reorder_quantity",
            "last_ordered_date",
        }
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            quantity=_float(payload.get("quantity")),
            unit=str(payload.get("unit") or ""),
            min_quantity=_float(payload.get("min_quantity")),
            cost_per_unit=_float(payload.get("cost_per_unit")),
            category=_optional_text(payload.get("category")),
            supplier=_optional_text(payload.get("supplier")),
            location=_optional_text(payload.get("location")),
            expiry_date=_optional_text(payload.get("expiry_date")),
            description=_optional_text(payload.get("description")),
            reorder_quantity=_float(payload.get("reorder_quantity")),
            last_ordered_date=_optional_text(payload.get("last_ordered_date")),
            extra={key: value for key, value in payload.items() if key not in known},
        )


__all__ = [
    "AnalyticsInputError",
    "DateRange",
    "InventoryItem",
    "MAX_RANGE_DAYS",
    "MenuCategory",
    "MenuItem",
    "ORDER_STATUSES",
    "Order",
    "OrderItem",
    "PAYMENT_METHODS",
]
