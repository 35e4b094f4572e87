import pathlib
import sys
from datetime import datetime, timezone
from itertools import count

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from services.estimators import FixedEstimator
from services.models import InventoryItem, MenuItem, Order

# Saturday, mid-afternoon UTC.
NOW = datetime(2024, 3, 16, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def estimator():
    return FixedEstimator()


@pytest.fixture
def make_order():
    ids = count(1)

    def _make(
        created_at,
        *,
        total=None,
        table=1,
        status="completed",
        payment="cash",
        items=(),
    ):
        order_id = f"ord-{next(ids)}"
        lines = [
            {"item_name": name, "quantity": quantity, "price": price}
            for name, quantity, price in items
        ]
        if total is None:
            total = sum(quantity * price for _, quantity, price in items)
        return Order.from_dict(
            {
                "id": order_id,
                "table_number": table,
                "status": status,
                "payment_method": payment,
                "total_amount": total,
                "created_at": created_at,
                "order_items": lines,
            }
        )

    return _make


@pytest.fixture
def make_menu_item():
    def _make(name, price, *, item_id=None, category_id=None):
        return MenuItem.from_dict(
            {"id": item_id or name.lower().replace(" ", "-"), "name": name, "price": price, "category_id": category_id}
        )

    return _make


@pytest.fixture
def make_inventory_item():
    def _make(name, quantity, min_quantity, *, cost=1.0, unit="kg", supplier=None, expiry_date=None, item_id=None):
        return InventoryItem.from_dict(
            {
                "id": item_id or f"inv-{name.lower()}",
                "name": name,
                "quantity": quantity,
                "unit": unit,
                "min_quantity": min_quantity,
                "cost_per_unit": cost,
                "supplier": supplier,
                "expiry_date": expiry_date,
            }
        )

    return _make
