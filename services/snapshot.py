"""Utilities for assembling an analytics snapshot from the data layer."""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import InventoryItem, MenuCategory, MenuItem, Order

LOGGER = logging.getLogger(__name__)


def _table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    """Return ``True`` if the table exists in the connected database."""

    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,),
    )
    return cursor.fetchone() is not None


def _rows_to_dicts(rows: Iterable[sqlite3.Row]) -> List[Dict[str, Any]]:
    """Normalise sqlite rows to plain dictionaries."""

    normalised: List[Dict[str, Any]] = []
    for row in rows:
        if isinstance(row, sqlite3.Row):
            normalised.append({key: row[key] for key in row.keys()})
        else:
            normalised.append(dict(row))
    return normalised


def _fetch_table(
    conn: sqlite3.Connection, table_name: str, order_by: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Fetch all rows from ``table_name`` as dictionaries.

    Missing tables are treated as empty datasets.
    """

    if not _table_exists(conn, table_name):
        return []
    query = f"SELECT * FROM {table_name}"
    if order_by:
        query += f" ORDER BY {order_by}"
    cursor = conn.execute(query)
    return _rows_to_dicts(cursor.fetchall())


def _fetch_inventory(conn: sqlite3.Connection) -> Optional[List[Dict[str, Any]]]:
    """Inventory rows, or ``None`` when the inventory cannot be read."""

    try:
        if not _table_exists(conn, "inventory_items"):
            LOGGER.warning("Inventory table is missing; inventory analytics disabled")
            return None
        return _fetch_table(conn, "inventory_items", order_by="name")
    except sqlite3.Error as exc:
        LOGGER.warning("Could not fetch inventory items: %s", exc)
        return None


@dataclass
class CafeSnapshot:
    """Read-only bundle of the entities the analytics engine consumes.

    ``inventory_items`` is ``None`` when inventory storage was unavailable,
    which the engine reports as an empty inventory section.
    """

    orders: Tuple[Order, ...] = ()
    menu_items: Tuple[MenuItem, ...] = ()
    menu_categories: Tuple[MenuCategory, ...] = ()
    inventory_items: Optional[Tuple[InventoryItem, ...]] = field(default=())

    @classmethod
    def from_payload(
        cls,
        *,
        orders: Iterable[Mapping[str, Any]] = (),
        menu_items: Iterable[Mapping[str, Any]] = (),
        menu_categories: Iterable[Mapping[str, Any]] = (),
        inventory_items: Optional[Iterable[Mapping[str, Any]]] = (),
    ) -> "CafeSnapshot":
        """Build a snapshot from plain dictionaries shaped like the data layer rows.

        Orders carry their lines under ``order_items``.
        """

        return cls(
            orders=tuple(Order.from_dict(entry) for entry in orders),
            menu_items=tuple(MenuItem.from_dict(entry) for entry in menu_items),
            menu_categories=tuple(MenuCategory.from_dict(entry) for entry in menu_categories),
            inventory_items=None
            if inventory_items is None
            else tuple(InventoryItem.from_dict(entry) for entry in inventory_items),
        )

    @classmethod
    def build(cls, conn: sqlite3.Connection) -> "CafeSnapshot":
        """Assemble a snapshot from the underlying SQLite database."""

        orders = _fetch_table(conn, "orders", order_by="created_at DESC")
        lines_by_order: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for line in _fetch_table(conn, "order_items"):
            lines_by_order[str(line.get("order_id"))].append(line)
        for order in orders:
            order["order_items"] = lines_by_order.get(str(order.get("id")), [])

        return cls.from_payload(
            orders=orders,
            menu_items=_fetch_table(conn, "menu_items", order_by="name"),
            menu_categories=_fetch_table(conn, "menu_categories", order_by="title"),
            inventory_items=_fetch_inventory(conn),
        )


__all__ = ["CafeSnapshot"]
