"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from restock.db import connect_memory
from restock.models import InventoryItem, PurchaseOrderLine
from restock.services.catalog import create_item

WORKSPACE = "ws-test"


@pytest.fixture
def conn():
    c = connect_memory()
    yield c
    c.close()


@pytest.fixture
def make_item():
    """Build an InventoryItem with sensible planning defaults."""

    def _make(name: str = "Burger Buns", **kwargs) -> InventoryItem:
        kwargs.setdefault("workspace_id", WORKSPACE)
        return InventoryItem(name=name, **kwargs)

    return _make


@pytest.fixture
def add_item(conn, make_item):
    """Create and persist an item in the test database."""

    def _add(name: str = "Burger Buns", **kwargs) -> InventoryItem:
        return create_item(conn, make_item(name, **kwargs))

    return _add


@pytest.fixture
def make_line():
    def _make(item_name: str = "Item", suggested_units: int = 10, supplier=None, **kwargs) -> PurchaseOrderLine:
        kwargs.setdefault("item_id", f"item-{item_name}")
        return PurchaseOrderLine(
            item_name=item_name,
            suggested_units=suggested_units,
            preferred_supplier=supplier,
            **kwargs,
        )

    return _make
