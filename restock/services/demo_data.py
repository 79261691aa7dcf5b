from __future__ import annotations

import logging
import random
from datetime import timedelta

from restock.db import ensure_schema
from restock.models import InventoryItem
from restock.services.catalog import create_item
from restock.services.forecast import set_daily_demand_samples
from restock.utils import utc_now

logger = logging.getLogger(__name__)

# name, category, location, supplier, units/case, cases, loose, avg usage, lead, safety, moq, pack
DEMO_ITEMS = [
    ("Burger Buns", "Bakery", "Dry Storage", "Sysco", 24, 2, 6, 30.0, 3, 20, 0, 24),
    ("Brioche Loaves", "Bakery", "Dry Storage", "sysco ", 8, 1, 0, 6.0, 3, 4, 0, 8),
    ("Cheddar Slices", "Dairy", "Walk-in", "Metro Dairy", 12, 0, 5, 9.0, 2, 6, 24, 12),
    ("Whole Milk", "Dairy", "Walk-in", "Metro Dairy", 4, 6, 2, 3.0, 2, 4, 0, 4),
    ("Ground Beef 5lb", "Protein", "Walk-in", "Prime Meats", 6, 1, 1, 5.0, 4, 6, 12, 6),
    ("Chicken Thighs", "Protein", "Freezer", "Prime Meats", 10, 8, 0, 4.0, 4, 5, 0, 10),
    ("Napkins", "Paper", "Back Room", "", 500, 3, 120, 150.0, 7, 200, 0, 500),
    ("To-Go Cups 16oz", "Paper", "Back Room", "", 50, 0, 40, 45.0, 5, 50, 100, 50),
    ("Fresh Basil", "Produce", "Walk-in", "Green Farms", 0, 0, 0, 0.0, 0, 0, 0, 0),
]

LIQUID_ITEMS = [
    # name, category, location, supplier, gallons, avg usage (units), lead, safety
    ("Fryer Oil", "Oils", "Dry Storage", "Sysco", 3.5, 96.0, 5, 128),
]


def wipe_all(conn) -> None:
    # Keep schema, delete data (order matters for FKs).
    for t in ["inventory_ledger", "purchase_order_lines", "purchase_orders", "po_sequences", "items"]:
        conn.execute(f"DELETE FROM {t};")
    conn.commit()
    logger.info("All data wiped")


def _samples_around(avg: float, days: int) -> list[float]:
    if avg <= 0:
        return []
    return [round(max(0.0, random.gauss(avg, avg * 0.25)), 3) for _ in range(days)]


def load_demo_data(conn, *, workspace_id: str, seed: int = 7, demand_window: int = 14) -> int:
    random.seed(seed)
    ensure_schema(conn)

    created = 0
    stamp = utc_now() - timedelta(days=1)
    for name, cat, loc, supplier, upc, cases, loose, avg, lead, safety, moq, pack in DEMO_ITEMS:
        item = InventoryItem(
            name=name,
            workspace_id=workspace_id,
            category=cat,
            location=loc,
            quantity=cases,
            units_per_case=upc,
            loose_units=loose,
            average_daily_usage=avg,
            lead_time_days=lead,
            lead_time_variance_days=1 if lead else 0,
            safety_stock_units=safety,
            minimum_order_quantity=moq,
            reorder_case_pack=pack,
            preferred_supplier=supplier,
            supplier_sku=f"{cat[:3].upper()}-{created + 101}",
            created_at=stamp,
            updated_at=stamp,
        )
        set_daily_demand_samples(item, _samples_around(avg, random.randint(3, 14)), limit=demand_window)
        create_item(conn, item, commit=False)
        created += 1

    for name, cat, loc, supplier, gallons, avg, lead, safety in LIQUID_ITEMS:
        whole = int(gallons)
        item = InventoryItem(
            name=name,
            workspace_id=workspace_id,
            category=cat,
            location=loc,
            is_liquid=True,
            loose_units=whole,
            gallon_fraction=gallons - whole,
            average_daily_usage=avg,
            lead_time_days=lead,
            safety_stock_units=safety,
            preferred_supplier=supplier,
            created_at=stamp,
            updated_at=stamp,
        )
        set_daily_demand_samples(item, _samples_around(avg, 10), limit=demand_window)
        create_item(conn, item, commit=False)
        created += 1

    conn.commit()
    logger.info("Loaded %d demo item(s) into workspace %s", created, workspace_id)
    return created
