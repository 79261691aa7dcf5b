from __future__ import annotations

import logging
from typing import Iterable, Optional

from restock.config import DEFAULT_DEMAND_WINDOW
from restock.db import q, x
from restock.models import InventoryItem, LedgerEntry
from restock.services.forecast import append_daily_demand_sample, format_demand_samples, parse_demand_samples
from restock.utils import clean_text, from_iso, parse_usage_entry, to_iso, utc_now

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = (
    "workspace_id", "name", "category", "location",
    "quantity", "units_per_case", "loose_units", "eaches_per_unit", "loose_eaches",
    "is_liquid", "gallon_fraction",
    "average_daily_usage", "recent_demand_samples",
    "lead_time_days", "lead_time_variance_days", "safety_stock_units",
    "minimum_order_quantity", "reorder_case_pack", "preferred_supplier", "supplier_sku",
    "created_at", "updated_at",
)


def in_workspace(item: InventoryItem, workspace_id: Optional[str]) -> bool:
    # Items never assigned to a workspace are visible everywhere.
    if not workspace_id:
        return True
    scoped = clean_text(item.workspace_id)
    return not scoped or scoped == workspace_id


def _row_to_item(r) -> InventoryItem:
    return InventoryItem(
        id=str(r["id"]),
        workspace_id=str(r["workspace_id"] or ""),
        name=str(r["name"]),
        category=str(r["category"] or ""),
        location=str(r["location"] or ""),
        quantity=int(r["quantity"]),
        units_per_case=int(r["units_per_case"]),
        loose_units=int(r["loose_units"]),
        eaches_per_unit=int(r["eaches_per_unit"]),
        loose_eaches=int(r["loose_eaches"]),
        is_liquid=bool(r["is_liquid"]),
        gallon_fraction=float(r["gallon_fraction"]),
        average_daily_usage=float(r["average_daily_usage"]),
        daily_demand_samples=parse_demand_samples(r["recent_demand_samples"]),
        lead_time_days=int(r["lead_time_days"]),
        lead_time_variance_days=int(r["lead_time_variance_days"]),
        safety_stock_units=int(r["safety_stock_units"]),
        minimum_order_quantity=int(r["minimum_order_quantity"]),
        reorder_case_pack=int(r["reorder_case_pack"]),
        preferred_supplier=str(r["preferred_supplier"] or ""),
        supplier_sku=str(r["supplier_sku"] or ""),
        created_at=from_iso(r["created_at"]) or utc_now(),
        updated_at=from_iso(r["updated_at"]) or utc_now(),
    )


def _item_values(item: InventoryItem) -> tuple:
    return (
        clean_text(item.workspace_id),
        clean_text(item.name),
        clean_text(item.category),
        clean_text(item.location),
        max(0, int(item.quantity)),
        max(0, int(item.units_per_case)),
        max(0, int(item.loose_units)),
        max(0, int(item.eaches_per_unit)),
        max(0, int(item.loose_eaches)),
        1 if item.is_liquid else 0,
        max(0.0, float(item.gallon_fraction)),
        max(0.0, float(item.average_daily_usage)),
        format_demand_samples(item.daily_demand_samples),
        max(0, int(item.lead_time_days)),
        max(0, int(item.lead_time_variance_days)),
        max(0, int(item.safety_stock_units)),
        max(0, int(item.minimum_order_quantity)),
        max(0, int(item.reorder_case_pack)),
        clean_text(item.preferred_supplier),
        clean_text(item.supplier_sku),
        to_iso(item.created_at),
        to_iso(item.updated_at),
    )


def list_items(conn, workspace_id: Optional[str] = None) -> list[InventoryItem]:
    rows = q(conn, "SELECT * FROM items ORDER BY name COLLATE NOCASE, id")
    items = [_row_to_item(r) for r in rows]
    return [i for i in items if in_workspace(i, workspace_id)]


def get_item(conn, item_id: str) -> Optional[InventoryItem]:
    rows = q(conn, "SELECT * FROM items WHERE id=?", (str(item_id),))
    return _row_to_item(rows[0]) if rows else None


def get_items(conn, item_ids: Iterable[str]) -> dict[str, InventoryItem]:
    ids = sorted({str(i) for i in item_ids})
    if not ids:
        return {}
    marks = ",".join("?" for _ in ids)
    rows = q(conn, f"SELECT * FROM items WHERE id IN ({marks})", ids)
    return {str(r["id"]): _row_to_item(r) for r in rows}


def create_item(conn, item: InventoryItem, *, workspace_id: Optional[str] = None, commit: bool = True) -> InventoryItem:
    if not clean_text(item.name):
        raise ValueError("Item name is required.")
    if workspace_id and not clean_text(item.workspace_id):
        item.workspace_id = workspace_id

    cols = ", ".join(("id",) + _ITEM_COLUMNS)
    marks = ", ".join("?" for _ in range(len(_ITEM_COLUMNS) + 1))
    x(conn, f"INSERT INTO items ({cols}) VALUES ({marks})", (item.id,) + _item_values(item), commit=commit)
    logger.debug("Created item %s (%s)", item.name, item.id)
    return item


def save_item(conn, item: InventoryItem, *, commit: bool = True) -> None:
    """Catalog commit boundary for one mutated item."""
    assignments = ", ".join(f"{c}=?" for c in _ITEM_COLUMNS)
    cur = conn.execute(f"UPDATE items SET {assignments} WHERE id=?", _item_values(item) + (item.id,))
    found = cur.rowcount
    cur.close()
    if not found:
        raise ValueError(f"Item {item.id} not found.")
    if commit:
        conn.commit()


def append_ledger_entry(
    conn,
    *,
    item_id: str,
    previous_units: int,
    new_units: int,
    actor_name: str,
    workspace_id: str,
    source: str,
    reason: Optional[str] = None,
    item_name: str = "",
    commit: bool = True,
) -> LedgerEntry:
    entry = LedgerEntry(
        item_id=str(item_id),
        previous_units=int(previous_units),
        new_units=int(new_units),
        actor_name=clean_text(actor_name),
        workspace_id=clean_text(workspace_id),
        source=clean_text(source),
        reason=clean_text(reason) or None,
        item_name=item_name,
    )
    x(
        conn,
        """
        INSERT INTO inventory_ledger (
            ts, item_id, item_name, workspace_id, actor_name, source, reason,
            previous_units, new_units, delta_units
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            to_iso(entry.ts),
            entry.item_id,
            entry.item_name,
            entry.workspace_id,
            entry.actor_name,
            entry.source,
            entry.reason,
            entry.previous_units,
            entry.new_units,
            entry.delta_units,
        ),
        commit=commit,
    )
    logger.debug(
        "Ledger %s: %s %d -> %d (%s)", entry.source, entry.item_id, entry.previous_units, entry.new_units, entry.reason
    )
    return entry


def list_ledger(conn, workspace_id: str, *, item_id: Optional[str] = None, limit: int = 50):
    if item_id:
        return q(
            conn,
            "SELECT * FROM inventory_ledger WHERE workspace_id=? AND item_id=? ORDER BY id DESC LIMIT ?",
            (workspace_id, str(item_id), int(limit)),
        )
    return q(
        conn,
        "SELECT * FROM inventory_ledger WHERE workspace_id=? ORDER BY id DESC LIMIT ?",
        (workspace_id, int(limit)),
    )


def log_usage(
    conn,
    item_id: str,
    value_text: str,
    *,
    workspace_id: Optional[str] = None,
    demand_window: int = DEFAULT_DEMAND_WINDOW,
) -> InventoryItem:
    """Record one day's usage typed by a user (e.g. "18.5")."""
    value = parse_usage_entry(value_text)
    item = get_item(conn, item_id)
    if item is None:
        raise ValueError("Item not found.")

    append_daily_demand_sample(item, value, limit=demand_window)
    if workspace_id and not clean_text(item.workspace_id):
        item.workspace_id = workspace_id
    item.updated_at = utc_now()
    save_item(conn, item)
    logger.info("Logged usage %.3f for %s (%d sample(s))", value, item.name, len(item.daily_demand_samples))
    return item
