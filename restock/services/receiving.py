from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from restock.db import atomic
from restock.models import RECEIVED, InventoryItem, LedgerEntry, PurchaseOrderDraft
from restock.services.catalog import append_ledger_entry, get_item, get_items, save_item
from restock.services.lifecycle import apply_receipts, receipt_totals_by_item
from restock.services.orders import list_receivable_orders, save_order
from restock.services.units import add_units, apply_total_units, total_units
from restock.utils import clean_text, utc_now

logger = logging.getLogger(__name__)

SOURCE_PO_RECEIVE = "po-receive"
SOURCE_QUICK_RECEIVE = "quick-receive"
SOURCE_COUNT = "count"


@dataclass(frozen=True)
class ReceiptSummary:
    units_applied: int
    lines_received: int
    items_updated: int
    order: Optional[PurchaseOrderDraft] = None
    ledger: tuple[LedgerEntry, ...] = ()

    @property
    def message(self) -> str:
        if self.order is None:
            if self.units_applied <= 0:
                return "No units entered."
            return f"Applied {self.units_applied} units across {self.items_updated} item(s)."
        if self.units_applied <= 0:
            return f"No units entered for {self.order.reference}; it is still {self.order.status_label}."
        if self.order.status == RECEIVED:
            return (
                f"{self.order.reference} fully received. "
                f"Applied {self.units_applied} units across {self.lines_received} line(s)."
            )
        return f"{self.order.reference} updated to {self.order.status_label} with {self.units_applied} units applied."


def _touch(item: InventoryItem, workspace_id: str, ts: datetime) -> None:
    if workspace_id and not clean_text(item.workspace_id):
        item.workspace_id = workspace_id
    item.updated_at = ts


def _receive_into_items(
    conn,
    totals: Mapping[str, int],
    *,
    workspace_id: str,
    actor_name: str,
    source: str,
    reason: Optional[str],
    ts: datetime,
) -> list[LedgerEntry]:
    entries: list[LedgerEntry] = []
    items = get_items(conn, totals)
    for item_id, added in totals.items():
        item = items.get(item_id)
        if item is None:
            # Catalog deletion is not this module's concern; the order still records the receipt.
            logger.warning("Received %d unit(s) for missing item %s", added, item_id)
            continue
        previous, new = add_units(item, added)
        _touch(item, workspace_id, ts)
        save_item(conn, item, commit=False)
        entries.append(
            append_ledger_entry(
                conn,
                item_id=item.id,
                item_name=item.name,
                previous_units=previous,
                new_units=new,
                actor_name=actor_name,
                workspace_id=workspace_id,
                source=source,
                reason=reason,
                commit=False,
            )
        )
    return entries


def receive_purchase_order(
    conn,
    order_id: str,
    received_by_line_id: Mapping[str, int],
    *,
    workspace_id: str,
    actor_name: str,
    received_at: Optional[datetime] = None,
) -> Optional[ReceiptSummary]:
    """
    Apply line receipts to an order and add the same units to on-hand stock.

    Order state, item quantities and ledger rows share one transaction:
    either all of them persist or none do. Returns None when the order is
    not receivable (unknown, still a draft, or already received).
    """
    ts = received_at or utc_now()
    orders = list_receivable_orders(conn, workspace_id)

    with atomic(conn):
        order = apply_receipts(orders, order_id, received_by_line_id, ts)
        if order is None:
            return None

        totals = receipt_totals_by_item(order, received_by_line_id)
        if not totals:
            return ReceiptSummary(units_applied=0, lines_received=0, items_updated=0, order=order)

        entries = _receive_into_items(
            conn,
            totals,
            workspace_id=workspace_id,
            actor_name=actor_name,
            source=SOURCE_PO_RECEIVE,
            reason=f"PO {order.reference}",
            ts=ts,
        )
        save_order(conn, order, commit=False)

    lines_received = sum(1 for v in received_by_line_id.values() if int(v) > 0)
    summary = ReceiptSummary(
        units_applied=sum(totals.values()),
        lines_received=lines_received,
        items_updated=len(entries),
        order=order,
        ledger=tuple(entries),
    )
    logger.info(summary.message)
    return summary


def quick_receive(
    conn,
    received_by_item_id: Mapping[str, int],
    *,
    workspace_id: str,
    actor_name: str,
    received_at: Optional[datetime] = None,
) -> ReceiptSummary:
    """Receive stock without an order (walk-in deliveries, transfers)."""
    totals = {str(k): int(v) for k, v in received_by_item_id.items() if int(v) > 0}
    if not totals:
        return ReceiptSummary(units_applied=0, lines_received=0, items_updated=0)

    ts = received_at or utc_now()
    with atomic(conn):
        entries = _receive_into_items(
            conn,
            totals,
            workspace_id=workspace_id,
            actor_name=actor_name,
            source=SOURCE_QUICK_RECEIVE,
            reason=None,
            ts=ts,
        )

    summary = ReceiptSummary(
        units_applied=sum(e.delta_units for e in entries),
        lines_received=len(entries),
        items_updated=len(entries),
        ledger=tuple(entries),
    )
    logger.info(summary.message)
    return summary


def apply_counted_total(
    conn,
    item_id: str,
    counted_total: int,
    *,
    workspace_id: str,
    actor_name: str,
    reason: Optional[str] = None,
) -> LedgerEntry:
    """
    Replace on-hand with a finished count. Loose eaches are cleared, as
    with any canonical total.
    """
    if int(counted_total) < 0:
        raise ValueError("Counted total must be 0 or more.")

    with atomic(conn):
        item = get_item(conn, item_id)
        if item is None:
            raise ValueError("Item not found.")
        previous = total_units(item)
        apply_total_units(item, int(counted_total))
        _touch(item, workspace_id, utc_now())
        save_item(conn, item, commit=False)
        entry = append_ledger_entry(
            conn,
            item_id=item.id,
            item_name=item.name,
            previous_units=previous,
            new_units=total_units(item),
            actor_name=actor_name,
            workspace_id=workspace_id,
            source=SOURCE_COUNT,
            reason=reason,
            commit=False,
        )

    logger.info("Count applied to %s: %d -> %d", entry.item_name, entry.previous_units, entry.new_units)
    return entry
