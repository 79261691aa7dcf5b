from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from restock.db import atomic, q, x
from restock.models import PurchaseOrderDraft, PurchaseOrderLine
from restock.services.drafts import (
    REFERENCE_FLOOR,
    ReferenceFactory,
    build_draft,
    build_drafts_by_supplier,
    format_reference,
    qualifying_lines,
)
from restock.services.lifecycle import receivable_orders, set_order_status
from restock.utils import from_iso, to_iso, utc_now

logger = logging.getLogger(__name__)

_REF_NUMBER = re.compile(r"(\d+)$")


def _reference_number(reference: str) -> int:
    m = _REF_NUMBER.search(reference or "")
    return int(m.group(1)) if m else 0


def next_reference(conn, workspace_id: str, *, commit: bool = True) -> str:
    """
    Advance the workspace counter and return the next free PO-#### reference.
    """
    rows = q(conn, "SELECT last_value FROM po_sequences WHERE workspace_id=?", (workspace_id,))
    value = max(REFERENCE_FLOOR, int(rows[0]["last_value"]) if rows else REFERENCE_FLOOR)

    while True:
        value += 1
        ref = format_reference(value)
        taken = q(
            conn,
            "SELECT 1 FROM purchase_orders WHERE workspace_id=? AND reference=? LIMIT 1",
            (workspace_id, ref),
        )
        if not taken:
            break

    x(
        conn,
        """
        INSERT INTO po_sequences (workspace_id, last_value) VALUES (?, ?)
        ON CONFLICT(workspace_id) DO UPDATE SET last_value=excluded.last_value
        """,
        (workspace_id, value),
        commit=commit,
    )
    return ref


def reference_factory(conn, workspace_id: str) -> ReferenceFactory:
    return lambda: next_reference(conn, workspace_id, commit=False)


# ---- row mapping ------------------------------------------------------------


def _row_to_line(r) -> PurchaseOrderLine:
    return PurchaseOrderLine(
        id=str(r["id"]),
        item_id=str(r["item_id"]),
        item_name=str(r["item_name"] or ""),
        category=str(r["category"] or ""),
        suggested_units=int(r["suggested_units"]),
        reorder_point=int(r["reorder_point"]),
        on_hand_units=int(r["on_hand_units"]),
        lead_time_days=int(r["lead_time_days"]),
        forecast_daily_demand=float(r["forecast_daily_demand"]),
        preferred_supplier=r["preferred_supplier"],
        supplier_sku=r["supplier_sku"],
        minimum_order_quantity=r["minimum_order_quantity"],
        reorder_case_pack=r["reorder_case_pack"],
        lead_time_variance_days=r["lead_time_variance_days"],
        received_units=int(r["received_units"]),
    )


def _row_to_order(r, lines: list[PurchaseOrderLine]) -> PurchaseOrderDraft:
    return PurchaseOrderDraft(
        id=str(r["id"]),
        reference=str(r["reference"]),
        workspace_id=str(r["workspace_id"] or ""),
        lines=lines,
        status=str(r["status"]),
        source=str(r["source"] or ""),
        notes=str(r["notes"] or ""),
        supplier_name=str(r["supplier_name"] or ""),
        created_at=from_iso(r["created_at"]) or utc_now(),
        updated_at=from_iso(r["updated_at"]) or utc_now(),
        sent_at=from_iso(r["sent_at"]),
        received_at=from_iso(r["received_at"]),
        last_received_at=from_iso(r["last_received_at"]),
    )


def _lines_by_order(conn, order_ids: list[str]) -> dict[str, list[PurchaseOrderLine]]:
    out: dict[str, list[PurchaseOrderLine]] = {oid: [] for oid in order_ids}
    if not order_ids:
        return out
    marks = ",".join("?" for _ in order_ids)
    rows = q(
        conn,
        f"SELECT * FROM purchase_order_lines WHERE order_id IN ({marks}) ORDER BY order_id, position",
        order_ids,
    )
    for r in rows:
        out[str(r["order_id"])].append(_row_to_line(r))
    return out


# ---- reads --------------------------------------------------------------------


def list_orders(conn, workspace_id: str) -> list[PurchaseOrderDraft]:
    rows = q(conn, "SELECT * FROM purchase_orders WHERE workspace_id=?", (workspace_id,))
    lines = _lines_by_order(conn, [str(r["id"]) for r in rows])
    orders = [_row_to_order(r, lines[str(r["id"])]) for r in rows]
    orders.sort(key=lambda o: (o.updated_at, _reference_number(o.reference)), reverse=True)
    return orders


def get_order(conn, order_id: str) -> Optional[PurchaseOrderDraft]:
    rows = q(conn, "SELECT * FROM purchase_orders WHERE id=?", (str(order_id),))
    if not rows:
        return None
    return _row_to_order(rows[0], _lines_by_order(conn, [str(order_id)])[str(order_id)])


def list_receivable_orders(conn, workspace_id: str) -> list[PurchaseOrderDraft]:
    return receivable_orders(list_orders(conn, workspace_id), workspace_id)


def receive_form_seed(order: PurchaseOrderDraft) -> dict[str, int]:
    """Default receive quantities: whatever is still open on each line."""
    return {line.id: line.open_units for line in order.lines}


# ---- writes -------------------------------------------------------------------


def insert_order(conn, order: PurchaseOrderDraft, *, commit: bool = True) -> None:
    x(
        conn,
        """
        INSERT INTO purchase_orders (
            id, reference, workspace_id, status, source, notes, supplier_name,
            created_at, updated_at, sent_at, received_at, last_received_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            order.id,
            order.reference,
            order.workspace_id,
            order.status,
            order.source,
            order.notes,
            order.supplier_name,
            to_iso(order.created_at),
            to_iso(order.updated_at),
            to_iso(order.sent_at),
            to_iso(order.received_at),
            to_iso(order.last_received_at),
        ),
        commit=False,
    )
    for pos, line in enumerate(order.lines):
        x(
            conn,
            """
            INSERT INTO purchase_order_lines (
                id, order_id, position, item_id, item_name, category,
                suggested_units, reorder_point, on_hand_units, lead_time_days, forecast_daily_demand,
                preferred_supplier, supplier_sku, minimum_order_quantity, reorder_case_pack,
                lead_time_variance_days, received_units
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                line.id,
                order.id,
                pos,
                line.item_id,
                line.item_name,
                line.category,
                line.suggested_units,
                line.reorder_point,
                line.on_hand_units,
                line.lead_time_days,
                line.forecast_daily_demand,
                line.preferred_supplier,
                line.supplier_sku,
                line.minimum_order_quantity,
                line.reorder_case_pack,
                line.lead_time_variance_days,
                line.received_units,
            ),
            commit=False,
        )
    if commit:
        conn.commit()


def save_order(conn, order: PurchaseOrderDraft, *, commit: bool = True) -> None:
    """Persist status, timestamps and line receipts (the only mutable parts)."""
    cur = conn.execute(
        """
        UPDATE purchase_orders
        SET status=?, notes=?, updated_at=?, sent_at=?, received_at=?, last_received_at=?
        WHERE id=?
        """,
        (
            order.status,
            order.notes,
            to_iso(order.updated_at),
            to_iso(order.sent_at),
            to_iso(order.received_at),
            to_iso(order.last_received_at),
            order.id,
        ),
    )
    found = cur.rowcount
    cur.close()
    if not found:
        raise ValueError(f"Order {order.id} not found.")
    for line in order.lines:
        x(
            conn,
            "UPDATE purchase_order_lines SET received_units=? WHERE id=? AND order_id=?",
            (line.received_units, line.id, order.id),
            commit=False,
        )
    if commit:
        conn.commit()


def create_drafts_grouped_by_supplier(
    conn,
    lines: Iterable[PurchaseOrderLine],
    *,
    workspace_id: str,
    source: str = "manual",
    notes: str = "",
) -> list[PurchaseOrderDraft]:
    with atomic(conn):
        drafts = build_drafts_by_supplier(
            lines,
            workspace_id=workspace_id,
            next_reference=reference_factory(conn, workspace_id),
            source=source,
            notes=notes,
        )
        for draft in drafts:
            insert_order(conn, draft, commit=False)
    return drafts


def create_draft(
    conn,
    lines: Iterable[PurchaseOrderLine],
    *,
    workspace_id: str,
    source: str = "manual",
    notes: str = "",
) -> Optional[PurchaseOrderDraft]:
    """Single order for every qualifying line regardless of supplier."""
    ranked = qualifying_lines(lines)
    if not ranked:
        return None
    with atomic(conn):
        draft = build_draft(
            ranked,
            reference=next_reference(conn, workspace_id, commit=False),
            workspace_id=workspace_id,
            source=source,
            notes=notes,
        )
        insert_order(conn, draft, commit=False)
    logger.info("Built draft %s with %d line(s) (source=%s)", draft.reference, draft.item_count, source)
    return draft


def update_status(conn, order_id: str, status: str) -> PurchaseOrderDraft:
    order = get_order(conn, order_id)
    if order is None:
        raise ValueError("Order not found.")
    set_order_status(order, status)
    save_order(conn, order)
    return order


def delete_orders(conn, workspace_id: str) -> int:
    """Remove every order (lines cascade) in a workspace. The reference counter is kept."""
    rows = q(conn, "SELECT COUNT(*) AS n FROM purchase_orders WHERE workspace_id=?", (workspace_id,))
    x(conn, "DELETE FROM purchase_orders WHERE workspace_id=?", (workspace_id,))
    logger.info("Deleted %d order(s) in workspace %s", int(rows[0]["n"]), workspace_id)
    return int(rows[0]["n"])


def workspace_counts(conn, workspace_id: str) -> dict[str, int]:
    """Row counts per table for one workspace (items without a workspace included)."""
    row = q(
        conn,
        """
        SELECT
          (SELECT COUNT(*) FROM items WHERE workspace_id IN (?, '')) AS items,
          (SELECT COUNT(*) FROM purchase_orders WHERE workspace_id=?) AS purchase_orders,
          (SELECT COUNT(*) FROM purchase_order_lines l
             JOIN purchase_orders o ON o.id = l.order_id WHERE o.workspace_id=?) AS purchase_order_lines,
          (SELECT COUNT(*) FROM inventory_ledger WHERE workspace_id=?) AS inventory_ledger
        """,
        (workspace_id, workspace_id, workspace_id, workspace_id),
    )[0]
    return {k: int(row[k]) for k in row.keys()}
