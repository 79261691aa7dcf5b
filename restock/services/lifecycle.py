from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Mapping, Optional

from restock.models import (
    DRAFT,
    PARTIAL,
    RECEIVED,
    SENT,
    PurchaseOrderDraft,
)
from restock.utils import utc_now

logger = logging.getLogger(__name__)


def receivable_orders(orders: Iterable[PurchaseOrderDraft], workspace_id: str) -> list[PurchaseOrderDraft]:
    return [o for o in orders if o.workspace_id == workspace_id and o.is_receivable]


def find_receivable(orders: Iterable[PurchaseOrderDraft], order_id: str) -> Optional[PurchaseOrderDraft]:
    for order in orders:
        if order.id == order_id and order.is_receivable:
            return order
    return None


def derive_status(order: PurchaseOrderDraft) -> str:
    """
    Status implied by line receipts. Orders with nothing received keep
    whatever DRAFT/SENT state the user gave them.
    """
    total_suggested = order.total_suggested_units
    if total_suggested > 0 and order.total_received_units >= total_suggested:
        return RECEIVED
    if any(l.received_units > 0 for l in order.lines):
        return PARTIAL
    return order.status


def receipt_totals_by_item(order: PurchaseOrderDraft, received_by_line_id: Mapping[str, int]) -> dict[str, int]:
    """Positive receipt units per item id; several lines may share an item."""
    totals: dict[str, int] = {}
    for line in order.lines:
        units = max(0, int(received_by_line_id.get(line.id, 0)))
        if units:
            totals[line.item_id] = totals.get(line.item_id, 0) + units
    return totals


def apply_receipts(
    orders: Iterable[PurchaseOrderDraft],
    order_id: str,
    received_by_line_id: Mapping[str, int],
    received_at: Optional[datetime] = None,
) -> Optional[PurchaseOrderDraft]:
    """
    Add received units to the lines of a SENT/PARTIAL order and re-derive
    its status.

    Receipts are increments; zero or negative entries are ignored. Returns
    None when the order is not (or no longer) receivable. Line ids that do
    not belong to the order raise ValueError before anything changes.
    """
    order = find_receivable(orders, order_id)
    if order is None:
        logger.warning("Receipt ignored: order %s is not receivable", order_id)
        return None

    line_ids = {l.id for l in order.lines}
    unknown = set(received_by_line_id) - line_ids
    if unknown:
        raise ValueError(f"Lines {sorted(unknown)} do not belong to order {order.reference}.")

    applied = 0
    for line in order.lines:
        units = max(0, int(received_by_line_id.get(line.id, 0)))
        if units:
            line.received_units += units
            applied += units

    if not applied:
        return order

    ts = received_at or utc_now()
    previous = order.status
    order.status = derive_status(order)
    if order.sent_at is None:
        order.sent_at = ts
    order.last_received_at = ts
    order.updated_at = ts
    if order.status == RECEIVED and previous != RECEIVED:
        order.received_at = ts

    logger.info(
        "Applied %d unit(s) to %s: %s -> %s (%d/%d)",
        applied,
        order.reference,
        previous,
        order.status,
        order.total_received_units,
        order.total_suggested_units,
    )
    return order


def mark_sent(order: PurchaseOrderDraft, at: Optional[datetime] = None) -> PurchaseOrderDraft:
    if order.status == SENT:
        return order
    if order.status != DRAFT:
        raise ValueError(f"{order.reference} is {order.status_label.lower()} and cannot be marked sent.")
    ts = at or utc_now()
    order.status = SENT
    if order.sent_at is None:
        order.sent_at = ts
    order.updated_at = ts
    logger.info("Order %s marked sent", order.reference)
    return order


def revert_to_draft(order: PurchaseOrderDraft, at: Optional[datetime] = None) -> PurchaseOrderDraft:
    if order.status == DRAFT:
        return order
    if order.status != SENT or order.total_received_units > 0:
        raise ValueError(f"{order.reference} already has receipts and cannot return to draft.")
    order.status = DRAFT
    order.updated_at = at or utc_now()
    logger.info("Order %s returned to draft", order.reference)
    return order


def set_order_status(order: PurchaseOrderDraft, status: str, at: Optional[datetime] = None) -> PurchaseOrderDraft:
    """User-driven transitions only; PARTIAL/RECEIVED come from receipts."""
    if status == SENT:
        return mark_sent(order, at)
    if status == DRAFT:
        return revert_to_draft(order, at)
    raise ValueError(f"Status {status} is derived from receipts and cannot be set directly.")
