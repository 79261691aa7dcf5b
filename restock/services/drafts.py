from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from restock.models import DRAFT, UNASSIGNED_SUPPLIER, PurchaseOrderDraft, PurchaseOrderLine
from restock.utils import clean_text, utc_now

logger = logging.getLogger(__name__)

# Normalized key of the bucket for lines without a supplier. Real supplier
# names normalize to non-empty strings, so this cannot collide.
UNASSIGNED_KEY = ""

REFERENCE_PREFIX = "PO-"
REFERENCE_FLOOR = 1000

ReferenceFactory = Callable[[], str]


def format_reference(value: int) -> str:
    return f"{REFERENCE_PREFIX}{int(value)}"


def normalize_supplier_key(supplier: Optional[str]) -> str:
    return clean_text(supplier).casefold()


def sort_candidates(lines: Iterable[PurchaseOrderLine]) -> list[PurchaseOrderLine]:
    """Largest suggestions first, then item name (case-insensitive)."""
    return sorted(lines, key=lambda l: (-l.suggested_units, l.item_name.casefold()))


def qualifying_lines(lines: Iterable[PurchaseOrderLine]) -> list[PurchaseOrderLine]:
    return sort_candidates(l for l in lines if l.suggested_units > 0)


def group_lines_by_supplier(lines: Iterable[PurchaseOrderLine]) -> dict[str, list[PurchaseOrderLine]]:
    groups: dict[str, list[PurchaseOrderLine]] = {}
    for line in lines:
        groups.setdefault(normalize_supplier_key(line.preferred_supplier), []).append(line)
    return groups


def supplier_display_name(key: str, lines: list[PurchaseOrderLine]) -> str:
    if key == UNASSIGNED_KEY:
        return UNASSIGNED_SUPPLIER
    # First spelling seen wins ("Acme " and "acme" -> "Acme").
    return clean_text(lines[0].preferred_supplier)


def build_draft(
    lines: list[PurchaseOrderLine],
    *,
    reference: str,
    workspace_id: str,
    source: str = "manual",
    notes: str = "",
    supplier_name: str = "",
    created_at: Optional[datetime] = None,
) -> PurchaseOrderDraft:
    ts = created_at or utc_now()
    return PurchaseOrderDraft(
        reference=reference,
        workspace_id=workspace_id,
        lines=list(lines),
        status=DRAFT,
        source=source,
        notes=clean_text(notes),
        supplier_name=supplier_name,
        created_at=ts,
        updated_at=ts,
    )


def build_drafts_by_supplier(
    lines: Iterable[PurchaseOrderLine],
    *,
    workspace_id: str,
    next_reference: ReferenceFactory,
    source: str = "manual",
    notes: str = "",
    created_at: Optional[datetime] = None,
) -> list[PurchaseOrderDraft]:
    """
    One DRAFT order per supplier.

    Lines with nothing to order are dropped, the rest are ranked (largest
    suggestion first) and split by trimmed, case-insensitive supplier name;
    blank suppliers share the "Unassigned Supplier" order. Ranking is kept
    inside each order. An empty list is a normal result.
    """
    ranked = qualifying_lines(lines)
    if not ranked:
        return []

    groups = group_lines_by_supplier(ranked)
    named = sorted(
        ((supplier_display_name(key, group), group) for key, group in groups.items()),
        key=lambda pair: pair[0].casefold(),
    )

    ts = created_at or utc_now()
    drafts = [
        build_draft(
            group,
            reference=next_reference(),
            workspace_id=workspace_id,
            source=source,
            notes=notes,
            supplier_name=name,
            created_at=ts,
        )
        for name, group in named
    ]

    logger.info(
        "Built %d draft order(s) from %d line(s), %d unit(s) (source=%s)",
        len(drafts),
        len(ranked),
        sum(d.total_suggested_units for d in drafts),
        source,
    )
    return drafts
