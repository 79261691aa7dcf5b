from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from restock.utils import optional_text, positive_or_none, utc_now

# Purchase order lifecycle. DRAFT/SENT are set by the user, PARTIAL/RECEIVED
# are derived from line receipts.
DRAFT = "DRAFT"
SENT = "SENT"
PARTIAL = "PARTIAL"
RECEIVED = "RECEIVED"

ORDER_STATUSES = (DRAFT, SENT, PARTIAL, RECEIVED)
RECEIVABLE_STATUSES = frozenset({SENT, PARTIAL})

STATUS_LABELS = {
    DRAFT: "Draft",
    SENT: "Sent",
    PARTIAL: "Partially Received",
    RECEIVED: "Received",
}

UNASSIGNED_SUPPLIER = "Unassigned Supplier"
MULTIPLE_SUPPLIERS = "Multiple Suppliers"


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class InventoryItem:
    name: str
    id: str = field(default_factory=new_id)
    workspace_id: str = ""
    category: str = ""
    location: str = ""

    quantity: int = 0            # whole cases
    units_per_case: int = 0
    loose_units: int = 0         # whole gallons when is_liquid
    eaches_per_unit: int = 0
    loose_eaches: int = 0
    is_liquid: bool = False
    gallon_fraction: float = 0.0

    average_daily_usage: float = 0.0
    daily_demand_samples: list[float] = field(default_factory=list)
    lead_time_days: int = 0
    lead_time_variance_days: int = 0
    safety_stock_units: int = 0
    minimum_order_quantity: int = 0
    reorder_case_pack: int = 0
    preferred_supplier: str = ""
    supplier_sku: str = ""

    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class PurchaseOrderLine:
    """
    One item on an order. Everything except received_units is a snapshot of
    the forecast at the moment the draft was built.
    """

    item_id: str
    suggested_units: int
    id: str = field(default_factory=new_id)
    item_name: str = ""
    category: str = ""
    reorder_point: int = 0
    on_hand_units: int = 0
    lead_time_days: int = 0
    forecast_daily_demand: float = 0.0
    preferred_supplier: Optional[str] = None
    supplier_sku: Optional[str] = None
    minimum_order_quantity: Optional[int] = None
    reorder_case_pack: Optional[int] = None
    lead_time_variance_days: Optional[int] = None
    received_units: int = 0

    def __post_init__(self) -> None:
        self.suggested_units = max(0, int(self.suggested_units))
        self.reorder_point = max(0, int(self.reorder_point))
        self.on_hand_units = max(0, int(self.on_hand_units))
        self.lead_time_days = max(0, int(self.lead_time_days))
        self.forecast_daily_demand = max(0.0, float(self.forecast_daily_demand))
        self.preferred_supplier = optional_text(self.preferred_supplier)
        self.supplier_sku = optional_text(self.supplier_sku)
        self.minimum_order_quantity = positive_or_none(self.minimum_order_quantity)
        self.reorder_case_pack = positive_or_none(self.reorder_case_pack)
        self.lead_time_variance_days = positive_or_none(self.lead_time_variance_days)
        self.received_units = max(0, int(self.received_units))

    @property
    def open_units(self) -> int:
        return max(0, self.suggested_units - self.received_units)


@dataclass
class PurchaseOrderDraft:
    reference: str
    workspace_id: str
    lines: list[PurchaseOrderLine]
    id: str = field(default_factory=new_id)
    status: str = DRAFT
    source: str = "manual"
    notes: str = ""
    supplier_name: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    sent_at: Optional[datetime] = None
    received_at: Optional[datetime] = None
    last_received_at: Optional[datetime] = None

    @property
    def item_count(self) -> int:
        return len(self.lines)

    @property
    def total_suggested_units(self) -> int:
        return sum(max(0, l.suggested_units) for l in self.lines)

    @property
    def total_received_units(self) -> int:
        return sum(max(0, l.received_units) for l in self.lines)

    @property
    def open_units(self) -> int:
        return max(0, self.total_suggested_units - self.total_received_units)

    @property
    def fulfillment_progress(self) -> float:
        total = self.total_suggested_units
        if total <= 0:
            return 0.0
        return min(1.0, self.total_received_units / total)

    @property
    def is_receivable(self) -> bool:
        return self.status in RECEIVABLE_STATUSES

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)

    @property
    def supplier_label(self) -> str:
        if self.supplier_name:
            return self.supplier_name
        names: dict[str, str] = {}
        for l in self.lines:
            if l.preferred_supplier:
                names.setdefault(l.preferred_supplier.casefold(), l.preferred_supplier)
        if not names:
            return UNASSIGNED_SUPPLIER
        if len(names) == 1:
            return next(iter(names.values()))
        return MULTIPLE_SUPPLIERS


@dataclass(frozen=True)
class LedgerEntry:
    item_id: str
    previous_units: int
    new_units: int
    actor_name: str
    workspace_id: str
    source: str
    reason: Optional[str] = None
    item_name: str = ""
    ts: datetime = field(default_factory=utc_now)

    @property
    def delta_units(self) -> int:
        return self.new_units - self.previous_units
