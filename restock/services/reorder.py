from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from restock.models import InventoryItem
from restock.services.forecast import item_planning_forecast
from restock.services.quantities import adjust_order_quantity
from restock.services.units import total_units

URGENT = "URGENT"
DUE_SOON = "DUE_SOON"
NEEDS_DATA = "NEEDS_DATA"
HEALTHY = "HEALTHY"

# Planner list ordering
STATUS_ORDER = {URGENT: 0, DUE_SOON: 1, NEEDS_DATA: 2, HEALTHY: 3}

STATUS_LABELS = {
    URGENT: "Urgent",
    DUE_SOON: "Due Soon",
    NEEDS_DATA: "Needs Data",
    HEALTHY: "Healthy",
}

URGENT_LEAD_FRACTION = 0.5


@dataclass(frozen=True)
class ReorderSignal:
    status: str
    forecast_daily_demand: float
    lead_time_days: int
    safety_stock_units: int
    on_hand_units: int
    reorder_point: int = 0
    raw_suggested_units: int = 0
    suggested_units: int = 0
    days_of_supply: Optional[float] = None

    @property
    def is_actionable(self) -> bool:
        return self.status in (URGENT, DUE_SOON) and self.suggested_units > 0


# ---- threshold policies -------------------------------------------------
# Two distinct bars: "alarm a human" (half the lead time) and "act
# automatically" (the full lead time). Keep them separate.


def urgent_cutoff_days(lead_time_days: float) -> float:
    return max(1.0, float(lead_time_days) * URGENT_LEAD_FRACTION)


def automation_cutoff_days(lead_time_days: float) -> float:
    return max(1.0, float(lead_time_days))


def planner_status(
    suggested_units: int, on_hand_units: int, days_of_supply: Optional[float], lead_time_days: float
) -> str:
    if suggested_units <= 0:
        return HEALTHY
    if on_hand_units == 0 or (days_of_supply or 0.0) <= urgent_cutoff_days(lead_time_days):
        return URGENT
    return DUE_SOON


def is_auto_draft_candidate(
    suggested_units: int, on_hand_units: int, days_of_supply: Optional[float], lead_time_days: float
) -> bool:
    if suggested_units <= 0:
        return False
    return on_hand_units == 0 or (days_of_supply or 0.0) <= automation_cutoff_days(lead_time_days)


def is_stockout_risk(on_hand_units: int, days_of_supply: Optional[float], lead_time_days: float) -> bool:
    return on_hand_units == 0 or (days_of_supply or 0.0) <= automation_cutoff_days(lead_time_days)


def is_urgent_replenishment(on_hand_units: int, days_of_supply: Optional[float], lead_time_days: float) -> bool:
    return on_hand_units == 0 or (days_of_supply or 0.0) <= urgent_cutoff_days(lead_time_days)


# ---- calculator -----------------------------------------------------------


def compute_reorder_signal(
    *,
    forecast: float,
    lead_time_days: int,
    safety_stock_units: int,
    on_hand_units: int,
    minimum_order_quantity: Optional[int] = None,
    reorder_case_pack: Optional[int] = None,
) -> ReorderSignal:
    """
    Reorder point and suggested order for one item.

    Missing demand or lead time yields NEEDS_DATA with no reorder point;
    that is an expected outcome for new catalog items.
    """
    forecast = max(0.0, float(forecast))
    lead = max(0, int(lead_time_days))
    safety = max(0, int(safety_stock_units))
    on_hand = max(0, int(on_hand_units))

    if forecast <= 0 or lead <= 0:
        return ReorderSignal(
            status=NEEDS_DATA,
            forecast_daily_demand=forecast,
            lead_time_days=lead,
            safety_stock_units=safety,
            on_hand_units=on_hand,
        )

    demand_during_lead = math.ceil(forecast * lead)
    reorder_point = demand_during_lead + safety
    raw_suggested = max(0, reorder_point - on_hand)
    suggested = adjust_order_quantity(raw_suggested, minimum_order_quantity, reorder_case_pack)
    days_of_supply = on_hand / forecast

    return ReorderSignal(
        status=planner_status(suggested, on_hand, days_of_supply, lead),
        forecast_daily_demand=forecast,
        lead_time_days=lead,
        safety_stock_units=safety,
        on_hand_units=on_hand,
        reorder_point=reorder_point,
        raw_suggested_units=raw_suggested,
        suggested_units=suggested,
        days_of_supply=days_of_supply,
    )


def item_reorder_signal(item: InventoryItem, forecast: Optional[float] = None) -> ReorderSignal:
    """Signal for a catalog item; defaults to the planning forecast."""
    if forecast is None:
        forecast = item_planning_forecast(item)
    return compute_reorder_signal(
        forecast=forecast,
        lead_time_days=item.lead_time_days,
        safety_stock_units=item.safety_stock_units,
        on_hand_units=total_units(item),
        minimum_order_quantity=item.minimum_order_quantity,
        reorder_case_pack=item.reorder_case_pack,
    )
