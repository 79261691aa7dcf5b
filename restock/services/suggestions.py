from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from restock.models import InventoryItem, PurchaseOrderLine
from restock.services.confidence import score_confidence
from restock.services.drafts import sort_candidates
from restock.services.forecast import item_blended_velocity, item_moving_average, item_planning_forecast
from restock.services.quantities import adjust_for_item
from restock.services.reorder import (
    DUE_SOON,
    NEEDS_DATA,
    STATUS_ORDER,
    URGENT,
    ReorderSignal,
    is_auto_draft_candidate,
    is_stockout_risk,
    is_urgent_replenishment,
    item_reorder_signal,
)
from restock.services.units import total_units
from restock.utils import format_quantity, utc_now

REVIEW_WINDOW_MIN_DAYS = 7.0
REVIEW_WINDOW_MAX_DAYS = 21.0
REVIEW_WINDOW_LEAD_FACTOR = 1.5
AUTO_PLAN_LIMIT = 20


@dataclass(frozen=True)
class PlannerSignal:
    item: InventoryItem
    signal: ReorderSignal
    sample_count: int

    @property
    def status(self) -> str:
        return self.signal.status

    @property
    def suggested_units(self) -> int:
        return self.signal.suggested_units


@dataclass(frozen=True)
class AutoReorderSuggestion:
    item: InventoryItem
    on_hand_units: int
    reorder_point: int
    target_units: int
    recommended_units: int
    lead_time_days: float
    review_window_days: float
    velocity_per_day: float
    safety_stock_units: int
    sample_count: int
    days_of_cover: float
    risk_score: float
    confidence: str

    @property
    def is_critical(self) -> bool:
        return self.days_of_cover <= self.lead_time_days


@dataclass(frozen=True)
class AutomationSignals:
    item_count: int
    missing_demand_input_count: int
    stockout_risk_count: int
    urgent_replenishment_count: int
    auto_draft_candidate_count: int
    auto_draft_suggested_units: int


def _name_key(item: InventoryItem) -> str:
    return item.name.casefold()


# ---- replenishment planner (planning forecast) -----------------------------


def planner_signal(item: InventoryItem) -> PlannerSignal:
    signal = item_reorder_signal(item)
    return PlannerSignal(item=item, signal=signal, sample_count=len(item.daily_demand_samples))


def planner_signals(items: Iterable[InventoryItem]) -> list[PlannerSignal]:
    signals = [planner_signal(item) for item in items]
    return sorted(
        signals,
        key=lambda s: (STATUS_ORDER[s.status], -s.suggested_units, _name_key(s.item)),
    )


def actionable_signals(signals: Iterable[PlannerSignal]) -> list[PlannerSignal]:
    return [s for s in signals if s.signal.is_actionable]


def filter_signals(
    signals: Iterable[PlannerSignal], status: Optional[str] = None, search: str = ""
) -> list[PlannerSignal]:
    needle = search.strip().casefold()
    out = []
    for s in signals:
        if status and s.status != status:
            continue
        if needle and not any(
            needle in field.casefold() for field in (s.item.name, s.item.category, s.item.location)
        ):
            continue
        out.append(s)
    return out


def planner_summary(signals: list[PlannerSignal]) -> dict:
    actionable = actionable_signals(signals)
    return {
        "urgent": sum(1 for s in signals if s.status == URGENT),
        "due_soon": sum(1 for s in signals if s.status == DUE_SOON),
        "needs_data": sum(1 for s in signals if s.status == NEEDS_DATA),
        "suggested_units": sum(s.suggested_units for s in actionable),
        "forecast_backed": sum(1 for s in signals if s.sample_count > 0),
    }


def line_from_signal(ps: PlannerSignal) -> PurchaseOrderLine:
    item = ps.item
    return PurchaseOrderLine(
        item_id=item.id,
        item_name=item.name,
        category=item.category,
        suggested_units=adjust_for_item(item, ps.suggested_units),
        reorder_point=ps.signal.reorder_point,
        on_hand_units=ps.signal.on_hand_units,
        lead_time_days=ps.signal.lead_time_days,
        forecast_daily_demand=ps.signal.forecast_daily_demand,
        preferred_supplier=item.preferred_supplier,
        supplier_sku=item.supplier_sku,
        minimum_order_quantity=item.minimum_order_quantity,
        reorder_case_pack=item.reorder_case_pack,
        lead_time_variance_days=item.lead_time_variance_days,
    )


def planner_draft_lines(signals: Iterable[PlannerSignal]) -> list[PurchaseOrderLine]:
    return [line_from_signal(s) for s in actionable_signals(signals)]


# ---- auto-reorder (blended velocity) ----------------------------------------


def review_window_days(lead_time_days: float) -> float:
    return max(REVIEW_WINDOW_MIN_DAYS, min(REVIEW_WINDOW_MAX_DAYS, lead_time_days * REVIEW_WINDOW_LEAD_FACTOR))


def auto_reorder_suggestion(item: InventoryItem) -> Optional[AutoReorderSuggestion]:
    on_hand = total_units(item)
    lead = float(max(0, item.lead_time_days))
    safety = max(0, item.safety_stock_units)
    moving = item_moving_average(item)
    baseline = max(0.0, item.average_daily_usage)
    velocity = item_blended_velocity(item)

    if lead <= 0 or velocity <= 0:
        return None

    review = review_window_days(lead)
    reorder_point = math.ceil(velocity * lead) + safety
    target = math.ceil(velocity * (lead + review)) + safety
    recommended = adjust_for_item(item, max(0, target - on_hand))
    if recommended <= 0:
        return None

    days_of_cover = on_hand / velocity
    sample_count = len(item.daily_demand_samples)
    return AutoReorderSuggestion(
        item=item,
        on_hand_units=on_hand,
        reorder_point=reorder_point,
        target_units=target,
        recommended_units=recommended,
        lead_time_days=lead,
        review_window_days=review,
        velocity_per_day=velocity,
        safety_stock_units=safety,
        sample_count=sample_count,
        days_of_cover=days_of_cover,
        risk_score=(days_of_cover - lead) / max(1.0, lead),
        confidence=score_confidence(sample_count, moving, baseline),
    )


def auto_reorder_suggestions(items: Iterable[InventoryItem]) -> list[AutoReorderSuggestion]:
    suggestions = [s for s in (auto_reorder_suggestion(item) for item in items) if s is not None]
    return sorted(
        suggestions,
        key=lambda s: (s.risk_score, -s.recommended_units, _name_key(s.item)),
    )


def line_from_suggestion(s: AutoReorderSuggestion) -> PurchaseOrderLine:
    item = s.item
    return PurchaseOrderLine(
        item_id=item.id,
        item_name=item.name,
        category=item.category,
        suggested_units=adjust_for_item(item, s.recommended_units),
        reorder_point=s.reorder_point,
        on_hand_units=s.on_hand_units,
        lead_time_days=int(round(s.lead_time_days)),
        forecast_daily_demand=s.velocity_per_day,
        preferred_supplier=item.preferred_supplier,
        supplier_sku=item.supplier_sku,
        minimum_order_quantity=item.minimum_order_quantity,
        reorder_case_pack=item.reorder_case_pack,
        lead_time_variance_days=item.lead_time_variance_days,
    )


def auto_draft_lines(suggestions: Iterable[AutoReorderSuggestion]) -> list[PurchaseOrderLine]:
    return [line_from_suggestion(s) for s in suggestions]


# ---- automation / exception summary ----------------------------------------


def automation_signals(items: Iterable[InventoryItem]) -> AutomationSignals:
    item_count = 0
    missing = stockout = urgent = candidates = candidate_units = 0

    for item in items:
        item_count += 1
        forecast = item_planning_forecast(item)
        lead = max(0, item.lead_time_days)
        if forecast <= 0 or lead <= 0:
            missing += 1
            continue

        on_hand = total_units(item)
        days_of_cover = on_hand / forecast
        if is_stockout_risk(on_hand, days_of_cover, lead):
            stockout += 1
        if is_urgent_replenishment(on_hand, days_of_cover, lead):
            urgent += 1

        reorder_point = math.ceil(forecast * lead) + max(0, item.safety_stock_units)
        suggested = adjust_for_item(item, max(0, reorder_point - on_hand))
        if is_auto_draft_candidate(suggested, on_hand, days_of_cover, lead):
            candidates += 1
            candidate_units += suggested

    return AutomationSignals(
        item_count=item_count,
        missing_demand_input_count=missing,
        stockout_risk_count=stockout,
        urgent_replenishment_count=urgent,
        auto_draft_candidate_count=candidates,
        auto_draft_suggested_units=candidate_units,
    )


def candidate_draft_lines(items: Iterable[InventoryItem]) -> list[PurchaseOrderLine]:
    """
    Lines for every item past the automation bar (empty, or cover within the
    lead time), priced with the planning forecast. These are the same items
    counted by automation_signals.
    """
    lines = []
    for item in items:
        signal = item_reorder_signal(item)
        if signal.status == NEEDS_DATA:
            continue
        if not is_auto_draft_candidate(
            signal.suggested_units, signal.on_hand_units, signal.days_of_supply, signal.lead_time_days
        ):
            continue
        lines.append(line_from_signal(PlannerSignal(item, signal, len(item.daily_demand_samples))))
    return sort_candidates(lines)


# ---- plain-text plans ---------------------------------------------------------


def _stamp(now: Optional[datetime]) -> str:
    return (now or utc_now()).strftime("%b %d, %Y %H:%M")


def plan_lines(signals: Iterable[PlannerSignal]) -> list[str]:
    out = []
    for s in actionable_signals(signals):
        lead = f"LT {s.signal.lead_time_days}d" if s.signal.lead_time_days > 0 else "LT -"
        forecast = format_quantity(s.signal.forecast_daily_demand)
        out.append(
            f"• {s.item.name}: order {s.suggested_units} units "
            f"({lead}, target {s.signal.reorder_point}, forecast {forecast}/day)"
        )
    return out


def auto_plan_lines(suggestions: Iterable[AutoReorderSuggestion], limit: int = AUTO_PLAN_LIMIT) -> list[str]:
    out = []
    for s in list(suggestions)[:limit]:
        lead = int(round(s.lead_time_days))
        review = int(round(s.review_window_days))
        velocity = format_quantity(s.velocity_per_day)
        out.append(
            f"• {s.item.name}: order {s.recommended_units} units "
            f"(lead {lead}d + review {review}d, target {s.target_units}, velocity {velocity}/day)"
        )
    return out


def format_plan(signals: Iterable[PlannerSignal], now: Optional[datetime] = None) -> str:
    lines = plan_lines(signals)
    if not lines:
        return ""
    return f"Inventory Replenishment Plan • {_stamp(now)}\n\n" + "\n".join(lines)


def format_auto_plan(suggestions: Iterable[AutoReorderSuggestion], now: Optional[datetime] = None) -> str:
    lines = auto_plan_lines(suggestions)
    if not lines:
        return ""
    return f"Auto-Reorder Plan • {_stamp(now)}\n\n" + "\n".join(lines)
