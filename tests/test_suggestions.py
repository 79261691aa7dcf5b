"""Tests for the planner list, auto-reorder suggestions and plan text."""

from __future__ import annotations

from datetime import datetime

import pytest

from restock.services.confidence import LOW
from restock.services.reorder import DUE_SOON, HEALTHY, NEEDS_DATA, URGENT
from restock.services.suggestions import (
    auto_draft_lines,
    auto_reorder_suggestion,
    auto_reorder_suggestions,
    automation_signals,
    candidate_draft_lines,
    filter_signals,
    format_auto_plan,
    format_plan,
    planner_draft_lines,
    planner_signals,
    planner_summary,
    review_window_days,
)

NOW = datetime(2024, 3, 5, 14, 30)


@pytest.fixture
def catalog(make_item):
    return [
        make_item("Salt", category="Dry", average_daily_usage=1.0, lead_time_days=4, quantity=100),
        make_item("Napkins", category="Paper"),
        make_item(
            "Cheese",
            category="Dairy",
            location="Walk-in",
            average_daily_usage=5.0,
            lead_time_days=4,
            safety_stock_units=10,
            quantity=15,
            preferred_supplier="Metro Dairy",
        ),
        make_item(
            "Buns",
            category="Bakery",
            average_daily_usage=5.0,
            lead_time_days=4,
            safety_stock_units=10,
            preferred_supplier="Sysco",
            supplier_sku="BN-1",
        ),
    ]


def test_planner_orders_by_status_then_size(catalog):
    signals = planner_signals(catalog)
    assert [s.item.name for s in signals] == ["Buns", "Cheese", "Napkins", "Salt"]
    assert [s.status for s in signals] == [URGENT, DUE_SOON, NEEDS_DATA, HEALTHY]


def test_planner_summary(catalog):
    summary = planner_summary(planner_signals(catalog))
    assert summary == {
        "urgent": 1,
        "due_soon": 1,
        "needs_data": 1,
        "suggested_units": 45,
        "forecast_backed": 0,
    }


def test_filter_by_status_and_search(catalog):
    signals = planner_signals(catalog)
    assert [s.item.name for s in filter_signals(signals, status=DUE_SOON)] == ["Cheese"]
    assert [s.item.name for s in filter_signals(signals, search="walk")] == ["Cheese"]
    assert [s.item.name for s in filter_signals(signals, search=" DRY ")] == ["Salt"]
    assert len(filter_signals(signals)) == 4


def test_planner_draft_lines_snapshot_the_signal(catalog):
    lines = planner_draft_lines(planner_signals(catalog))
    assert [l.item_name for l in lines] == ["Buns", "Cheese"]
    buns = lines[0]
    assert buns.suggested_units == 30
    assert buns.reorder_point == 30
    assert buns.on_hand_units == 0
    assert buns.lead_time_days == 4
    assert buns.forecast_daily_demand == pytest.approx(5.0)
    assert buns.preferred_supplier == "Sysco"
    assert buns.supplier_sku == "BN-1"
    assert buns.received_units == 0


@pytest.mark.parametrize("lead, expected", [(2, 7.0), (4, 7.0), (10, 15.0), (20, 21.0)])
def test_review_window_is_bounded(lead, expected):
    assert review_window_days(lead) == expected


def test_auto_suggestion_covers_lead_and_review(make_item):
    item = make_item("Flour", average_daily_usage=2.0, lead_time_days=4)
    s = auto_reorder_suggestion(item)
    assert s is not None
    assert s.review_window_days == 7.0
    assert s.reorder_point == 8
    assert s.target_units == 22
    assert s.recommended_units == 22
    assert s.risk_score == pytest.approx(-1.0)
    assert s.confidence == LOW
    assert s.is_critical


def test_auto_suggestion_absent_when_stock_covers_target(make_item):
    assert auto_reorder_suggestion(make_item(average_daily_usage=2.0, lead_time_days=4, quantity=22)) is None


def test_auto_suggestion_needs_lead_and_velocity(make_item):
    assert auto_reorder_suggestion(make_item(average_daily_usage=2.0)) is None
    assert auto_reorder_suggestion(make_item(lead_time_days=4)) is None


def test_auto_suggestions_sorted_by_risk(make_item):
    items = [
        make_item("Later", average_daily_usage=1.0, lead_time_days=4, quantity=6),
        make_item("Now", average_daily_usage=1.0, lead_time_days=4),
    ]
    suggestions = auto_reorder_suggestions(items)
    assert [s.item.name for s in suggestions] == ["Now", "Later"]
    lines = auto_draft_lines(suggestions)
    assert [l.item_name for l in lines] == ["Now", "Later"]
    assert lines[0].forecast_daily_demand == pytest.approx(1.0)


def test_candidate_lines_use_the_automation_bar(catalog, make_item):
    """Due Soon items within the lead time are drafted, not just Urgent ones."""
    items = catalog + [
        make_item("Apples", average_daily_usage=5.0, lead_time_days=4, safety_stock_units=10, quantity=15),
        make_item("Flour", average_daily_usage=2.0, lead_time_days=4, safety_stock_units=20, quantity=10),
    ]
    statuses = {s.item.name: s.status for s in planner_signals(items)}
    assert statuses["Cheese"] == DUE_SOON
    assert statuses["Flour"] == DUE_SOON

    lines = candidate_draft_lines(items)
    assert [(l.item_name, l.suggested_units) for l in lines] == [("Buns", 30), ("Apples", 15), ("Cheese", 15)]
    assert lines[2].preferred_supplier == "Metro Dairy"

    signals = automation_signals(items)
    assert signals.auto_draft_candidate_count == len(lines)
    assert signals.auto_draft_suggested_units == sum(l.suggested_units for l in lines)


def test_automation_signals(catalog):
    signals = automation_signals(catalog)
    assert signals.item_count == 4
    assert signals.missing_demand_input_count == 1
    assert signals.stockout_risk_count == 2
    assert signals.urgent_replenishment_count == 1
    assert signals.auto_draft_candidate_count == 2
    assert signals.auto_draft_suggested_units == 45


def test_format_plan(catalog):
    text = format_plan(planner_signals(catalog), now=NOW)
    assert text == (
        "Inventory Replenishment Plan • Mar 05, 2024 14:30\n\n"
        "• Buns: order 30 units (LT 4d, target 30, forecast 5/day)\n"
        "• Cheese: order 15 units (LT 4d, target 30, forecast 5/day)"
    )


def test_format_plan_empty_without_actionable_items(make_item):
    assert format_plan(planner_signals([make_item(quantity=5)]), now=NOW) == ""


def test_format_auto_plan(make_item):
    suggestions = auto_reorder_suggestions([make_item("Flour", average_daily_usage=2.0, lead_time_days=4)])
    assert format_auto_plan(suggestions, now=NOW) == (
        "Auto-Reorder Plan • Mar 05, 2024 14:30\n\n"
        "• Flour: order 22 units (lead 4d + review 7d, target 22, velocity 2/day)"
    )
