"""Tests for receiving stock against orders, quick receipts and counts."""

from __future__ import annotations

import pytest

from restock.models import PARTIAL, RECEIVED, SENT
from restock.services import receiving as receiving_service
from restock.services.catalog import get_item, list_ledger
from restock.services.orders import create_draft, get_order, update_status
from restock.services.receiving import (
    SOURCE_COUNT,
    SOURCE_PO_RECEIVE,
    SOURCE_QUICK_RECEIVE,
    apply_counted_total,
    quick_receive,
    receive_purchase_order,
)
from restock.services.units import total_units

WORKSPACE = "ws-test"


@pytest.fixture
def sent_order(conn, add_item, make_line):
    """A sent order for 10 buns and 5 cheese."""
    buns = add_item("Buns")
    cheese = add_item("Cheese", quantity=2)
    draft = create_draft(
        conn,
        [
            make_line("Buns", 10, "Sysco", item_id=buns.id),
            make_line("Cheese", 5, "Sysco", item_id=cheese.id),
        ],
        workspace_id=WORKSPACE,
    )
    update_status(conn, draft.id, SENT)
    return get_order(conn, draft.id), buns, cheese


def _receive(conn, order, received):
    return receive_purchase_order(conn, order.id, received, workspace_id=WORKSPACE, actor_name="Sam")


def test_partial_then_full_receipt(conn, sent_order):
    order, buns, cheese = sent_order
    buns_line, cheese_line = order.lines

    first = _receive(conn, order, {buns_line.id: 10})
    assert first.message == f"{order.reference} updated to Partially Received with 10 units applied."
    assert get_order(conn, order.id).status == PARTIAL
    assert total_units(get_item(conn, buns.id)) == 10

    second = _receive(conn, order, {cheese_line.id: 5})
    assert second.message == f"{order.reference} fully received. Applied 5 units across 1 line(s)."
    stored = get_order(conn, order.id)
    assert stored.status == RECEIVED
    assert stored.received_at is not None
    assert [l.received_units for l in stored.lines] == [10, 5]
    assert total_units(get_item(conn, cheese.id)) == 7


def test_receipt_writes_ledger_entries(conn, sent_order):
    order, buns, _ = sent_order
    summary = _receive(conn, order, {order.lines[0].id: 4})
    assert len(summary.ledger) == 1
    rows = list_ledger(conn, WORKSPACE, item_id=buns.id)
    assert len(rows) == 1
    row = rows[0]
    assert row["source"] == SOURCE_PO_RECEIVE
    assert row["reason"] == f"PO {order.reference}"
    assert (row["previous_units"], row["new_units"], row["delta_units"]) == (0, 4, 4)
    assert row["actor_name"] == "Sam"


def test_zero_quantities_leave_order_and_message_unchanged(conn, sent_order):
    """Submitting only zeros reports that nothing was entered."""
    order, buns, _ = sent_order
    summary = _receive(conn, order, {order.lines[0].id: 0, order.lines[1].id: 0})
    assert summary.units_applied == 0
    assert summary.message == f"No units entered for {order.reference}; it is still Sent."
    assert get_order(conn, order.id).status == SENT
    assert total_units(get_item(conn, buns.id)) == 0
    assert list_ledger(conn, WORKSPACE) == []


def test_received_order_is_closed(conn, sent_order):
    order, _, _ = sent_order
    _receive(conn, order, {l.id: l.suggested_units for l in order.lines})
    assert _receive(conn, order, {order.lines[0].id: 1}) is None
    assert get_order(conn, order.id).lines[0].received_units == 10


def test_draft_order_is_not_receivable(conn, add_item, make_line):
    item = add_item("Buns")
    draft = create_draft(conn, [make_line("Buns", 3, item_id=item.id)], workspace_id=WORKSPACE)
    assert _receive(conn, draft, {draft.lines[0].id: 3}) is None
    assert total_units(get_item(conn, item.id)) == 0


def test_unknown_line_changes_nothing(conn, sent_order):
    order, buns, _ = sent_order
    with pytest.raises(ValueError):
        _receive(conn, order, {order.lines[0].id: 3, "bogus": 1})
    assert get_order(conn, order.id).status == SENT
    assert total_units(get_item(conn, buns.id)) == 0
    assert list_ledger(conn, WORKSPACE) == []


def test_failed_order_save_rolls_back_stock(conn, sent_order, monkeypatch):
    """Stock, ledger and order persist together or not at all."""
    order, buns, _ = sent_order

    def broken_save(*args, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(receiving_service, "save_order", broken_save)
    with pytest.raises(RuntimeError):
        _receive(conn, order, {order.lines[0].id: 10})
    monkeypatch.undo()

    assert total_units(get_item(conn, buns.id)) == 0
    assert list_ledger(conn, WORKSPACE) == []
    stored = get_order(conn, order.id)
    assert stored.status == SENT
    assert stored.lines[0].received_units == 0


def test_missing_catalog_item_still_updates_order(conn, make_line):
    draft = create_draft(conn, [make_line("Ghost", 2, item_id="gone")], workspace_id=WORKSPACE)
    update_status(conn, draft.id, SENT)
    summary = _receive(conn, draft, {draft.lines[0].id: 2})
    assert summary.items_updated == 0
    assert get_order(conn, draft.id).status == RECEIVED


def test_quick_receive(conn, add_item):
    buns = add_item("Buns", units_per_case=12, quantity=1)
    cheese = add_item("Cheese")
    salt = add_item("Salt", quantity=3)
    summary = quick_receive(
        conn, {buns.id: 5, cheese.id: 2, salt.id: 0}, workspace_id=WORKSPACE, actor_name="Sam"
    )
    assert summary.message == "Applied 7 units across 2 item(s)."
    assert total_units(get_item(conn, buns.id)) == 17
    assert total_units(get_item(conn, salt.id)) == 3
    assert {r["source"] for r in list_ledger(conn, WORKSPACE)} == {SOURCE_QUICK_RECEIVE}


def test_quick_receive_nothing_entered(conn):
    summary = quick_receive(conn, {}, workspace_id=WORKSPACE, actor_name="Sam")
    assert summary.units_applied == 0
    assert summary.message == "No units entered."
    assert list_ledger(conn, WORKSPACE) == []


def test_apply_counted_total(conn, add_item):
    item = add_item("Buns", units_per_case=12, quantity=1, loose_units=2, eaches_per_unit=6, loose_eaches=3)
    entry = apply_counted_total(conn, item.id, 30, workspace_id=WORKSPACE, actor_name="Sam", reason="weekly count")
    assert (entry.previous_units, entry.new_units, entry.delta_units) == (14, 30, 16)
    stored = get_item(conn, item.id)
    assert (stored.quantity, stored.loose_units, stored.loose_eaches) == (2, 6, 0)
    row = list_ledger(conn, WORKSPACE)[0]
    assert row["source"] == SOURCE_COUNT
    assert row["reason"] == "weekly count"


def test_apply_counted_total_rejects_negative(conn, add_item):
    item = add_item("Buns", quantity=4)
    with pytest.raises(ValueError):
        apply_counted_total(conn, item.id, -1, workspace_id=WORKSPACE, actor_name="Sam")
    assert total_units(get_item(conn, item.id)) == 4


def test_apply_counted_total_unknown_item(conn):
    with pytest.raises(ValueError, match="not found"):
        apply_counted_total(conn, "missing", 3, workspace_id=WORKSPACE, actor_name="Sam")
