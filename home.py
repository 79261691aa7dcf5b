from __future__ import annotations

import streamlit as st

from restock.config import get_settings
from restock.db import get_conn, ensure_schema
from restock.logging_config import setup_logging
from restock.services.catalog import list_items
from restock.services.orders import create_drafts_grouped_by_supplier
from restock.services.suggestions import automation_signals, candidate_draft_lines
from restock.utils import utc_now

st.set_page_config(page_title="Restock", page_icon="📦", layout="wide")

st.title("📦 Restock — Demand-Driven Replenishment")
st.caption("Forecast usage, compute reorder points, draft supplier purchase orders and receive against them.")

settings = get_settings()
setup_logging(settings)
conn = get_conn(settings.db_path)
ensure_schema(conn)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")
    st.write(f"**Workspace:** `{settings.workspace_id}`")

items = list_items(conn, settings.workspace_id)
signals = automation_signals(items)

c1, c2, c3, c4 = st.columns(4)
c1.metric("Items", signals.item_count)
c2.metric("Urgent", signals.urgent_replenishment_count)
c3.metric("Stockout risk", signals.stockout_risk_count)
c4.metric("Missing demand inputs", signals.missing_demand_input_count)

if signals.auto_draft_candidate_count > 0:
    st.warning(
        f"{signals.auto_draft_candidate_count} SKU(s) need {signals.auto_draft_suggested_units} units.",
        icon="⚠️",
    )
    if not settings.can_manage_purchasing:
        st.caption("Only owners and managers can create purchase orders.")
    elif st.button("Create draft POs", type="primary"):
        try:
            lines = candidate_draft_lines(items)
            notes = f"Generated from Automation Inbox on {utc_now().strftime('%b %d, %Y %H:%M')}."
            drafts = create_drafts_grouped_by_supplier(
                conn, lines, workspace_id=settings.workspace_id, source="automation-inbox", notes=notes
            )
            if not drafts:
                st.info("No qualifying low-stock items are ready for an auto draft PO.")
            elif len(drafts) == 1:
                d = drafts[0]
                st.success(f"Created {d.reference} with {d.item_count} items and {d.total_suggested_units} suggested units.")
            else:
                st.success(
                    f"Created {len(drafts)} supplier drafts with {sum(d.item_count for d in drafts)} items and "
                    f"{sum(d.total_suggested_units for d in drafts)} suggested units."
                )
        except Exception as e:
            st.error(str(e))

st.info(
    "Use the left sidebar navigation. Start with **🧪 Data Management** to load demo data, then try the "
    "**Replenishment Planner**, **Purchase Orders** and **Receiving**.",
    icon="ℹ️",
)
