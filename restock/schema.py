SCHEMA_SQL = r"""
-- Catalog items (three count representations + planning inputs)
CREATE TABLE IF NOT EXISTS items (
  id TEXT PRIMARY KEY,                     -- uuid4 string
  workspace_id TEXT NOT NULL DEFAULT '',
  name TEXT NOT NULL,
  category TEXT NOT NULL DEFAULT '',
  location TEXT NOT NULL DEFAULT '',

  quantity INTEGER NOT NULL DEFAULT 0,     -- whole cases
  units_per_case INTEGER NOT NULL DEFAULT 0,
  loose_units INTEGER NOT NULL DEFAULT 0,  -- whole gallons for liquids
  eaches_per_unit INTEGER NOT NULL DEFAULT 0,
  loose_eaches INTEGER NOT NULL DEFAULT 0,
  is_liquid INTEGER NOT NULL DEFAULT 0,
  gallon_fraction REAL NOT NULL DEFAULT 0,

  average_daily_usage REAL NOT NULL DEFAULT 0,
  recent_demand_samples TEXT NOT NULL DEFAULT '',   -- "3.0,4.5,..."
  lead_time_days INTEGER NOT NULL DEFAULT 0,
  lead_time_variance_days INTEGER NOT NULL DEFAULT 0,
  safety_stock_units INTEGER NOT NULL DEFAULT 0,
  minimum_order_quantity INTEGER NOT NULL DEFAULT 0,
  reorder_case_pack INTEGER NOT NULL DEFAULT 0,
  preferred_supplier TEXT NOT NULL DEFAULT '',
  supplier_sku TEXT NOT NULL DEFAULT '',

  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

-- Purchase orders (one per supplier group)
CREATE TABLE IF NOT EXISTS purchase_orders (
  id TEXT PRIMARY KEY,
  reference TEXT NOT NULL,
  workspace_id TEXT NOT NULL DEFAULT '',
  status TEXT NOT NULL DEFAULT 'DRAFT',    -- DRAFT / SENT / PARTIAL / RECEIVED
  source TEXT NOT NULL DEFAULT 'manual',
  notes TEXT NOT NULL DEFAULT '',
  supplier_name TEXT NOT NULL DEFAULT '',
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  sent_at TEXT,
  received_at TEXT,
  last_received_at TEXT,
  UNIQUE (workspace_id, reference)
);

-- Order lines (forecast snapshot at creation time + running receipts)
CREATE TABLE IF NOT EXISTS purchase_order_lines (
  id TEXT PRIMARY KEY,
  order_id TEXT NOT NULL,
  position INTEGER NOT NULL DEFAULT 0,
  item_id TEXT NOT NULL,
  item_name TEXT NOT NULL DEFAULT '',
  category TEXT NOT NULL DEFAULT '',
  suggested_units INTEGER NOT NULL,
  reorder_point INTEGER NOT NULL DEFAULT 0,
  on_hand_units INTEGER NOT NULL DEFAULT 0,
  lead_time_days INTEGER NOT NULL DEFAULT 0,
  forecast_daily_demand REAL NOT NULL DEFAULT 0,
  preferred_supplier TEXT,
  supplier_sku TEXT,
  minimum_order_quantity INTEGER,
  reorder_case_pack INTEGER,
  lead_time_variance_days INTEGER,
  received_units INTEGER NOT NULL DEFAULT 0,
  FOREIGN KEY (order_id) REFERENCES purchase_orders(id) ON DELETE CASCADE
);

-- Per-workspace reference counter (PO-1001, PO-1002, ...)
CREATE TABLE IF NOT EXISTS po_sequences (
  workspace_id TEXT PRIMARY KEY,
  last_value INTEGER NOT NULL
);

-- Append-only inventory ledger
CREATE TABLE IF NOT EXISTS inventory_ledger (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  item_id TEXT NOT NULL,
  item_name TEXT NOT NULL DEFAULT '',
  workspace_id TEXT NOT NULL DEFAULT '',
  actor_name TEXT NOT NULL DEFAULT '',
  source TEXT NOT NULL,                    -- po-receive / quick-receive / count / manual
  reason TEXT,
  previous_units INTEGER NOT NULL,
  new_units INTEGER NOT NULL,
  delta_units INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_items_workspace ON items(workspace_id);
CREATE INDEX IF NOT EXISTS idx_po_workspace ON purchase_orders(workspace_id, status);
CREATE INDEX IF NOT EXISTS idx_po_lines_order ON purchase_order_lines(order_id, position);
CREATE INDEX IF NOT EXISTS idx_ledger_item ON inventory_ledger(item_id);
"""
