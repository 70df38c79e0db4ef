SCHEMA_SQL = r"""
-- No foreign keys on purpose: deleting a customer or job leaves dependent rows untouched.

-- Customers
CREATE TABLE IF NOT EXISTS customers (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  phone TEXT,
  address TEXT,
  measurements_notes TEXT,
  first_order_date TEXT,                 -- ISO date, maintained by job saves
  last_order_date TEXT,
  preferred_contact TEXT,
  fabric_preferences TEXT,
  size_fit_notes TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

-- Fabric & materials stock
CREATE TABLE IF NOT EXISTS inventory_items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,                    -- purchase date
  item_name TEXT NOT NULL,
  category TEXT NOT NULL DEFAULT 'Fabric'
    CHECK (category IN ('Fabric','Thread','Lining','Zipper','Embroidery','Other')),
  quantity_bought REAL NOT NULL DEFAULT 0,
  quantity_used REAL NOT NULL DEFAULT 0,
  unit_cost REAL NOT NULL DEFAULT 0,
  supplier_notes TEXT,
  reorder_level REAL,
  location TEXT,
  last_used_date TEXT,
  preferred_supplier TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,

  quantity_left REAL GENERATED ALWAYS AS (quantity_bought - quantity_used) VIRTUAL,
  total_cost REAL GENERATED ALWAYS AS (ROUND(quantity_bought * unit_cost, 2)) VIRTUAL
);

-- Sewing jobs (orders)
CREATE TABLE IF NOT EXISTS sewing_jobs (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,
  customer_id INTEGER,
  customer_name TEXT NOT NULL,
  phone TEXT,
  fabric_source TEXT NOT NULL DEFAULT 'Yours'
    CHECK (fabric_source IN ('Yours','Customer''s')),
  inventory_item_id INTEGER,             -- stock item the fabric is drawn from
  item_sewn TEXT NOT NULL,
  material_cost REAL NOT NULL DEFAULT 0,
  labour_charge REAL NOT NULL DEFAULT 0,
  amount_paid REAL NOT NULL DEFAULT 0,
  status TEXT NOT NULL DEFAULT 'Pending'
    CHECK (status IN ('Pending','Part','Done')),
  notes TEXT,
  delivery_date_expected TEXT,
  delivery_date_actual TEXT,
  fitting_date TEXT,
  hours_spent REAL,
  measurements_reference TEXT,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,

  total_charged REAL GENERATED ALWAYS AS (ROUND(material_cost + labour_charge, 2)) VIRTUAL,
  balance REAL GENERATED ALWAYS AS (ROUND(material_cost + labour_charge - amount_paid, 2)) VIRTUAL,
  profit REAL GENERATED ALWAYS AS (ROUND(amount_paid - material_cost, 2)) VIRTUAL
);

-- Expenses
CREATE TABLE IF NOT EXISTS expenses (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,
  expense_type TEXT NOT NULL
    CHECK (expense_type IN ('Embroidery','Transport','Repair','Supplies','Other')),
  description TEXT,
  amount REAL NOT NULL,
  job_link TEXT,
  payment_method TEXT,                   -- Transfer / Cash / POS / Other, optional
  vendor_payee TEXT,
  is_fixed INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

-- Sales summary (invoices)
CREATE TABLE IF NOT EXISTS sales_summary (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,
  sale_type TEXT NOT NULL
    CHECK (sale_type IN ('Sewing','Fabric','Other')),
  customer_id INTEGER,
  customer_name TEXT NOT NULL,
  total_amount REAL NOT NULL,
  amount_paid REAL NOT NULL DEFAULT 0,
  notes TEXT,
  sewing_job_id INTEGER,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,

  balance REAL GENERATED ALWAYS AS (ROUND(total_amount - amount_paid, 2)) VIRTUAL
);

-- At most one Sewing sale per job
CREATE UNIQUE INDEX IF NOT EXISTS ux_sales_sewing_job
  ON sales_summary(sewing_job_id)
  WHERE sale_type = 'Sewing' AND sewing_job_id IS NOT NULL;

CREATE INDEX IF NOT EXISTS ix_sales_customer_date ON sales_summary(customer_id, date);

-- Collections log (append-only cash receipts)
CREATE TABLE IF NOT EXISTS collections_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  date TEXT NOT NULL,
  customer_id INTEGER,
  customer_name TEXT NOT NULL,
  amount REAL NOT NULL,
  payment_method TEXT NOT NULL
    CHECK (payment_method IN ('Transfer','Cash','POS','Other')),
  notes TEXT,
  sale_id INTEGER,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

-- Key/value business settings
CREATE TABLE IF NOT EXISTS settings (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  key TEXT NOT NULL UNIQUE,
  value TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
"""

DATA_TABLES = (
    "collections_log",
    "sales_summary",
    "expenses",
    "sewing_jobs",
    "inventory_items",
    "customers",
)
