from __future__ import annotations

# Job status
PENDING = "Pending"
PART = "Part"
DONE = "Done"
JOB_STATUSES = (PENDING, PART, DONE)

# Fabric source
FABRIC_YOURS = "Yours"
FABRIC_CUSTOMERS = "Customer's"
FABRIC_SOURCES = (FABRIC_YOURS, FABRIC_CUSTOMERS)

# Sale types
SALE_SEWING = "Sewing"
SALE_FABRIC = "Fabric"
SALE_OTHER = "Other"
SALE_TYPES = (SALE_SEWING, SALE_FABRIC, SALE_OTHER)

PAYMENT_METHODS = ("Transfer", "Cash", "POS", "Other")

INVENTORY_CATEGORIES = ("Fabric", "Thread", "Lining", "Zipper", "Embroidery", "Other")

EXPENSE_TYPES = ("Embroidery", "Transport", "Repair", "Supplies", "Other")

# Business rules
LOW_STOCK_THRESHOLD = 5
LOW_STOCK_ITEMS_LIMIT = 5
RECENT_JOBS_LIMIT = 5
REORDER_DEFAULT_LEVEL = 10
RECEIVABLE_OVERDUE_DAYS = 30
CUSTOMER_INACTIVE_DAYS = 60
FABRIC_UNITS_PER_JOB = 1

DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (10, 25, 50, 100)
