"""
Domain constants used across services/routers.
"""

# Early-stage orders older than this many whole days are flagged at risk
STALE_ORDER_DAYS = 14

# Statuses subject to the staleness check
EARLY_STATUSES = frozenset(["new", "waiting_sizes", "design_created"])

# Statuses excluded from the "issues" overlay even when at risk
ISSUES_EXCLUDED_STATUSES = frozenset(["completed", "shipped"])

# Order code prefix, e.g. O-00042
ORDER_CODE_PREFIX = "O"
ORDER_CODE_WIDTH = 5

# Removed from payloads served to the manufacturer role
FINANCIAL_FIELDS = frozenset([
    "unitPrice",
    "lineTotal",
    "subtotal",
    "total",
    "taxAmount",
    "discount",
    "msrp",
    "cost",
    "basePrice",
    "commission",
    "revenue",
    "amountPaid",
    "invoiceUrl",
])
