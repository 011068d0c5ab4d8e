"""Constants for the operations dashboard engine.

These are the code-level defaults. The same values can be overridden through
``config/rules.yaml`` (see ``config.config_loader``); anything missing from the
YAML falls back to what is defined here.

Status values are compared case-insensitively, so they are listed upper-case.
"""

from typing import Dict, List, Tuple


# =============================================================================
# Filtering
# =============================================================================

# Raw filter value that older callers use to mean "no constraint"
LEGACY_UNCONSTRAINED_VALUE = "all"


# =============================================================================
# Time windows
# =============================================================================

DEFAULT_MAINTENANCE_WINDOW_DAYS = 7
DEFAULT_RESTOCK_WINDOW_DAYS = 7


# =============================================================================
# Severity
# =============================================================================

# Ordered lowest to highest; the last entry is the critical level
SEVERITY_LEVELS: List[str] = ["LOW", "MEDIUM", "HIGH", "CRITICAL"]
OPEN_ALERT_STATUSES: List[str] = ["OPEN", "IN_PROGRESS"]


# =============================================================================
# Lifecycle status sets
# =============================================================================

STATUS_SETS: Dict[str, List[str]] = {
    "order_active": ["CONFIRMED", "APPROVED", "PROCESSING", "IN_PROGRESS"],
    "order_pending_approval": ["DRAFT", "PENDING", "PENDING_APPROVAL"],
    "order_completed": ["COMPLETED"],
    "rental_active": ["ACTIVE"],
    "rental_overdue": ["OVERDUE"],
    "employee_active": ["ACTIVE"],
    "employee_on_leave": ["ON-LEAVE", "ON_LEAVE"],
    "customer_active": ["ACTIVE"],
    "transaction_income": ["INCOME"],
    "transaction_expense": ["EXPENSE"],
    "transaction_pending": ["PENDING"],
    "work_order_preventive": ["PREVENTIVE"],
    "work_order_completed": ["COMPLETED"],
    "work_order_canceled": ["CANCELED", "CANCELLED"],
}


# =============================================================================
# KPI bands
# =============================================================================

# (success bound, warning bound)
AVAILABILITY_BANDS: Tuple[float, float] = (95.0, 85.0)
MTTR_BANDS: Tuple[float, float] = (2.0, 8.0)


# =============================================================================
# Default filter configurations per entity
# =============================================================================

DEFAULT_FILTER_CONFIGS: Dict[str, Dict] = {
    "inventory": {
        "search_fields": ["name", "code", "item.number", "item.description"],
        "fields": {
            "category": "equals-string",
            "location": "equals-case-insensitive-substring",
            "quantity": "numeric-equals",
        },
        "derived": ["stock_status"],
    },
    "equipment": {
        "search_fields": ["code", "name", "description"],
        "fields": {
            "type": "equals-string",
            "status": "equals-string",
            "rentalRate": "numeric-equals",
        },
    },
    "rentals": {
        "search_fields": ["rentalNumber", "customer.name", "equipment.code"],
        "fields": {
            "status": "equals-string",
            "startDate": "date-equals",
            "dailyRate": "numeric-equals",
        },
    },
    "orders": {
        "search_fields": ["orderNumber", "customer.name"],
        "fields": {
            "status": "equals-string",
            "createdAt": "date-equals",
        },
    },
    "employees": {
        "search_fields": ["name", "employeeId", "email", "position"],
        "fields": {
            "department": "equals-string",
            "status": "equals-string",
            "location": "equals-case-insensitive-substring",
        },
    },
    "transactions": {
        "search_fields": ["description", "reference", "category"],
        "fields": {
            "type": "equals-string",
            "status": "equals-string",
            "category": "equals-string",
            "date": "date-equals",
            "amount": "numeric-equals",
        },
    },
    "customers": {
        "search_fields": ["name", "email", "contact"],
        "fields": {
            "type": "equals-string",
            "status": "equals-string",
        },
    },
    "work_orders": {
        "search_fields": ["number", "title", "description"],
        "fields": {
            "workOrderType": "equals-string",
            "status": "equals-string",
            "priority": "equals-string",
        },
        "derived": ["is_critical"],
    },
}


# =============================================================================
# Filter presets - "All" is always available for every entity
# =============================================================================

FILTER_PRESETS: Dict[str, Dict[str, Dict]] = {
    "inventory": {
        "All Items": {
            "search": "",
            "constraints": {},
            "description": "Every item in stock",
            "is_default": True,
        },
        "Low Stock": {
            "search": "",
            "constraints": {"stock_status": "low"},
            "description": "Items at or below their reorder point",
            "is_default": False,
        },
        "Out of Stock": {
            "search": "",
            "constraints": {"stock_status": "out"},
            "description": "Items with nothing on hand",
            "is_default": False,
        },
    },
    "rentals": {
        "All Rentals": {
            "search": "",
            "constraints": {},
            "description": "Every rental contract",
            "is_default": True,
        },
        "Active Rentals": {
            "search": "",
            "constraints": {"status": "ACTIVE"},
            "description": "Contracts currently on hire",
            "is_default": False,
        },
        "Overdue Rentals": {
            "search": "",
            "constraints": {"status": "OVERDUE"},
            "description": "Contracts past their return date",
            "is_default": False,
        },
    },
    "work_orders": {
        "All Work Orders": {
            "search": "",
            "constraints": {},
            "description": "Every work order",
            "is_default": True,
        },
        "Critical Open": {
            "search": "",
            "constraints": {"is_critical": "true"},
            "description": "Highest priority work still open",
            "is_default": False,
        },
    },
}
