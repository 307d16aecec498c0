"""
Domain enums shared by the stage engine, services and routers.

All are str-valued so they compare equal to the raw strings stored in the
database and sent over JSON.
"""

from enum import Enum


class OrderStatus(str, Enum):
    NEW = "new"
    WAITING_SIZES = "waiting_sizes"
    DESIGN_CREATED = "design_created"
    SIZES_VALIDATED = "sizes_validated"
    INVOICED = "invoiced"
    PRODUCTION = "production"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES = "sales"
    DESIGNER = "designer"
    OPS = "ops"
    MANUFACTURER = "manufacturer"
    FINANCE = "finance"


class StageId(str, Enum):
    DRAFTS = "drafts"
    AWAITING_SIZES = "awaiting-sizes"
    READY_TO_INVOICE = "ready-to-invoice"
    READY_FOR_PRODUCTION = "ready-for-production"
    IN_PRODUCTION = "in-production"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    ISSUES = "issues"


class ModuleId(str, Enum):
    OVERVIEW = "overview"
    LINE_ITEMS = "line-items"
    DESIGN = "design"
    MANUFACTURING = "manufacturing"
    FORM_LINK = "form-link"
    ACTIVITY = "activity"
