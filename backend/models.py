"""
Pydantic models for request/response validation.

JSON uses camelCase (matching the web client); Python code uses snake_case.
Every model accepts either form on input.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from domain.enums import OrderPriority, OrderStatus, UserRole


class ApiModel(BaseModel):
    """Shared base — camelCase aliases, construction by Python name or alias."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _coerce_calendar_date(value):
    """Accept 'YYYY-MM-DD', full ISO datetimes, date or datetime; keep the date part."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


# ── Order snapshot (input to the stage engine) ─────────────────────

class OrderSnapshot(ApiModel):
    """
    Read-only view of an order as consumed by the stage/risk engine.

    `status` and `priority` are plain strings so that an order carrying a
    value outside the known enumerations still classifies (to no stage)
    instead of failing validation.
    """
    id: int
    status: str
    design_approved: bool = False
    sizes_validated: bool = False
    deposit_received: bool = False
    invoice_url: Optional[str] = None
    priority: str = OrderPriority.NORMAL.value
    est_delivery: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    salesperson_id: Optional[str] = None

    @field_validator("est_delivery", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return _coerce_calendar_date(v)

    @field_validator("design_approved", "sizes_validated", "deposit_received", mode="before")
    @classmethod
    def _null_flag_is_false(cls, v):
        return False if v is None else v


# ── Order requests ─────────────────────────────────────────────────

class OrderCreateRequest(ApiModel):
    order_name: str = Field(..., min_length=1, max_length=200)
    org_id: Optional[int] = Field(default=None, gt=0)
    lead_id: Optional[int] = Field(default=None, gt=0)
    salesperson_id: Optional[str] = Field(default=None, max_length=64)
    status: OrderStatus = OrderStatus.NEW
    priority: OrderPriority = OrderPriority.NORMAL
    est_delivery: Optional[date] = None
    contact_name: Optional[str] = Field(default=None, max_length=200)
    contact_email: Optional[str] = Field(default=None, max_length=200)
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    shipping_address: Optional[str] = Field(default=None, max_length=1000)
    bill_to_address: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("est_delivery", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return _coerce_calendar_date(v)


# NOT NULL columns; a PATCH omits them to leave them unchanged
_NOT_NULL_ON_UPDATE = (
    "order_name", "status", "priority",
    "design_approved", "sizes_validated", "deposit_received",
)


class OrderUpdateRequest(ApiModel):
    """Partial update — only fields present in the request body are applied."""
    order_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    org_id: Optional[int] = Field(default=None, gt=0)
    salesperson_id: Optional[str] = Field(default=None, max_length=64)
    status: Optional[OrderStatus] = None
    priority: Optional[OrderPriority] = None
    design_approved: Optional[bool] = None
    sizes_validated: Optional[bool] = None
    deposit_received: Optional[bool] = None
    invoice_url: Optional[str] = Field(default=None, max_length=2000)
    est_delivery: Optional[date] = None
    tracking_number: Optional[str] = Field(default=None, max_length=100)
    order_folder: Optional[str] = Field(default=None, max_length=2000)
    size_form_link: Optional[str] = Field(default=None, max_length=2000)
    contact_name: Optional[str] = Field(default=None, max_length=200)
    contact_email: Optional[str] = Field(default=None, max_length=200)
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    shipping_address: Optional[str] = Field(default=None, max_length=1000)
    bill_to_address: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("est_delivery", mode="before")
    @classmethod
    def _calendar_date(cls, v):
        return _coerce_calendar_date(v)

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        nulled = [
            name for name in _NOT_NULL_ON_UPDATE
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"{', '.join(to_camel(n) for n in nulled)} cannot be null")
        return self


class BulkReassignRequest(ApiModel):
    """Set (or clear, with null) the salesperson on several orders at once."""
    order_ids: List[int] = Field(..., min_length=1, max_length=500)
    salesperson_id: Optional[str] = Field(default=None, max_length=64)


class NoteCreateRequest(ApiModel):
    note: str = Field(..., max_length=5000)

    @field_validator("note")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("note cannot be blank")
        return v


# ── Order responses ────────────────────────────────────────────────

class OrderResponse(ApiModel):
    id: int
    order_code: str
    order_name: str
    org_id: Optional[int] = None
    lead_id: Optional[int] = None
    salesperson_id: Optional[str] = None
    status: str
    design_approved: bool = False
    sizes_validated: bool = False
    deposit_received: bool = False
    invoice_url: Optional[str] = None
    order_folder: Optional[str] = None
    size_form_link: Optional[str] = None
    est_delivery: Optional[date] = None
    tracking_number: Optional[str] = None
    priority: str
    shipping_address: Optional[str] = None
    bill_to_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ActivityResponse(ApiModel):
    id: int
    order_id: int
    user_id: Optional[str] = None
    action: str
    details: Optional[dict] = None
    created_at: datetime


class PrimaryActionResponse(ApiModel):
    label: str
    roles: List[str]


class StageSummaryResponse(ApiModel):
    """A registry entry as rendered on the hub page, with its order count."""
    id: str
    label: str
    description: str
    icon: str
    color_class: str
    bg_color_class: str
    border_color_class: str
    primary_action: PrimaryActionResponse
    count: int = 0


# ── Auth models ────────────────────────────────────────────────────

class RoleLoginRequest(ApiModel):
    role: UserRole


class TokenResponse(ApiModel):
    user_id: str
    role: str
    access_token: str
    token_type: str = "Bearer"
    expires_in_seconds: int


class UserResponse(ApiModel):
    id: str
    email: Optional[str] = None
    name: str
    role: str
    is_active: bool = True
