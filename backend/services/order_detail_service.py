"""
Order Detail Service — progressive disclosure for the order detail view.

Decides, per role and stage, which sections are shown by default, which sit
behind the "Advanced" toggle, and which module (tab) opens first.

status_to_stage() is a second, coarser status → stage mapping used only to
pick a default module when the caller does not know the stage. It does not
consult milestone flags or invoice_url, so it can disagree with
stage_service.get_order_stage(); describe_stage_divergence() lists where.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from itertools import product
from types import MappingProxyType
from typing import Mapping, Optional

from domain.enums import ModuleId, OrderStatus, StageId, UserRole
from models import OrderSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionVisibility:
    default_visible: tuple[str, ...]
    advanced_sections: tuple[str, ...]
    default_module: str


@dataclass(frozen=True)
class StageDefaults:
    primary_module: str
    priority_sections: tuple[str, ...]


ROLE_SECTION_CONFIG: Mapping[str, SectionVisibility] = MappingProxyType({
    UserRole.ADMIN.value: SectionVisibility(
        default_visible=("status-header", "progress-milestones", "customer-info", "order-summary", "tracking"),
        advanced_sections=("shipping-address", "billing-address", "invoice-links", "folder-links", "totals", "admin-controls"),
        default_module=ModuleId.OVERVIEW.value,
    ),
    UserRole.SALES.value: SectionVisibility(
        default_visible=("status-header", "progress-milestones", "customer-info", "form-link-cta", "notes"),
        advanced_sections=("shipping-address", "billing-address", "invoice-links", "folder-links", "totals", "workflow-toggles"),
        default_module=ModuleId.OVERVIEW.value,
    ),
    UserRole.OPS.value: SectionVisibility(
        default_visible=("status-header", "progress-milestones", "workflow-toggles", "tracking", "manufacturing-status"),
        advanced_sections=("customer-info", "invoice-links", "folder-links", "totals"),
        default_module=ModuleId.OVERVIEW.value,
    ),
    UserRole.DESIGNER.value: SectionVisibility(
        default_visible=("status-header", "progress-milestones", "design-status", "images"),
        advanced_sections=("customer-info", "shipping-address", "billing-address", "invoice-links", "totals", "workflow-toggles"),
        default_module=ModuleId.DESIGN.value,
    ),
    UserRole.MANUFACTURER.value: SectionVisibility(
        default_visible=("status-header", "progress-milestones", "manufacturing-status", "line-items-summary"),
        advanced_sections=("customer-info", "invoice-links", "workflow-toggles", "order-details"),
        default_module=ModuleId.MANUFACTURING.value,
    ),
    UserRole.FINANCE.value: SectionVisibility(
        default_visible=("status-header", "totals", "invoice-links", "deposit-status", "customer-info"),
        advanced_sections=("shipping-address", "design-status", "manufacturing-status", "workflow-toggles"),
        default_module=ModuleId.OVERVIEW.value,
    ),
})

STAGE_DEFAULTS: Mapping[str, StageDefaults] = MappingProxyType({
    StageId.DRAFTS.value: StageDefaults(ModuleId.OVERVIEW.value, ("customer-info", "form-link-cta")),
    StageId.AWAITING_SIZES.value: StageDefaults(ModuleId.FORM_LINK.value, ("form-link-cta", "line-items-summary")),
    StageId.READY_TO_INVOICE.value: StageDefaults(ModuleId.OVERVIEW.value, ("totals", "invoice-links", "customer-info")),
    StageId.READY_FOR_PRODUCTION.value: StageDefaults(ModuleId.MANUFACTURING.value, ("line-items-summary", "manufacturing-status")),
    StageId.IN_PRODUCTION.value: StageDefaults(ModuleId.MANUFACTURING.value, ("manufacturing-status", "tracking")),
    StageId.SHIPPED.value: StageDefaults(ModuleId.OVERVIEW.value, ("tracking", "customer-info")),
    StageId.COMPLETED.value: StageDefaults(ModuleId.OVERVIEW.value, ("totals", "tracking")),
    StageId.ISSUES.value: StageDefaults(ModuleId.ACTIVITY.value, ("status-header", "notes")),
})

# No entry for "cancelled": it maps to no stage.
_STATUS_TO_STAGE: Mapping[str, str] = MappingProxyType({
    OrderStatus.NEW.value: StageId.DRAFTS.value,
    OrderStatus.WAITING_SIZES.value: StageId.AWAITING_SIZES.value,
    OrderStatus.DESIGN_CREATED.value: StageId.AWAITING_SIZES.value,
    OrderStatus.SIZES_VALIDATED.value: StageId.READY_TO_INVOICE.value,
    OrderStatus.INVOICED.value: StageId.READY_FOR_PRODUCTION.value,
    OrderStatus.PRODUCTION.value: StageId.IN_PRODUCTION.value,
    OrderStatus.SHIPPED.value: StageId.SHIPPED.value,
    OrderStatus.COMPLETED.value: StageId.COMPLETED.value,
})


def status_to_stage(status: Optional[str]) -> Optional[str]:
    """Coarse stage for a bare status; None for cancelled, unknown or empty."""
    if not status:
        return None
    return _STATUS_TO_STAGE.get(status)


def get_default_module(role: str, stage: Optional[str] = None, order_status: Optional[str] = None) -> str:
    """
    Module (tab) to open first on the order detail view.

    Resolution order:
    1. `stage`, when given and known (e.g. the stage the user navigated from)
    2. the stage inferred from `order_status` via status_to_stage()
    3. the role's configured default module
    4. "overview"
    """
    if stage and stage in STAGE_DEFAULTS:
        return STAGE_DEFAULTS[stage].primary_module

    inferred = status_to_stage(order_status)
    if inferred and inferred in STAGE_DEFAULTS:
        return STAGE_DEFAULTS[inferred].primary_module

    config = ROLE_SECTION_CONFIG.get(role)
    if config and config.default_module:
        return config.default_module
    return ModuleId.OVERVIEW.value


def is_section_visible_by_default(role: str, section_id: str) -> bool:
    # Unknown roles see everything
    config = ROLE_SECTION_CONFIG.get(role)
    if config is None:
        return True
    return section_id in config.default_visible


def is_advanced_section(role: str, section_id: str) -> bool:
    config = ROLE_SECTION_CONFIG.get(role)
    if config is None:
        return False
    return section_id in config.advanced_sections


def get_visible_modules(role: str) -> list[str]:
    """Modules (tabs) a role can open, in display order."""
    modules = [ModuleId.OVERVIEW.value, ModuleId.LINE_ITEMS.value]
    if role in (UserRole.ADMIN.value, UserRole.DESIGNER.value, UserRole.OPS.value):
        modules.append(ModuleId.DESIGN.value)
    if role in (UserRole.ADMIN.value, UserRole.OPS.value, UserRole.MANUFACTURER.value):
        modules.append(ModuleId.MANUFACTURING.value)
    modules.extend([ModuleId.FORM_LINK.value, ModuleId.ACTIVITY.value])
    return modules


def get_priority_sections(stage: Optional[str] = None) -> list[str]:
    if not stage or stage not in STAGE_DEFAULTS:
        return []
    return list(STAGE_DEFAULTS[stage].priority_sections)


def get_section_config(role: str) -> dict:
    """JSON-ready section visibility for a role (empty lists for unknown roles)."""
    config = ROLE_SECTION_CONFIG.get(role)
    if config is None:
        return {"defaultVisible": [], "advancedSections": [], "defaultModule": ModuleId.OVERVIEW.value}
    return {
        "defaultVisible": list(config.default_visible),
        "advancedSections": list(config.advanced_sections),
        "defaultModule": config.default_module,
    }


def find_section_config_gaps() -> dict[str, list[str]]:
    """
    Sections listed as both default-visible and advanced for the same role.

    Diagnostic only; the tables are not validated at load time.
    """
    overlaps = {}
    for role, config in ROLE_SECTION_CONFIG.items():
        both = sorted(set(config.default_visible) & set(config.advanced_sections))
        if both:
            overlaps[role] = both
    return overlaps


def describe_stage_divergence() -> list[dict]:
    """
    Enumerate status/flag combinations where status_to_stage() and the
    stage classifier disagree.

    Each entry: {"status", "sizesValidated", "hasInvoice", "statusToStage", "classifiedStage"}.
    """
    from services.stage_service import get_order_stage

    rows = []
    for status, sizes_validated, has_invoice in product(
        [s.value for s in OrderStatus], (False, True), (False, True)
    ):
        snapshot = OrderSnapshot(
            id=0,
            status=status,
            sizes_validated=sizes_validated,
            invoice_url="https://invoices.example/0" if has_invoice else None,
            created_at=datetime.now(),
        )
        classified = get_order_stage(snapshot)
        classified_id = classified.id if classified else None
        mapped = status_to_stage(status)
        if classified_id != mapped:
            rows.append({
                "status": status,
                "sizesValidated": sizes_validated,
                "hasInvoice": has_invoice,
                "statusToStage": mapped,
                "classifiedStage": classified_id,
            })
    return rows
