"""
Stage Service — pipeline stage registry and order classification.

The registry (STAGE_CONFIGS) is an ordered, immutable tuple of StageConfig
entries. Seven entries partition orders by workflow state; the eighth,
"issues", is an overlay that tags at-risk orders regardless of their stage.

Classification walks the registry in order and returns the first matching
non-overlay entry. Order matters: a waiting_sizes order with
sizes_validated=True fails "awaiting-sizes" and falls through to
"ready-to-invoice". Reordering the registry changes results.

Orders whose status is "cancelled" (or unknown) match no stage. That is a
valid outcome, not an error.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from domain.constants import ISSUES_EXCLUDED_STATUSES
from domain.enums import OrderStatus, StageId, UserRole
from models import OrderSnapshot
from services.risk_service import is_at_risk

logger = logging.getLogger(__name__)

_KNOWN_STATUSES = frozenset(s.value for s in OrderStatus)


@dataclass(frozen=True)
class PrimaryAction:
    label: str
    roles: tuple[str, ...]


@dataclass(frozen=True)
class StageConfig:
    """One pipeline stage as shown in the hub tiles, kanban and list views."""
    id: str
    label: str
    description: str
    icon: str
    color_class: str
    bg_color_class: str
    border_color_class: str
    filter: Callable[[OrderSnapshot], bool]
    primary_action: PrimaryAction
    visible_to_roles: tuple[str, ...]

    @property
    def is_overlay(self) -> bool:
        return self.id == StageId.ISSUES.value

    def to_dict(self) -> dict:
        """JSON-ready view (the filter predicate is not serialisable)."""
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "icon": self.icon,
            "colorClass": self.color_class,
            "bgColorClass": self.bg_color_class,
            "borderColorClass": self.border_color_class,
            "primaryAction": {
                "label": self.primary_action.label,
                "roles": list(self.primary_action.roles),
            },
            "visibleToRoles": list(self.visible_to_roles),
        }


# ── Predicates ──────────────────────────────────────────────────────

def _is_draft(order: OrderSnapshot) -> bool:
    return order.status == OrderStatus.NEW.value


def _is_awaiting_sizes(order: OrderSnapshot) -> bool:
    return (
        order.status in (OrderStatus.WAITING_SIZES.value, OrderStatus.DESIGN_CREATED.value)
        and not order.sizes_validated
    )


def _is_ready_to_invoice(order: OrderSnapshot) -> bool:
    sizes_done = order.status == OrderStatus.SIZES_VALIDATED.value or (
        order.status == OrderStatus.WAITING_SIZES.value and order.sizes_validated
    )
    return sizes_done and not order.invoice_url


def _status_is(status: OrderStatus) -> Callable[[OrderSnapshot], bool]:
    def _check(order: OrderSnapshot) -> bool:
        return order.status == status.value
    return _check


def _has_issues(order: OrderSnapshot) -> bool:
    return is_at_risk(order) and order.status not in ISSUES_EXCLUDED_STATUSES


# ── Registry ────────────────────────────────────────────────────────

_ALL_ROLES = tuple(r.value for r in UserRole)

STAGE_CONFIGS: tuple[StageConfig, ...] = (
    StageConfig(
        id=StageId.DRAFTS.value,
        label="Drafts",
        description="New orders waiting to be processed",
        icon="Package",
        color_class="text-blue-500",
        bg_color_class="bg-blue-500/10",
        border_color_class="border-blue-500/30",
        filter=_is_draft,
        primary_action=PrimaryAction("Request Sizes", ("sales", "ops", "admin")),
        visible_to_roles=("admin", "sales", "ops"),
    ),
    StageConfig(
        id=StageId.AWAITING_SIZES.value,
        label="Awaiting Sizes",
        description="Waiting for customer size submissions or design work",
        icon="Clock",
        color_class="text-yellow-500",
        bg_color_class="bg-yellow-500/10",
        border_color_class="border-yellow-500/30",
        filter=_is_awaiting_sizes,
        primary_action=PrimaryAction("Validate Sizes", ("ops", "admin")),
        visible_to_roles=("admin", "sales", "ops"),
    ),
    StageConfig(
        id=StageId.READY_TO_INVOICE.value,
        label="Ready to Invoice",
        description="Sizes validated, ready for invoicing",
        icon="FileText",
        color_class="text-purple-500",
        bg_color_class="bg-purple-500/10",
        border_color_class="border-purple-500/30",
        filter=_is_ready_to_invoice,
        primary_action=PrimaryAction("Create Invoice", ("finance", "admin")),
        visible_to_roles=("admin", "finance", "ops"),
    ),
    StageConfig(
        id=StageId.READY_FOR_PRODUCTION.value,
        label="Ready for Production",
        description="Invoiced and ready to start production",
        icon="Factory",
        color_class="text-orange-500",
        bg_color_class="bg-orange-500/10",
        border_color_class="border-orange-500/30",
        filter=_status_is(OrderStatus.INVOICED),
        primary_action=PrimaryAction("Start Production", ("ops", "admin")),
        visible_to_roles=("admin", "ops", "manufacturer"),
    ),
    StageConfig(
        id=StageId.IN_PRODUCTION.value,
        label="In Production",
        description="Currently being manufactured",
        icon="Cog",
        color_class="text-amber-500",
        bg_color_class="bg-amber-500/10",
        border_color_class="border-amber-500/30",
        filter=_status_is(OrderStatus.PRODUCTION),
        primary_action=PrimaryAction("Open Manufacturing", ("ops", "manufacturer", "admin")),
        visible_to_roles=("admin", "ops", "manufacturer"),
    ),
    StageConfig(
        id=StageId.SHIPPED.value,
        label="Shipped",
        description="Orders that have been shipped",
        icon="Truck",
        color_class="text-indigo-500",
        bg_color_class="bg-indigo-500/10",
        border_color_class="border-indigo-500/30",
        filter=_status_is(OrderStatus.SHIPPED),
        primary_action=PrimaryAction("Add Tracking", ("ops", "sales", "admin")),
        visible_to_roles=("admin", "sales", "ops"),
    ),
    StageConfig(
        id=StageId.COMPLETED.value,
        label="Completed",
        description="Successfully completed orders",
        icon="CheckCircle2",
        color_class="text-green-500",
        bg_color_class="bg-green-500/10",
        border_color_class="border-green-500/30",
        filter=_status_is(OrderStatus.COMPLETED),
        primary_action=PrimaryAction("View Summary", _ALL_ROLES),
        visible_to_roles=_ALL_ROLES,
    ),
    StageConfig(
        id=StageId.ISSUES.value,
        label="Issues",
        description="Orders requiring attention",
        icon="AlertTriangle",
        color_class="text-red-500",
        bg_color_class="bg-red-500/10",
        border_color_class="border-red-500/30",
        filter=_has_issues,
        primary_action=PrimaryAction("Triage", ("ops", "admin")),
        visible_to_roles=("admin", "ops"),
    ),
)

STAGE_IDS: tuple[str, ...] = tuple(c.id for c in STAGE_CONFIGS)


# ── Lookups ─────────────────────────────────────────────────────────

def get_stage_config(stage_id: str) -> Optional[StageConfig]:
    """Registry entry for `stage_id`, or None if unknown."""
    for config in STAGE_CONFIGS:
        if config.id == stage_id:
            return config
    return None


def get_visible_stages(role: str) -> list[StageConfig]:
    """Registry entries whose visible_to_roles include `role`, in registry order."""
    return [config for config in STAGE_CONFIGS if role in config.visible_to_roles]


def get_order_stage(order: OrderSnapshot) -> Optional[StageConfig]:
    """
    Classify an order into its single canonical pipeline stage.

    Walks the registry in order, skipping the "issues" overlay, and returns
    the first entry whose filter matches. Returns None when nothing matches
    (cancelled orders, unknown statuses).
    """
    for config in STAGE_CONFIGS:
        if config.is_overlay:
            continue
        if config.filter(order):
            return config

    if order.status not in _KNOWN_STATUSES:
        logger.warning(
            f"Order {order.id} has unknown status {order.status!r}; "
            f"it is invisible to every stage filter"
        )
    else:
        logger.debug(f"Order {order.id} (status={order.status}) matches no pipeline stage")
    return None


def filter_orders_by_stage(orders: Iterable[OrderSnapshot], stage_id: str) -> list[OrderSnapshot]:
    """Orders matching a stage's filter (overlay semantics for "issues")."""
    config = get_stage_config(stage_id)
    if config is None:
        return []
    return [order for order in orders if config.filter(order)]


def compute_stage_counts(orders: Iterable[OrderSnapshot]) -> dict[str, int]:
    """
    Count orders per registry entry, including the "issues" overlay.

    Every stage id is present in the result (zero when empty). An order
    contributes to its pipeline stage and, independently, to "issues".
    Recomputed on each call; O(stages × orders).
    """
    counts = {stage_id: 0 for stage_id in STAGE_IDS}
    for order in orders:
        for config in STAGE_CONFIGS:
            if config.filter(order):
                counts[config.id] += 1
    return counts
