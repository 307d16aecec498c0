"""
Risk Service — overdue and at-risk detection for orders.

An order is at risk when it is high priority, overdue, or has sat in an
early status (new / waiting_sizes / design_created) for more than
STALE_ORDER_DAYS whole days.

All functions are pure. `today` / `now` can be injected (tests, batch
jobs); they default to the current local date and current UTC time.
"""
import logging
from datetime import date, datetime, timezone
from typing import Optional

from domain.constants import EARLY_STATUSES, STALE_ORDER_DAYS
from domain.enums import OrderPriority
from models import OrderSnapshot

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def is_overdue(order: OrderSnapshot, today: Optional[date] = None) -> bool:
    """
    True iff the order has an estimated delivery date strictly before today.

    Compared on calendar dates only; an order due today is not overdue.
    Orders without `est_delivery` are never overdue.
    """
    if not order.est_delivery:
        return False
    if today is None:
        today = date.today()
    return order.est_delivery < today


def days_since_created(order: OrderSnapshot, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since creation, floored (negative if created in the future)."""
    now = _naive_utc(now) if now is not None else _utcnow()
    return (now - _naive_utc(order.created_at)).days


def is_stale(order: OrderSnapshot, now: Optional[datetime] = None) -> bool:
    """Early-status order older than STALE_ORDER_DAYS whole days."""
    if order.status not in EARLY_STATUSES:
        return False
    return days_since_created(order, now) > STALE_ORDER_DAYS


def risk_reasons(order: OrderSnapshot, now: Optional[datetime] = None) -> list[str]:
    """
    List every reason the order is at risk, in evaluation order.

    Returns a subset of ["high_priority", "overdue", "stale"]; empty means
    the order is not at risk.
    """
    today = now.date() if now is not None else None
    reasons = []
    if order.priority == OrderPriority.HIGH.value:
        reasons.append("high_priority")
    if is_overdue(order, today):
        reasons.append("overdue")
    if is_stale(order, now):
        reasons.append("stale")
    return reasons


def is_at_risk(order: OrderSnapshot, now: Optional[datetime] = None) -> bool:
    """
    Decide whether an order needs attention.

    Any one of these is enough:
    - priority is "high"
    - the order is overdue (see is_overdue)
    - status is early-stage and the order is more than 14 days old

    Cancelled, shipped and completed orders are only subject to the first
    two checks.
    """
    today = now.date() if now is not None else None
    if order.priority == OrderPriority.HIGH.value:
        return True
    if is_overdue(order, today):
        return True
    return is_stale(order, now)
