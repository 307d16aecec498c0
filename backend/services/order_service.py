"""
Order service — persistence, role scoping and list filtering for orders.

Stage and risk are never stored; they are derived on read through
stage_service / risk_service from an OrderSnapshot of the row.
"""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Order, Organization, User
from domain.constants import FINANCIAL_FIELDS, ORDER_CODE_PREFIX, ORDER_CODE_WIDTH
from domain.enums import UserRole
from domain.errors import ConflictError, NotFoundError, ValidationError
from models import OrderResponse, OrderSnapshot
from services import activity_service, risk_service, stage_service

logger = logging.getLogger(__name__)

_ORDER_CODE_RE = re.compile(rf"^{ORDER_CODE_PREFIX}-(\d+)$")

# Roles restricted to orders where they are the salesperson
_OWN_ORDERS_ONLY = frozenset([UserRole.SALES.value])


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# ── Codes ───────────────────────────────────────────────────────────

def format_order_code(number: int) -> str:
    return f"{ORDER_CODE_PREFIX}-{number:0{ORDER_CODE_WIDTH}d}"


async def next_order_code(db: AsyncSession) -> str:
    """Next sequential order code (O-00001, O-00002, ...)."""
    res = await db.execute(
        select(func.max(Order.order_code)).where(Order.order_code.like(f"{ORDER_CODE_PREFIX}-%"))
    )
    max_code = res.scalar_one_or_none()
    next_number = 1
    if max_code:
        match = _ORDER_CODE_RE.match(max_code)
        if match:
            next_number = int(match.group(1)) + 1
    return format_order_code(next_number)


# ── CRUD ────────────────────────────────────────────────────────────

async def check_references(db: AsyncSession, fields: dict) -> None:
    """Reject an orgId or salespersonId that points at no row."""
    org_id = fields.get("org_id")
    if org_id is not None and await db.get(Organization, org_id) is None:
        raise ValidationError(f"organization {org_id} does not exist", field="orgId")
    salesperson_id = fields.get("salesperson_id")
    if salesperson_id is not None and await db.get(User, salesperson_id) is None:
        raise ValidationError(f"user {salesperson_id} does not exist", field="salespersonId")


async def create_order(db: AsyncSession, *, fields: dict) -> Order:
    """Insert an order with a freshly allocated order code."""
    await check_references(db, fields)
    now = datetime.utcnow()
    code = await next_order_code(db)
    order = Order(
        order_code=code,
        created_at=now,
        updated_at=now,
        **{k: _plain(v) for k, v in fields.items()},
    )
    db.add(order)
    try:
        await db.flush()
    except IntegrityError:
        # concurrent create took the same code
        await db.rollback()
        logger.warning(f"Order code {code} already taken")
        raise ConflictError(f"Order code {code} already exists; retry the request.")
    logger.info(f"Created order {order.order_code} (id={order.id}, status={order.status})")
    return order


async def get_order(db: AsyncSession, *, order_id: int) -> Order | None:
    res = await db.execute(select(Order).where(Order.id == order_id))
    return res.scalar_one_or_none()


async def update_order(db: AsyncSession, *, order_id: int, changes: dict) -> Order:
    """Apply a partial update; only keys present in `changes` are written."""
    order = await get_order(db, order_id=order_id)
    if not order:
        raise NotFoundError("Order", str(order_id))
    await check_references(db, changes)

    for field, value in changes.items():
        setattr(order, field, _plain(value))

    order.updated_at = datetime.utcnow()
    await db.flush()
    logger.info(f"Updated order {order.order_code}: {sorted(changes)}")
    return order


async def delete_order(db: AsyncSession, *, order_id: int) -> Order:
    order = await get_order(db, order_id=order_id)
    if not order:
        raise NotFoundError("Order", str(order_id))
    await activity_service.clear_activity(db, order_id=order_id)
    await db.delete(order)
    await db.flush()
    logger.info(f"Deleted order {order.order_code}")
    return order


async def bulk_reassign(
    db: AsyncSession,
    *,
    order_ids: list[int],
    salesperson_id: Optional[str],
    actor_id: str,
) -> dict:
    """
    Point every order in `order_ids` at `salesperson_id` (None unassigns).

    The target must be an existing sales user. Unknown order ids are
    reported per order and do not stop the rest of the batch.
    """
    if salesperson_id is not None:
        target = await db.get(User, salesperson_id)
        if target is None:
            raise NotFoundError("User", salesperson_id)
        if target.role != UserRole.SALES.value:
            raise ValidationError("target user is not a salesperson", field="salespersonId")

    results = []
    updated = 0
    now = datetime.utcnow()
    for order_id in dict.fromkeys(order_ids):
        order = await get_order(db, order_id=order_id)
        if not order:
            results.append({"orderId": order_id, "success": False, "error": "Order not found"})
            continue
        previous = order.salesperson_id
        order.salesperson_id = salesperson_id
        order.updated_at = now
        await activity_service.log_activity(
            db,
            order_id=order.id,
            user_id=actor_id,
            action=activity_service.REASSIGNED,
            details={"fromSalespersonId": previous, "toSalespersonId": salesperson_id},
        )
        results.append({"orderId": order_id, "success": True})
        updated += 1

    await db.flush()
    logger.info(f"Bulk reassigned {updated}/{len(results)} orders to {salesperson_id or 'nobody'}")
    return {"updated": updated, "total": len(results), "results": results}


async def list_orders_for_user(db: AsyncSession, *, user_id: str, role: str) -> list[Order]:
    """
    Orders a user may see, newest first.

    Sales users only see orders where they are the salesperson; every other
    role sees all orders.
    """
    query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if role in _OWN_ORDERS_ONLY:
        query = query.where(Order.salesperson_id == user_id)
    res = await db.execute(query)
    return list(res.scalars().all())


def can_view_order(order: Order, *, user_id: str, role: str) -> bool:
    if role in _OWN_ORDERS_ONLY:
        return order.salesperson_id == user_id
    return True


async def organization_names(db: AsyncSession, org_ids: Iterable[int]) -> dict[int, str]:
    ids = {i for i in org_ids if i is not None}
    if not ids:
        return {}
    res = await db.execute(select(Organization).where(Organization.id.in_(ids)))
    return {org.id: org.name for org in res.scalars().all()}


# ── Filtering ───────────────────────────────────────────────────────

def filter_orders(
    orders: list[Order],
    *,
    stage: Optional[str] = None,
    statuses: Optional[list[str]] = None,
    priorities: Optional[list[str]] = None,
    search: Optional[str] = None,
    salesperson: Optional[str] = None,
    current_user_id: Optional[str] = None,
    org_names: Optional[dict[int, str]] = None,
) -> list[Order]:
    """
    Narrow an already role-scoped order list by the list-view filters.

    - stage: registry stage id; "issues" selects at-risk orders (overlay)
    - statuses / priorities: match any of the given values
    - search: case-insensitive substring of order code, name, or org name
    - salesperson: "me" (current user) or an explicit salesperson id
    """
    result = orders

    if salesperson == "me":
        result = [o for o in result if current_user_id and o.salesperson_id == current_user_id]
    elif salesperson:
        result = [o for o in result if o.salesperson_id == salesperson]

    if stage:
        config = stage_service.get_stage_config(stage)
        if config is not None:
            result = [o for o in result if config.filter(to_snapshot(o))]

    if statuses:
        result = [o for o in result if o.status in statuses]

    if priorities:
        result = [o for o in result if o.priority in priorities]

    if search:
        needle = search.lower()
        names = org_names or {}

        def _matches(o: Order) -> bool:
            org_name = names.get(o.org_id) or ""
            return (
                needle in (o.order_code or "").lower()
                or needle in (o.order_name or "").lower()
                or needle in org_name.lower()
            )

        result = [o for o in result if _matches(o)]

    return result


# ── Serialization ───────────────────────────────────────────────────

def to_snapshot(order: Order) -> OrderSnapshot:
    return OrderSnapshot.model_validate(order)


def strip_financial_data(data: Any, role: str) -> Any:
    """
    Remove financial fields from payloads served to manufacturers.

    Recurses through lists and nested dicts; other roles get `data` unchanged.
    """
    if role != UserRole.MANUFACTURER.value:
        return data
    if isinstance(data, list):
        return [strip_financial_data(item, role) for item in data]
    if isinstance(data, dict):
        return {
            key: strip_financial_data(value, role)
            for key, value in data.items()
            if key not in FINANCIAL_FIELDS
        }
    return data


def serialize_order(order: Order, *, role: str, now: Optional[datetime] = None) -> dict:
    """
    JSON-ready order with derived `stage` and `atRisk`, scoped to `role`.
    """
    payload = OrderResponse.model_validate(order).model_dump(by_alias=True, mode="json")
    snapshot = to_snapshot(order)
    stage = stage_service.get_order_stage(snapshot)
    payload["stage"] = stage.id if stage else None
    payload["atRisk"] = risk_service.is_at_risk(snapshot, now)
    return strip_financial_data(payload, role)
