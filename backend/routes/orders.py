"""
Order endpoints — role-scoped list, stage hub counts, detail, writes,
bulk reassignment, and the per-order activity log.

Every read is scoped to the caller's role:
  - sales see only orders where they are the salesperson
  - manufacturers get financial fields (invoiceUrl, totals...) stripped
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import Pagination, get_current_user, pagination_params, require_roles
from domain.enums import UserRole
from domain.errors import NotFoundError, PermissionDeniedError
from domain.responses import paginated_response, success_response
from middleware.rate_limit import rate_limit
from models import BulkReassignRequest, NoteCreateRequest, OrderCreateRequest, OrderUpdateRequest
from services import activity_service, order_detail_service, order_service, risk_service, stage_service, user_service
from utils.validators import validated_priority_query, validated_stage_query, validated_status_query

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])

_WRITERS = (UserRole.ADMIN.value, UserRole.SALES.value, UserRole.OPS.value)
_UPDATERS = _WRITERS + (UserRole.FINANCE.value, UserRole.MANUFACTURER.value)
_REASSIGNERS = (UserRole.ADMIN.value, UserRole.OPS.value)


async def _load_visible_order(db: AsyncSession, order_id: int, user: User):
    order = await order_service.get_order(db, order_id=order_id)
    if not order:
        raise NotFoundError("Order", str(order_id))
    role = user_service.effective_role(user)
    if not order_service.can_view_order(order, user_id=user.id, role=role):
        logger.warning(f"User {user.id} ({role}) denied access to order {order_id}")
        raise PermissionDeniedError("You can only view your own orders.")
    return order


@router.get("")
async def list_orders(
    stage: Optional[str] = Depends(validated_stage_query),
    statuses: list[str] = Depends(validated_status_query),
    priorities: list[str] = Depends(validated_priority_query),
    search: Optional[str] = Query(None, max_length=200),
    salesperson: Optional[str] = Query(None, max_length=64, description="'me' or a salesperson id"),
    page: Pagination = Depends(pagination_params),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    role = user_service.effective_role(user)
    orders = await order_service.list_orders_for_user(db, user_id=user.id, role=role)
    org_names = await order_service.organization_names(db, (o.org_id for o in orders)) if search else {}

    filtered = order_service.filter_orders(
        orders,
        stage=stage,
        statuses=statuses,
        priorities=priorities,
        search=search,
        salesperson=salesperson,
        current_user_id=user.id,
        org_names=org_names,
    )
    window = filtered[page["offset"]:page["offset"] + page["limit"]]
    logger.debug(f"list_orders role={role} stage={stage} -> {len(filtered)} of {len(orders)}")

    stage_config = stage_service.get_stage_config(stage) if stage else None
    return paginated_response(
        items=[order_service.serialize_order(o, role=role) for o in window],
        limit=page["limit"],
        offset=page["offset"],
        total=len(filtered),
        extra_meta={
            "stage": stage_config.to_dict() if stage_config else None,
        },
    )


@router.get("/stages")
async def list_stages(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Hub tiles: stages visible to the caller's role with counts over their orders."""
    role = user_service.effective_role(user)
    orders = await order_service.list_orders_for_user(db, user_id=user.id, role=role)
    counts = stage_service.compute_stage_counts(order_service.to_snapshot(o) for o in orders)

    stages = []
    for config in stage_service.get_visible_stages(role):
        entry = config.to_dict()
        entry["count"] = counts[config.id]
        entry["canAct"] = role in config.primary_action.roles
        stages.append(entry)

    return success_response(
        data={"role": role, "stages": stages},
        meta={"totalOrders": len(orders)},
    )


@router.put("/bulk-reassign")
async def bulk_reassign(
    request: BulkReassignRequest,
    user: User = Depends(require_roles(*_REASSIGNERS)),
    db: AsyncSession = Depends(get_db),
):
    result = await order_service.bulk_reassign(
        db,
        order_ids=request.order_ids,
        salesperson_id=request.salesperson_id,
        actor_id=user.id,
    )
    await db.commit()
    result["message"] = f"Reassigned {result['updated']} of {result['total']} orders"
    return success_response(data=result)


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    stage: Optional[str] = Depends(validated_stage_query),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Single order plus disclosure hints for the detail view.

    `stage` is the stage the user navigated from (if any); it takes priority
    over the order's own status when picking the default module.
    """
    order = await _load_visible_order(db, order_id, user)
    role = user_service.effective_role(user)
    snapshot = order_service.to_snapshot(order)

    payload = order_service.serialize_order(order, role=role)
    payload["overdue"] = risk_service.is_overdue(snapshot)
    payload["riskReasons"] = risk_service.risk_reasons(snapshot)
    payload["display"] = {
        "defaultModule": order_detail_service.get_default_module(role, stage, order.status),
        "visibleModules": order_detail_service.get_visible_modules(role),
        "prioritySections": order_detail_service.get_priority_sections(stage or payload["stage"]),
        "sections": order_detail_service.get_section_config(role),
    }
    return success_response(data=payload)


@router.post("")
async def create_order(
    request: OrderCreateRequest,
    user: User = Depends(require_roles(*_WRITERS)),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=60, window_seconds=60)),
):
    fields = request.model_dump()
    if user_service.effective_role(user) == UserRole.SALES.value and not fields.get("salesperson_id"):
        fields["salesperson_id"] = user.id

    order = await order_service.create_order(db, fields=fields)
    await activity_service.log_activity(
        db, order_id=order.id, user_id=user.id, action=activity_service.CREATED,
        details={"orderCode": order.order_code, "status": order.status},
    )
    await db.commit()
    await db.refresh(order)
    return success_response(data=order_service.serialize_order(order, role=user_service.effective_role(user)))


@router.patch("/{order_id}")
async def update_order(
    order_id: int,
    request: OrderUpdateRequest,
    user: User = Depends(require_roles(*_UPDATERS)),
    db: AsyncSession = Depends(get_db),
):
    await _load_visible_order(db, order_id, user)
    changes = request.model_dump(exclude_unset=True)
    order = await order_service.update_order(db, order_id=order_id, changes=changes)
    await activity_service.log_activity(
        db, order_id=order_id, user_id=user.id, action=activity_service.UPDATED,
        details=request.model_dump(exclude_unset=True, by_alias=True, mode="json"),
    )
    await db.commit()
    await db.refresh(order)
    return success_response(data=order_service.serialize_order(order, role=user_service.effective_role(user)))


@router.delete("/{order_id}")
async def delete_order(
    order_id: int,
    user: User = Depends(require_roles(UserRole.ADMIN.value)),
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.delete_order(db, order_id=order_id)
    await db.commit()
    return success_response(
        data={
            "id": order_id,
            "orderCode": order.order_code,
            "message": f"Order '{order.order_code}' deleted",
        }
    )


@router.get("/{order_id}/activity")
async def list_order_activity(
    order_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await _load_visible_order(db, order_id, user)
    entries = await activity_service.list_activity(db, order_id=order_id)
    items = [activity_service.serialize_activity(e) for e in entries]
    return success_response(
        data=order_service.strip_financial_data(items, user_service.effective_role(user)),
        meta={"total": len(items)},
    )


@router.post("/{order_id}/notes")
async def add_order_note(
    order_id: int,
    request: NoteCreateRequest,
    user: User = Depends(require_roles(*_UPDATERS)),
    db: AsyncSession = Depends(get_db),
):
    await _load_visible_order(db, order_id, user)
    entry = await activity_service.add_note(db, order_id=order_id, user_id=user.id, note=request.note)
    await db.commit()
    await db.refresh(entry)
    return success_response(data=activity_service.serialize_activity(entry))
