"""
Activity service — the per-order audit trail behind the "activity" module.

Entries are append-only. Payloads in `details` use the same camelCase keys
as the API, so financial fields can be stripped with strip_financial_data.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import OrderActivity
from models import ActivityResponse

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
REASSIGNED = "reassigned"
NOTE_ADDED = "note_added"


async def log_activity(
    db: AsyncSession,
    *,
    order_id: int,
    user_id: Optional[str],
    action: str,
    details: Optional[dict] = None,
) -> OrderActivity:
    entry = OrderActivity(
        order_id=order_id,
        user_id=user_id,
        action=action,
        details=details,
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    await db.flush()
    logger.debug(f"Activity {action} on order {order_id} by {user_id}")
    return entry


async def list_activity(db: AsyncSession, *, order_id: int) -> list[OrderActivity]:
    """Entries for one order, newest first."""
    res = await db.execute(
        select(OrderActivity)
        .where(OrderActivity.order_id == order_id)
        .order_by(OrderActivity.created_at.desc(), OrderActivity.id.desc())
    )
    return list(res.scalars().all())


async def add_note(db: AsyncSession, *, order_id: int, user_id: str, note: str) -> OrderActivity:
    return await log_activity(
        db, order_id=order_id, user_id=user_id, action=NOTE_ADDED, details={"note": note}
    )


async def clear_activity(db: AsyncSession, *, order_id: int) -> None:
    await db.execute(delete(OrderActivity).where(OrderActivity.order_id == order_id))


def serialize_activity(entry: OrderActivity) -> dict:
    return ActivityResponse.model_validate(entry).model_dump(by_alias=True, mode="json")
