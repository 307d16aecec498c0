"""
User service — staff lookups and deterministic test users.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import User

logger = logging.getLogger(__name__)


def effective_role(user: User) -> str:
    """User's role, falling back to DEFAULT_ROLE when the column is empty."""
    return user.role or settings.default_role


async def get_user(db: AsyncSession, *, user_id: str) -> User | None:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()


def automated_user_id(role: str) -> str:
    return f"test-{role}-automated-auth"


async def ensure_test_user(db: AsyncSession, *, role: str) -> User:
    """
    Get or create the deterministic test user for `role`.

    Test users have fixed ids/emails (test-<role>-automated-auth,
    test-<role>@automated-testing.local) so automated UI runs can log in
    as any role repeatably.
    """
    user_id = automated_user_id(role)
    user = await get_user(db, user_id=user_id)
    if user:
        if user.role != role or not user.is_active:
            user.role = role
            user.is_active = True
            await db.flush()
        return user

    user = User(
        id=user_id,
        email=f"test-{role}@automated-testing.local",
        name=f"Test {role.capitalize()} (Automated)",
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    logger.info(f"Created test user {user_id}")
    return user
