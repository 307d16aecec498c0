"""
Shared FastAPI dependencies.

Routers import DB session, current-user resolution, role guards and
pagination from here.
"""

from __future__ import annotations

import logging
from typing import Callable, TypedDict

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import User
from domain.errors import PermissionDeniedError, UnauthorizedError
from middleware.auth import require_access_token
from services import user_service

logger = logging.getLogger(__name__)


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int | None = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit or settings.default_page_limit, "offset": offset}


async def get_current_user(
    claims: dict = Depends(require_access_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the bearer token's subject to an active user row.

    The role is read from the database, not from the token, so role
    changes take effect without re-issuing tokens.
    """
    user = await user_service.get_user(db, user_id=claims["sub"])
    if not user:
        raise UnauthorizedError("User for access token no longer exists.")
    if not user.is_active:
        raise PermissionDeniedError("User account is inactive.")
    return user


def require_roles(*roles: str) -> Callable:
    """Dependency factory: the current user must hold one of `roles`."""
    allowed = frozenset(roles)

    async def _guard(user: User = Depends(get_current_user)) -> User:
        role = user_service.effective_role(user)
        if role not in allowed:
            logger.warning(f"Role '{role}' denied (requires one of {sorted(allowed)}) for user {user.id}")
            raise PermissionDeniedError(
                f"Role '{role}' is not allowed to perform this action.",
                details={"allowedRoles": sorted(allowed)},
            )
        return user

    return _guard
