"""
Auth endpoints.

  POST /auth/test-login  -> JWT for the deterministic test user of a role
                            (only when TEST_AUTH_ENABLED and not production)
  GET  /auth/me          -> the authenticated user

Interactive login (SSO/password) is handled upstream; this API only
verifies bearer tokens.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from db_models import User
from deps import get_current_user
from domain.errors import NotFoundError
from domain.responses import success_response
from middleware.auth import issue_access_token
from middleware.rate_limit import rate_limit
from models import RoleLoginRequest, TokenResponse, UserResponse
from services import user_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/test-login")
async def login_as_test_user(
    request: RoleLoginRequest,
    db: AsyncSession = Depends(get_db),
    _rate=Depends(rate_limit(max_requests=30, window_seconds=60)),
):
    if not settings.test_auth_enabled or settings.is_production:
        # Pretend the route does not exist outside dev/test
        raise NotFoundError("Route", "/auth/test-login")

    role = request.role.value
    user = await user_service.ensure_test_user(db, role=role)
    token = issue_access_token(user_id=user.id, role=role)
    await db.commit()
    logger.info(f"Issued test token for {user.id}")

    return success_response(
        data=TokenResponse(
            user_id=user.id,
            role=role,
            access_token=token,
            expires_in_seconds=settings.jwt_access_ttl_minutes * 60,
        ).model_dump(by_alias=True)
    )


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    payload = UserResponse.model_validate(user).model_dump(by_alias=True)
    payload["role"] = user_service.effective_role(user)
    return success_response(data=payload)
