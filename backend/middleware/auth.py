"""
Bearer-token authentication.

Access tokens are HS256 JWTs signed with JWT_SECRET:
    sub   user id
    role  role at issue time; informational, deps.get_current_user reads
          the role from the users table
    iss / iat / exp

routes/auth.py issues them; every protected route depends on
deps.get_current_user, which starts from require_access_token() below.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, status

from config import settings
from domain.errors import DomainError, UnauthorizedError

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
_REQUIRED_CLAIMS = ["exp", "iat", "iss", "sub"]


class AuthMisconfiguredError(DomainError):
    """500: JWT_SECRET is empty so tokens can be neither issued nor verified."""
    code = "auth_misconfigured"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self):
        super().__init__("Server auth misconfigured (JWT secret missing).")


def _signing_key() -> str:
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured")
        raise AuthMisconfiguredError()
    return settings.jwt_secret


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an `Authorization: Bearer <token>` header value, else None."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def issue_access_token(*, user_id: str, role: str, ttl_minutes: Optional[int] = None) -> str:
    if ttl_minutes is None:
        ttl_minutes = settings.jwt_access_ttl_minutes
    issued_at = datetime.now(timezone.utc).replace(microsecond=0)
    claims = {
        "iss": settings.jwt_issuer,
        "sub": user_id,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(claims, _signing_key(), algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verified claims; UnauthorizedError for expired, forged or malformed tokens."""
    key = _signing_key()
    try:
        return jwt.decode(
            token,
            key,
            algorithms=[_ALGORITHM],
            issuer=settings.jwt_issuer,
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token expired.")
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected access token: {e}")
        raise UnauthorizedError("Invalid access token.")


async def require_access_token(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> dict:
    """FastAPI dependency: decoded claims of the request's bearer token (401 if absent)."""
    token = bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("Authentication required. Provide Authorization: Bearer <token>.")
    return decode_access_token(token)
