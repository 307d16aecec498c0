"""
Domain exceptions raised by services, dependencies and routers.

Each subclass fixes an HTTP status and a stable machine-readable `code`.
They subclass HTTPException so FastAPI routes them to the handler in
main.py, which renders the error envelope.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    code = "domain_error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: dict | None = None, headers: dict | None = None):
        super().__init__(status_code=self.http_status, detail=message, headers=headers)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """404. Also used to hide routes that are disabled in this environment."""
    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        super().__init__(f"{resource_type} not found: {identifier}", details)


class ValidationError(DomainError):
    """400 for query values the API does not recognise (stage, status, priority)."""
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, details)


class UnauthorizedError(DomainError):
    code = "unauthorized"
    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, details)


class PermissionDeniedError(DomainError):
    """403: authenticated, but the role or ownership check failed."""
    code = "permission_denied"
    http_status = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Permission denied", details: dict | None = None):
        super().__init__(message, details)


class ConflictError(DomainError):
    """409: the write collides with an existing row (e.g. a taken order code)."""
    code = "conflict"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details)


class RateLimitError(DomainError):
    code = "rate_limited"
    http_status = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int | None = None, details: dict | None = None):
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(message, details, headers=headers)
