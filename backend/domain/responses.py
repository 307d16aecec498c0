"""
Response envelope helpers.

Every endpoint returns one of:
- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error:   { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
from typing import Any


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """Wrap a payload in the success envelope; `meta` is omitted when empty."""
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def error_response(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Build the error envelope used by the exception handlers."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
    }


def paginated_response(
    items: list[Any],
    limit: int,
    offset: int = 0,
    total: int | None = None,
    extra_meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Wrap one page of items with pagination metadata.

    Args:
        items: Items for this page
        limit: Page size requested
        offset: Index of the first item of this page
        total: Total matching items (defaults to len(items))
        extra_meta: Additional keys merged into meta (e.g. active filters)

    Returns:
        dict: { "success": true, "data": <items>, "meta": { "limit", "offset", "total", "hasMore", ... } }
    """
    if total is None:
        total = len(items)

    meta = {
        "limit": limit,
        "offset": offset,
        "total": total,
        "hasMore": (offset + limit) < total,
    }
    if extra_meta:
        meta.update(extra_meta)

    return success_response(data=items, meta=meta)
