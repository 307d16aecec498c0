"""
Query-parameter validators for the orders endpoints.

Unknown stage ids, statuses or priorities are rejected with 400 rather than
silently matching nothing.
"""
from typing import Optional

from fastapi import Query

from domain.enums import OrderPriority, OrderStatus
from domain.errors import ValidationError
from services.stage_service import STAGE_IDS

_STATUSES = frozenset(s.value for s in OrderStatus)
_PRIORITIES = frozenset(p.value for p in OrderPriority)


def parse_csv(raw: Optional[str]) -> list[str]:
    """Split a comma-separated query value, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def validate_stage_id(stage: Optional[str]) -> Optional[str]:
    if stage is None or stage == "":
        return None
    if stage not in STAGE_IDS:
        raise ValidationError(
            f"unknown stage '{stage}'",
            field="stage",
            details={"allowed": list(STAGE_IDS)},
        )
    return stage


def validate_csv_choices(raw: Optional[str], *, field: str, allowed: frozenset[str]) -> list[str]:
    values = parse_csv(raw)
    unknown = [v for v in values if v not in allowed]
    if unknown:
        raise ValidationError(
            f"unknown value(s) {', '.join(unknown)}",
            field=field,
            details={"allowed": sorted(allowed)},
        )
    return values


def validated_stage_query(stage: Optional[str] = Query(None, description="Pipeline stage id")) -> Optional[str]:
    """FastAPI dependency for the `stage` query parameter."""
    return validate_stage_id(stage)


def validated_status_query(status: Optional[str] = Query(None, description="Comma-separated order statuses")) -> list[str]:
    """FastAPI dependency for the `status` CSV query parameter."""
    return validate_csv_choices(status, field="status", allowed=_STATUSES)


def validated_priority_query(priority: Optional[str] = Query(None, description="Comma-separated priorities")) -> list[str]:
    """FastAPI dependency for the `priority` CSV query parameter."""
    return validate_csv_choices(priority, field="priority", allowed=_PRIORITIES)
