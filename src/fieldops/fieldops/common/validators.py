from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ..core.constants import MAX_PAGE_LIMIT, MAX_PROGRESS, MIN_PROGRESS
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_bool(value: object, field_name: str) -> bool:
    # 0/1 and "true" are not accepted as booleans
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean")
    return value


def require_progress(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Progress must be an integer between 0 and 100")
    if value < MIN_PROGRESS or value > MAX_PROGRESS:
        raise ValidationError("Progress must be between 0 and 100")
    return value


def require_amount(value: object, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


def require_page(page: object, limit: object) -> tuple[int, int]:
    try:
        page_i = int(page)
        limit_i = int(limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page_i < 1 or limit_i < 1:
        raise ValidationError("page and limit must be positive")
    return page_i, min(limit_i, MAX_PAGE_LIMIT)
