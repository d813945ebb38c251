from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_id(value: Any, field_name: str) -> int:
    """Coerce a positive integer id or fail with ValidationError."""
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if v <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return v
