from __future__ import annotations

from ..core.constants import IDENTITY_ID_LENGTH
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_identity_id(value: str) -> str:
    value = (value or "").strip()
    if len(value) != IDENTITY_ID_LENGTH or not value.isdigit():
        raise ValidationError(f"Identity id must be {IDENTITY_ID_LENGTH} digits, got {value!r}")
    return value


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value or 0)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number
