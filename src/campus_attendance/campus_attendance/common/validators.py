from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?\d{10,15}$")
_INDEX_RE = re.compile(r"^[A-Z0-9]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_length(value: str, field_name: str, min_len: int, max_len: int) -> str:
    value = require_non_empty(value, field_name)
    if not min_len <= len(value) <= max_len:
        raise ValidationError(f"{field_name} must be between {min_len} and {max_len} characters")
    return value


def require_email(value: str, field_name: str) -> str:
    value = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(value):
        raise ValidationError(f"{field_name} must be a valid email")
    return value


def normalize_phone(value: str, field_name: str) -> str:
    """Strip spaces and hyphens, keep a leading '+'."""
    value = re.sub(r"[\s-]", "", require_non_empty(value, field_name))
    if not _PHONE_RE.match(value):
        raise ValidationError(f"{field_name} must contain 10-15 digits, optionally starting with +")
    return value


def normalize_index_number(value: str) -> str:
    value = require_non_empty(value, "Index number").upper()
    if not _INDEX_RE.match(value):
        raise ValidationError("Index number must contain only uppercase letters and numbers")
    return value


def require_int_range(value, field_name: str, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None
    if not low <= number <= high:
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def parse_student_id(value) -> int:
    if isinstance(value, bool):
        raise ValidationError("Student ID must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Student ID must be an integer") from None


def clip(value: Optional[str], max_len: int) -> Optional[str]:
    """Trim free-text provenance to the column width."""
    if value is None:
        return None
    value = value.strip()
    return value[:max_len] or None
