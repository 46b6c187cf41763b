from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_enum(value, enum_type: Type[E], field_name: str) -> E:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_date_order(start: date, end: Optional[date], *, what: str = "end_date") -> None:
    if end is not None and end < start:
        raise ValidationError(f"{what} ({end.isoformat()}) is before start_date ({start.isoformat()})")
