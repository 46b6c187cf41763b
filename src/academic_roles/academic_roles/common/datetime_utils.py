from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.constants import ISO_DATE_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value).strip())


def format_date(value: Optional[date]) -> Optional[str]:
    return value.strftime(ISO_DATE_FORMAT) if value else None


def today_local() -> date:
    """Current local date.

    Note: Only request boundaries call this; services receive it as a parameter.
    """
    return datetime.now().date()
