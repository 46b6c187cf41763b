from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import StaffType


@dataclass(frozen=True)
class StaffProfile:
    """Read-model of a staff member, owned by the staff/person subsystem."""

    staff_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    staff_type: Optional[StaffType] = None

    @property
    def display_name(self) -> Optional[str]:
        first = self.first_name or ""
        last = self.last_name or ""
        if not first and not last:
            return None
        return f"{first} {last}".strip()
