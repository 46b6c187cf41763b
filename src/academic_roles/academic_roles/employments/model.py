from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class NewEmployment:
    holder_id: str
    entity_id: str
    start_date: date
    is_primary: bool = False
    position_title: Optional[str] = None


@dataclass(frozen=True)
class Employment:
    """Domain entity: a staff member's attachment to a department.

    Several may be open at once for the same staff member; at most one open
    record per staff member is primary.
    """

    id: str
    seq: int
    holder_id: str
    entity_id: str
    start_date: date
    is_primary: bool = False
    position_title: Optional[str] = None
    end_date: Optional[date] = None

    @property
    def is_open(self) -> bool:
        return self.end_date is None
