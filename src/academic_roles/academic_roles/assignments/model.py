from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EntityKind, RoleTag


@dataclass(frozen=True)
class AssignmentKey:
    """Exclusivity key: at most one open assignment exists per key."""

    entity_kind: EntityKind
    entity_id: str
    role: RoleTag

    def sort_token(self) -> tuple[str, str, str]:
        return (self.entity_kind.value, self.entity_id, self.role.value)


@dataclass(frozen=True)
class NewRoleAssignment:
    key: AssignmentKey
    holder_id: str
    start_date: date
    end_date: Optional[date] = None


@dataclass(frozen=True)
class RoleAssignment:
    """Domain entity: one interval during which a holder held a role.

    `seq` is the storage insertion order, used only to order same-day records.
    """

    id: str
    seq: int
    entity_kind: EntityKind
    entity_id: str
    role: RoleTag
    holder_id: str
    start_date: date
    end_date: Optional[date] = None

    @property
    def key(self) -> AssignmentKey:
        return AssignmentKey(self.entity_kind, self.entity_id, self.role)

    @property
    def is_open(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class AssignmentReceipt:
    """Returned by a transition: the newly opened record."""

    id: str
    entity_id: str
    holder_id: str
    start_date: date
    end_date: Optional[date] = None

    @classmethod
    def from_record(cls, record: RoleAssignment) -> "AssignmentReceipt":
        return cls(
            id=record.id,
            entity_id=record.entity_id,
            holder_id=record.holder_id,
            start_date=record.start_date,
            end_date=record.end_date,
        )


@dataclass(frozen=True)
class CurrentHolder:
    holder_id: str
    start_date: date


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    holder_id: str
    start_date: date
    end_date: Optional[date]
    is_current: bool


@dataclass(frozen=True)
class CurrentHolderView:
    """Current holder joined with directory data for display."""

    staff_id: str
    start_date: date
    name: Optional[str] = None
    email: Optional[str] = None
    staff_type: Optional[str] = None


@dataclass(frozen=True)
class HistoryEntryView:
    id: str
    staff_id: str
    start_date: date
    end_date: Optional[date]
    is_current: bool
    name: Optional[str] = None
    email: Optional[str] = None
    staff_type: Optional[str] = None
