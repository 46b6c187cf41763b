from __future__ import annotations

from typing import Iterator, List, Optional

from ..directory.repository import StaffDirectory
from .keys import make_key
from .model import AssignmentKey, HistoryEntry, HistoryEntryView
from .repository import RoleAssignmentStore


class AssignmentHistory:
    """Audit trail for one key, newest first.

    Lazy and restartable: nothing is read until iteration starts, and every
    new iteration reads the store again.
    """

    def __init__(self, store: RoleAssignmentStore, key: AssignmentKey):
        self._store = store
        self.key = key

    def __iter__(self) -> Iterator[HistoryEntry]:
        for record in self._store.list_history(self.key):
            yield HistoryEntry(
                id=record.id,
                holder_id=record.holder_id,
                start_date=record.start_date,
                end_date=record.end_date,
                is_current=record.end_date is None,
            )


class HistoryReader:
    def __init__(self, assignments: RoleAssignmentStore, staff: Optional[StaffDirectory] = None):
        self._assignments = assignments
        self._staff = staff

    def history(self, entity_kind, entity_id: str, role=None) -> AssignmentHistory:
        return AssignmentHistory(self._assignments, make_key(entity_kind, entity_id, role))

    def history_view(self, entity_kind, entity_id: str, role=None) -> List[HistoryEntryView]:
        entries = list(self.history(entity_kind, entity_id, role))
        profiles = self._staff.get_profiles({e.holder_id for e in entries}) if self._staff and entries else {}

        out: List[HistoryEntryView] = []
        for e in entries:
            profile = profiles.get(e.holder_id)
            out.append(
                HistoryEntryView(
                    id=e.id,
                    staff_id=e.holder_id,
                    start_date=e.start_date,
                    end_date=e.end_date,
                    is_current=e.is_current,
                    name=profile.display_name if profile else None,
                    email=profile.email if profile else None,
                    staff_type=profile.staff_type.value if profile and profile.staff_type else None,
                )
            )
        return out
