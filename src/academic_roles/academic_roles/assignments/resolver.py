from __future__ import annotations

from typing import Optional

from ..directory.repository import StaffDirectory
from .keys import make_key
from .model import CurrentHolder, CurrentHolderView, RoleAssignment
from .repository import RoleAssignmentStore


class CurrentHolderResolver:
    """Answers "who holds this role right now". Read-only; never locks."""

    def __init__(self, assignments: RoleAssignmentStore, staff: Optional[StaffDirectory] = None):
        self._assignments = assignments
        self._staff = staff

    def resolve(self, entity_kind, entity_id: str, role=None) -> Optional[RoleAssignment]:
        return self._assignments.find_open(make_key(entity_kind, entity_id, role))

    def current_holder(self, entity_kind, entity_id: str, role=None) -> Optional[CurrentHolder]:
        record = self.resolve(entity_kind, entity_id, role)
        if record is None:
            return None
        return CurrentHolder(holder_id=record.holder_id, start_date=record.start_date)

    def current_holder_view(self, entity_kind, entity_id: str, role=None) -> Optional[CurrentHolderView]:
        record = self.resolve(entity_kind, entity_id, role)
        if record is None:
            return None

        profile = None
        if self._staff is not None:
            profile = self._staff.get_profiles([record.holder_id]).get(record.holder_id)

        return CurrentHolderView(
            staff_id=record.holder_id,
            start_date=record.start_date,
            name=profile.display_name if profile else None,
            email=profile.email if profile else None,
            staff_type=profile.staff_type.value if profile and profile.staff_type else None,
        )
