from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from .model import AssignmentKey, NewRoleAssignment, RoleAssignment


class RoleAssignmentStore(Protocol):
    """Interval store for role assignments.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def insert(self, record: NewRoleAssignment) -> RoleAssignment:
        """Store a new record. ValidationError if end_date < start_date."""
        raise NotImplementedError

    def find_open(self, key: AssignmentKey) -> Optional[RoleAssignment]:
        """Zero or one open record. IntegrityError if storage holds more than one."""
        raise NotImplementedError

    def list_history(self, key: AssignmentKey) -> Sequence[RoleAssignment]:
        """All records for the key, newest start_date first, then newest insertion first."""
        raise NotImplementedError

    def update(self, assignment_id: str, *, end_date: date) -> RoleAssignment:
        """Set end_date. NotFoundError if the id does not exist."""
        raise NotImplementedError


class RoleAssignmentRepository(RoleAssignmentStore, Protocol):
    def unit_of_work(self) -> ContextManager[RoleAssignmentStore]:
        """A store whose writes commit together when the block exits cleanly, or not at all."""
        raise NotImplementedError
