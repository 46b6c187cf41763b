from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from ..common.concurrency import KeyedLocks, retry_on_conflict
from ..common.datetime_utils import today_local
from ..common.validators import require_non_empty
from ..core.constants import TRANSITION_CONFLICT_RETRIES
from ..core.enums import EntityKind, RoleTag
from ..core.exceptions import ValidationError
from ..directory.repository import ProgramDirectory
from .keys import make_key
from .model import AssignmentKey, AssignmentReceipt, NewRoleAssignment, RoleAssignment
from .repository import RoleAssignmentRepository, RoleAssignmentStore

logger = logging.getLogger(__name__)

Succession = Tuple[AssignmentKey, str]


class AssignmentService:
    """Use case: hand a role over to a new holder (the only writer of role assignments).

    A transition closes the open record on the key with end_date equal to the
    new start date, then opens the new record. Both happen in one unit of work
    while the key's in-process lock is held, so readers see either the old
    holder or the new one, never both and never neither.
    """

    def __init__(
        self,
        assignments: RoleAssignmentRepository,
        programs: Optional[ProgramDirectory] = None,
        *,
        today: Callable[[], date] = today_local,
        locks: Optional[KeyedLocks] = None,
        conflict_retries: int = TRANSITION_CONFLICT_RETRIES,
    ):
        self._assignments = assignments
        self._programs = programs
        self._today = today
        self._locks = locks or KeyedLocks()
        self._conflict_retries = int(conflict_retries)

    def assign(
        self,
        entity_kind,
        entity_id: str,
        holder_id: str,
        *,
        role=None,
        effective_date: Optional[date] = None,
    ) -> AssignmentReceipt:
        key = make_key(entity_kind, entity_id, role)
        holder_id = require_non_empty(holder_id, "staff_id")
        effective = effective_date or self._today()

        created = self._apply([(key, holder_id)], effective)
        return AssignmentReceipt.from_record(created[0])

    def assign_department_head(
        self,
        department_id: str,
        holder_id: str,
        *,
        effective_date: Optional[date] = None,
        make_coordinator: bool = False,
    ) -> AssignmentReceipt:
        """Make `holder_id` head of the department.

        With `make_coordinator` the same person also takes over as coordinator of
        every program the department runs, in the same unit of work.
        """
        key = make_key(EntityKind.DEPARTMENT, department_id, RoleTag.HEAD)
        holder_id = require_non_empty(holder_id, "staff_id")
        effective = effective_date or self._today()

        plan: List[Succession] = [(key, holder_id)]
        if make_coordinator:
            if self._programs is None:
                raise ValidationError("Program directory is not configured; cannot assign coordinators")
            for program_id in self._programs.list_program_ids(department_id=key.entity_id):
                plan.append((make_key(EntityKind.PROGRAM, program_id, RoleTag.COORDINATOR), holder_id))

        created = self._apply(plan, effective)
        return AssignmentReceipt.from_record(created[0])

    def assign_program_coordinator(
        self,
        program_id: str,
        holder_id: str,
        *,
        effective_date: Optional[date] = None,
    ) -> AssignmentReceipt:
        return self.assign(
            EntityKind.PROGRAM,
            program_id,
            holder_id,
            role=RoleTag.COORDINATOR,
            effective_date=effective_date,
        )

    def _apply(self, plan: Sequence[Succession], effective: date) -> List[RoleAssignment]:
        def attempt() -> List[RoleAssignment]:
            with self._assignments.unit_of_work() as store:
                return [self._transition(store, key, holder_id, effective) for key, holder_id in plan]

        first_key = plan[0][0]
        what = f"assign {first_key.role.value} of {first_key.entity_kind.value} {first_key.entity_id}"
        with self._locks.hold(*(key.sort_token() for key, _ in plan)):
            return retry_on_conflict(attempt, what=what, retries=self._conflict_retries)

    @staticmethod
    def _transition(store: RoleAssignmentStore, key: AssignmentKey, holder_id: str, effective: date) -> RoleAssignment:
        current = store.find_open(key)
        if current is not None:
            if effective < current.start_date:
                raise ValidationError(
                    f"Effective date {effective.isoformat()} is before the current {key.role.value}'s "
                    f"start date {current.start_date.isoformat()}"
                )
            store.update(current.id, end_date=effective)

        created = store.insert(NewRoleAssignment(key=key, holder_id=holder_id, start_date=effective))
        logger.info(
            "%s %s %s: %s -> %s from %s",
            key.entity_kind.value,
            key.entity_id,
            key.role.value,
            current.holder_id if current else "(vacant)",
            holder_id,
            effective.isoformat(),
        )
        return created
