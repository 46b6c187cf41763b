from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.concurrency import KeyedLocks, retry_on_conflict
from ..common.datetime_utils import today_local
from ..common.validators import require_date_order, require_non_empty
from ..core.constants import TRANSITION_CONFLICT_RETRIES
from ..core.exceptions import IntegrityError, NotFoundError, ValidationError
from .model import Employment, NewEmployment
from .repository import EmploymentRepository, EmploymentStore

logger = logging.getLogger(__name__)


class EmploymentService:
    """Use case: attach staff to departments and keep one primary employment per staff member.

    Unlike role assignments, attaching never closes another open employment.
    Primacy is scoped to the staff member, so writes lock on the staff id.
    """

    def __init__(
        self,
        employments: EmploymentRepository,
        *,
        today: Callable[[], date] = today_local,
        locks: Optional[KeyedLocks] = None,
        conflict_retries: int = TRANSITION_CONFLICT_RETRIES,
    ):
        self._employments = employments
        self._today = today
        self._locks = locks or KeyedLocks()
        self._conflict_retries = int(conflict_retries)

    def attach(
        self,
        holder_id: str,
        entity_id: str,
        *,
        is_primary: bool = False,
        start_date: Optional[date] = None,
        position_title: Optional[str] = None,
    ) -> Employment:
        holder_id = require_non_empty(holder_id, "staff_id")
        entity_id = require_non_empty(entity_id, "department_id")
        title = (position_title or "").strip() or None
        start = start_date or self._today()

        def attempt() -> Employment:
            with self._employments.unit_of_work() as store:
                created = store.insert(
                    NewEmployment(holder_id=holder_id, entity_id=entity_id, start_date=start, position_title=title)
                )
                if is_primary:
                    created = self._make_primary(store, holder_id, created)
                return created

        with self._locks.hold(("staff", holder_id)):
            created = retry_on_conflict(attempt, what=f"attach {holder_id} to {entity_id}", retries=self._conflict_retries)
        logger.info("Attached staff %s to department %s from %s (primary=%s)", holder_id, entity_id, start, created.is_primary)
        return created

    def set_primary(self, holder_id: str, employment_id: str) -> Employment:
        holder_id = require_non_empty(holder_id, "staff_id")
        employment_id = require_non_empty(employment_id, "employment_id")

        def attempt() -> Employment:
            with self._employments.unit_of_work() as store:
                target = store.get_by_id(employment_id)
                if target is None:
                    raise NotFoundError(f"Employment {employment_id} does not exist")
                if target.holder_id != holder_id:
                    raise ValidationError(f"Employment {employment_id} does not belong to staff {holder_id}")
                if not target.is_open:
                    raise ValidationError(f"Employment {employment_id} has ended and cannot be primary")
                return self._make_primary(store, holder_id, target)

        with self._locks.hold(("staff", holder_id)):
            return retry_on_conflict(attempt, what=f"set primary employment of {holder_id}", retries=self._conflict_retries)

    def end_employment(self, employment_id: str, *, end_date: Optional[date] = None) -> Employment:
        employment_id = require_non_empty(employment_id, "employment_id")
        end = end_date or self._today()

        # The holder is only known after a read; lock on it, then re-read inside the unit of work.
        existing = self._employments.get_by_id(employment_id)
        if existing is None:
            raise NotFoundError(f"Employment {employment_id} does not exist")

        def attempt() -> Employment:
            with self._employments.unit_of_work() as store:
                current = store.get_by_id(employment_id)
                if current is None:
                    raise NotFoundError(f"Employment {employment_id} does not exist")
                if not current.is_open:
                    raise ValidationError(f"Employment {employment_id} already ended on {current.end_date.isoformat()}")
                require_date_order(current.start_date, end)
                return store.update(employment_id, end_date=end)

        with self._locks.hold(("staff", existing.holder_id)):
            ended = retry_on_conflict(attempt, what=f"end employment {employment_id}", retries=self._conflict_retries)
        logger.info("Ended employment %s of staff %s on %s", employment_id, ended.holder_id, end)
        return ended

    def list_employments(self, holder_id: str, *, include_closed: bool = False) -> Sequence[Employment]:
        holder_id = require_non_empty(holder_id, "staff_id")
        return self._employments.list_for_holder(holder_id, include_closed=include_closed)

    def primary_employment(self, holder_id: str) -> Optional[Employment]:
        holder_id = require_non_empty(holder_id, "staff_id")
        primaries = self._employments.list_open_primary(holder_id)
        if len(primaries) > 1:
            logger.error("Staff %s has %d open primary employments", holder_id, len(primaries))
            raise IntegrityError(f"Staff {holder_id} has {len(primaries)} open primary employments")
        return primaries[0] if primaries else None

    @staticmethod
    def _make_primary(store: EmploymentStore, holder_id: str, target: Employment) -> Employment:
        # Clear first: the database allows one open primary per staff member at any instant.
        for other in store.list_open_primary(holder_id):
            if other.id != target.id:
                store.update(other.id, is_primary=False)
                logger.info("Employment %s of staff %s is no longer primary", other.id, holder_id)
        if target.is_primary:
            return target
        return store.update(target.id, is_primary=True)
