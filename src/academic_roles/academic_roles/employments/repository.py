from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from .model import Employment, NewEmployment


class EmploymentStore(Protocol):
    def insert(self, record: NewEmployment) -> Employment:
        raise NotImplementedError

    def get_by_id(self, employment_id: str) -> Optional[Employment]:
        raise NotImplementedError

    def list_for_holder(self, holder_id: str, *, include_closed: bool = False) -> Sequence[Employment]:
        """Newest start_date first, then newest insertion first."""
        raise NotImplementedError

    def list_open_primary(self, holder_id: str) -> Sequence[Employment]:
        raise NotImplementedError

    def update(
        self,
        employment_id: str,
        *,
        end_date: Optional[date] = None,
        is_primary: Optional[bool] = None,
    ) -> Employment:
        """Change only the given fields. NotFoundError if the id does not exist."""
        raise NotImplementedError


class EmploymentRepository(EmploymentStore, Protocol):
    def unit_of_work(self) -> ContextManager[EmploymentStore]:
        raise NotImplementedError
