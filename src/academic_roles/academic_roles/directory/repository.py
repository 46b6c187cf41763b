from __future__ import annotations

from typing import Iterable, Mapping, Protocol, Sequence

from .model import StaffProfile


class StaffDirectory(Protocol):
    def get_profiles(self, staff_ids: Iterable[str]) -> Mapping[str, StaffProfile]:
        """Profiles keyed by staff id; unknown ids are simply absent."""
        raise NotImplementedError


class ProgramDirectory(Protocol):
    def list_program_ids(self, *, department_id: str) -> Sequence[str]:
        raise NotImplementedError
