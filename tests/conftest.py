from __future__ import annotations

import itertools
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Optional

import pytest

from src.academic_roles.academic_roles.assignments.model import AssignmentKey, NewRoleAssignment, RoleAssignment
from src.academic_roles.academic_roles.common.validators import require_date_order
from src.academic_roles.academic_roles.container import wire
from src.academic_roles.academic_roles.core.enums import StaffType
from src.academic_roles.academic_roles.core.exceptions import ConflictError, IntegrityError, NotFoundError
from src.academic_roles.academic_roles.directory.model import StaffProfile
from src.academic_roles.academic_roles.employments.model import Employment, NewEmployment


class _AssignmentRows:
    """Store operations over a dict of rows; `changed` records what this view wrote."""

    def __init__(self, rows: dict, next_seq, hooks):
        self._rows = rows
        self._next_seq = next_seq
        self._hooks = hooks
        self.changed: dict[str, RoleAssignment] = {}

    def _put(self, record: RoleAssignment) -> RoleAssignment:
        self._rows[record.id] = record
        self.changed[record.id] = record
        return record

    def insert(self, record: NewRoleAssignment) -> RoleAssignment:
        if self._hooks.fail_on_insert:
            raise RuntimeError("insert failed")
        require_date_order(record.start_date, record.end_date)
        return self._put(
            RoleAssignment(
                id=str(uuid.uuid4()),
                seq=self._next_seq(),
                entity_kind=record.key.entity_kind,
                entity_id=record.key.entity_id,
                role=record.key.role,
                holder_id=record.holder_id,
                start_date=record.start_date,
                end_date=record.end_date,
            )
        )

    def find_open(self, key: AssignmentKey) -> Optional[RoleAssignment]:
        self._hooks.find_open_calls += 1
        rows = [r for r in self._rows.values() if r.key == key and r.end_date is None]
        if len(rows) > 1:
            raise IntegrityError(f"{len(rows)} open assignments for {key}")
        return rows[0] if rows else None

    def list_history(self, key: AssignmentKey):
        rows = [r for r in self._rows.values() if r.key == key]
        return sorted(rows, key=lambda r: (r.start_date, r.seq), reverse=True)

    def update(self, assignment_id: str, *, end_date: date) -> RoleAssignment:
        current = self._rows.get(assignment_id)
        if current is None:
            raise NotFoundError(f"Role assignment {assignment_id} does not exist")
        require_date_order(current.start_date, end_date)
        return self._put(replace(current, end_date=end_date))


class _Hooks:
    def __init__(self):
        self.fail_on_insert = False
        self.conflicts_to_inject = 0
        self.find_open_calls = 0
        self.commits = 0
        self.before_commit = None


class InMemoryRoleAssignments(_AssignmentRows):
    """Role assignment repository with optimistic units of work.

    A unit of work writes to a private copy; on commit the copy's changes are
    merged and rejected with ConflictError if any touched key would end up with
    two open records (first committer wins).
    """

    def __init__(self):
        self.hooks = _Hooks()
        self._commit_lock = threading.Lock()
        counter = itertools.count(1)
        seq_lock = threading.Lock()

        def next_seq() -> int:
            with seq_lock:
                return next(counter)

        super().__init__({}, next_seq, self.hooks)

    @property
    def rows(self) -> list[RoleAssignment]:
        return sorted(self._rows.values(), key=lambda r: r.seq)

    @contextmanager
    def unit_of_work(self):
        with self._commit_lock:
            session = _AssignmentRows(dict(self._rows), self._next_seq, self.hooks)
        yield session
        if self.hooks.before_commit is not None:
            self.hooks.before_commit()
        with self._commit_lock:
            if self.hooks.conflicts_to_inject > 0:
                self.hooks.conflicts_to_inject -= 1
                raise ConflictError("injected conflict")
            merged = dict(self._rows)
            merged.update(session.changed)
            for key in {r.key for r in session.changed.values()}:
                open_rows = [r for r in merged.values() if r.key == key and r.end_date is None]
                if len(open_rows) > 1:
                    raise ConflictError(f"{key} changed concurrently")
            self._rows = merged
            self.hooks.commits += 1


class _EmploymentRows:
    def __init__(self, rows: dict, next_seq):
        self._rows = rows
        self._next_seq = next_seq
        self.changed: dict[str, Employment] = {}

    def _put(self, record: Employment) -> Employment:
        self._rows[record.id] = record
        self.changed[record.id] = record
        return record

    def insert(self, record: NewEmployment) -> Employment:
        return self._put(
            Employment(
                id=str(uuid.uuid4()),
                seq=self._next_seq(),
                holder_id=record.holder_id,
                entity_id=record.entity_id,
                start_date=record.start_date,
                is_primary=record.is_primary,
                position_title=record.position_title,
            )
        )

    def get_by_id(self, employment_id: str) -> Optional[Employment]:
        return self._rows.get(employment_id)

    def list_for_holder(self, holder_id: str, *, include_closed: bool = False):
        rows = [r for r in self._rows.values() if r.holder_id == holder_id and (include_closed or r.end_date is None)]
        return sorted(rows, key=lambda r: (r.start_date, r.seq), reverse=True)

    def list_open_primary(self, holder_id: str):
        return [r for r in self.list_for_holder(holder_id) if r.is_primary]

    def update(self, employment_id: str, *, end_date: Optional[date] = None, is_primary: Optional[bool] = None):
        current = self._rows.get(employment_id)
        if current is None:
            raise NotFoundError(f"Employment {employment_id} does not exist")
        changed = current
        if end_date is not None:
            require_date_order(current.start_date, end_date)
            changed = replace(changed, end_date=end_date)
        if is_primary is not None:
            changed = replace(changed, is_primary=bool(is_primary))
        return self._put(changed)


class InMemoryEmployments(_EmploymentRows):
    def __init__(self):
        self.conflicts_to_inject = 0
        self._commit_lock = threading.Lock()
        counter = itertools.count(1)
        seq_lock = threading.Lock()

        def next_seq() -> int:
            with seq_lock:
                return next(counter)

        super().__init__({}, next_seq)

    @contextmanager
    def unit_of_work(self):
        with self._commit_lock:
            session = _EmploymentRows(dict(self._rows), self._next_seq)
        yield session
        with self._commit_lock:
            if self.conflicts_to_inject > 0:
                self.conflicts_to_inject -= 1
                raise ConflictError("injected conflict")
            merged = dict(self._rows)
            merged.update(session.changed)
            for holder_id in {r.holder_id for r in session.changed.values()}:
                primaries = [r for r in merged.values() if r.holder_id == holder_id and r.is_primary and r.end_date is None]
                if len(primaries) > 1:
                    raise ConflictError(f"primary employment of {holder_id} changed concurrently")
            self._rows = merged


class FakeStaffDirectory:
    def __init__(self, profiles: dict[str, StaffProfile]):
        self._profiles = profiles
        self.lookups: list[set[str]] = []

    def get_profiles(self, staff_ids):
        ids = set(staff_ids)
        self.lookups.append(ids)
        return {sid: self._profiles[sid] for sid in ids if sid in self._profiles}


class FakeProgramDirectory:
    def __init__(self, programs_by_department: dict[str, list[str]]):
        self._programs = programs_by_department

    def list_program_ids(self, *, department_id: str):
        return list(self._programs.get(department_id, []))


TODAY = date(2024, 9, 1)


@pytest.fixture
def assignments_repo():
    return InMemoryRoleAssignments()


@pytest.fixture
def employments_repo():
    return InMemoryEmployments()


@pytest.fixture
def staff_directory():
    return FakeStaffDirectory(
        {
            "alice": StaffProfile("alice", "Alice", "Mwangi", "alice@example.edu", StaffType.ACADEMIC),
            "bob": StaffProfile("bob", "Bob", "Otieno", "bob@example.edu", StaffType.ACADEMIC),
            "carol": StaffProfile("carol", "Carol", None, None, StaffType.NON_ACADEMIC),
            "nameless": StaffProfile("nameless", None, None, "x@example.edu", None),
        }
    )


@pytest.fixture
def program_directory():
    return FakeProgramDirectory({"dept1": ["prog1", "prog2"], "dept2": []})


@pytest.fixture
def container(assignments_repo, employments_repo, staff_directory, program_directory):
    return wire(
        assignments_repo=assignments_repo,
        employments_repo=employments_repo,
        staff_directory=staff_directory,
        program_directory=program_directory,
        today=lambda: TODAY,
    )


@pytest.fixture
def client(container, monkeypatch):
    from src.academic_roles.academic_roles.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()
