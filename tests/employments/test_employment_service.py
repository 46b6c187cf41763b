from __future__ import annotations

from datetime import date

import pytest

from src.academic_roles.academic_roles.core.exceptions import (
    ConflictError,
    IntegrityError,
    NotFoundError,
    ValidationError,
)
from src.academic_roles.academic_roles.employments.model import NewEmployment
from src.academic_roles.academic_roles.employments.service import EmploymentService


def _service(repo, **kwargs):
    return EmploymentService(repo, today=lambda: date(2024, 9, 1), **kwargs)


def _open_primaries(repo, holder_id):
    return [e for e in repo.list_for_holder(holder_id) if e.is_primary]


def test_attach_defaults_to_non_primary_and_today(employments_repo):
    svc = _service(employments_repo)

    emp = svc.attach("carol", "deptA", position_title="  Lecturer ")

    assert emp.is_primary is False
    assert emp.start_date == date(2024, 9, 1)
    assert emp.position_title == "Lecturer"
    assert emp.end_date is None


def test_attach_keeps_other_open_employments(employments_repo):
    svc = _service(employments_repo)
    a = svc.attach("carol", "deptA", start_date=date(2024, 1, 1))
    b = svc.attach("carol", "deptB", start_date=date(2024, 2, 1))

    open_ids = [e.id for e in svc.list_employments("carol")]

    assert open_ids == [b.id, a.id]


def test_scenario_d_exactly_one_primary(employments_repo):
    svc = _service(employments_repo)
    a = svc.attach("carol", "deptA", is_primary=True, start_date=date(2024, 1, 1))
    b = svc.attach("carol", "deptB", is_primary=True, start_date=date(2024, 2, 1))

    assert [e.id for e in _open_primaries(employments_repo, "carol")] == [b.id]

    svc.set_primary("carol", a.id)

    primaries = _open_primaries(employments_repo, "carol")
    assert [e.id for e in primaries] == [a.id]
    assert svc.primary_employment("carol").id == a.id
    assert len(svc.list_employments("carol")) == 2


def test_set_primary_is_idempotent(employments_repo):
    svc = _service(employments_repo)
    a = svc.attach("carol", "deptA", is_primary=True)

    again = svc.set_primary("carol", a.id)

    assert again.is_primary
    assert [e.id for e in _open_primaries(employments_repo, "carol")] == [a.id]


def test_primacy_is_scoped_to_holder(employments_repo):
    svc = _service(employments_repo)
    svc.attach("carol", "deptA", is_primary=True)
    svc.attach("dave", "deptA", is_primary=True)

    assert len(_open_primaries(employments_repo, "carol")) == 1
    assert len(_open_primaries(employments_repo, "dave")) == 1


def test_set_primary_rejects_foreign_unknown_or_ended(employments_repo):
    svc = _service(employments_repo)
    mine = svc.attach("carol", "deptA", start_date=date(2024, 1, 1))
    theirs = svc.attach("dave", "deptB")

    with pytest.raises(NotFoundError):
        svc.set_primary("carol", "missing")
    with pytest.raises(ValidationError):
        svc.set_primary("carol", theirs.id)

    svc.end_employment(mine.id, end_date=date(2024, 6, 30))
    with pytest.raises(ValidationError):
        svc.set_primary("carol", mine.id)


def test_end_employment(employments_repo):
    svc = _service(employments_repo)
    emp = svc.attach("carol", "deptA", is_primary=True, start_date=date(2024, 1, 1))

    ended = svc.end_employment(emp.id, end_date=date(2024, 6, 30))

    assert ended.end_date == date(2024, 6, 30)
    assert svc.list_employments("carol") == []
    assert [e.id for e in svc.list_employments("carol", include_closed=True)] == [emp.id]
    assert svc.primary_employment("carol") is None

    with pytest.raises(ValidationError):
        svc.end_employment(emp.id)
    with pytest.raises(NotFoundError):
        svc.end_employment("missing")


def test_end_before_start_is_rejected(employments_repo):
    svc = _service(employments_repo)
    emp = svc.attach("carol", "deptA", start_date=date(2024, 5, 1))

    with pytest.raises(ValidationError):
        svc.end_employment(emp.id, end_date=date(2024, 4, 30))
    assert svc.list_employments("carol")[0].end_date is None


def test_required_fields(employments_repo):
    svc = _service(employments_repo)
    with pytest.raises(ValidationError):
        svc.attach("", "deptA")
    with pytest.raises(ValidationError):
        svc.attach("carol", None)
    with pytest.raises(ValidationError):
        svc.set_primary("carol", "")


def test_set_primary_conflict_retried_once_then_propagates(employments_repo):
    svc = _service(employments_repo)
    a = svc.attach("carol", "deptA", is_primary=True)
    b = svc.attach("carol", "deptB")

    employments_repo.conflicts_to_inject = 1
    svc.set_primary("carol", b.id)
    assert [e.id for e in _open_primaries(employments_repo, "carol")] == [b.id]

    employments_repo.conflicts_to_inject = 2
    with pytest.raises(ConflictError):
        svc.set_primary("carol", a.id)
    assert [e.id for e in _open_primaries(employments_repo, "carol")] == [b.id]


def test_primary_employment_reports_broken_state(employments_repo):
    employments_repo.insert(NewEmployment("carol", "deptA", date(2024, 1, 1), is_primary=True))
    employments_repo.insert(NewEmployment("carol", "deptB", date(2024, 1, 1), is_primary=True))

    with pytest.raises(IntegrityError):
        _service(employments_repo).primary_employment("carol")
