from __future__ import annotations

from datetime import date, datetime

import pytest

from src.fieldops.fieldops.attendance.model import AttendanceFilter
from src.fieldops.fieldops.attendance.service import AttendanceService
from src.fieldops.fieldops.core.enums import AttendanceKind, ProjectStatus, Role
from src.fieldops.fieldops.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import FixedClock, InMemoryAttendance, InMemoryPeople, InMemoryProjects, draft_project, person

ADMIN = person(1, Role.ADMIN)
WORKER_A = person(10, Role.WORKER, first="Ana", last="Silva")
WORKER_B = person(11, Role.WORKER, first="Ben", last="Okoro")
OUTSIDER = person(12, Role.WORKER)
DRIVER = person(20, Role.DRIVER)
OTHER_DRIVER = person(21, Role.DRIVER)

NOW = datetime(2026, 3, 4, 7, 45)


def _build():
    projects = InMemoryProjects()
    projects.add(
        draft_project(
            1,
            status=ProjectStatus.IN_PROGRESS,
            assigned_worker_ids=(10, 11),
            assigned_driver_id=20,
        )
    )
    people = InMemoryPeople([ADMIN, WORKER_A, WORKER_B, OUTSIDER, DRIVER, OTHER_DRIVER])
    ledger = InMemoryAttendance()
    svc = AttendanceService(ledger, projects, people, clock=FixedClock(NOW))
    return svc, ledger


def _mark(svc, subject_id, present=True, *, marked_by=20, work_date=None, project_id=1):
    return svc.mark_presence(
        subject_id=subject_id,
        project_id=project_id,
        present=present,
        marked_by=marked_by,
        work_date=work_date,
    )


def test_mark_defaults_to_today_and_project_kind():
    svc, _ = _build()

    rec = _mark(svc, 10)

    assert rec.work_date == date(2026, 3, 4)
    assert rec.kind == AttendanceKind.PROJECT
    assert rec.present is True
    assert rec.marked_by == 20


def test_marking_twice_updates_the_same_record():
    svc, ledger = _build()

    first = _mark(svc, 10, True)
    second = _mark(svc, 10, False)

    assert second.attendance_id == first.attendance_id
    records = svc.query_presence(AttendanceFilter(subject_id=10, project_id=1))
    assert len(records) == 1
    assert records[0].present is False


def test_same_value_twice_still_one_record():
    svc, _ = _build()

    _mark(svc, 10, True)
    _mark(svc, 10, True)

    assert len(svc.query_presence(AttendanceFilter(project_id=1))) == 1


def test_timestamps_in_the_same_day_share_a_bucket():
    svc, _ = _build()

    _mark(svc, 10, work_date=datetime(2026, 3, 4, 0, 0, 1))
    _mark(svc, 10, work_date=datetime(2026, 3, 4, 23, 59, 59))

    assert len(svc.query_presence(AttendanceFilter(project_id=1))) == 1


def test_driver_may_mark_themselves():
    svc, _ = _build()

    assert _mark(svc, 20).user_id == 20


def test_only_assigned_driver_can_mark():
    svc, ledger = _build()

    with pytest.raises(AuthorizationError):
        _mark(svc, 10, marked_by=21)
    with pytest.raises(AuthorizationError):
        _mark(svc, 10, marked_by=1)
    assert ledger.by_key == {}


def test_subject_must_be_on_roster():
    svc, _ = _build()

    with pytest.raises(ConflictError):
        _mark(svc, 12)


def test_missing_project_or_subject():
    svc, _ = _build()

    with pytest.raises(NotFoundError):
        _mark(svc, 10, project_id=99)
    with pytest.raises(NotFoundError):
        _mark(svc, 404)


@pytest.mark.parametrize("value", ["true", 1, 0, None, "yes"])
def test_present_must_be_a_real_boolean(value):
    svc, ledger = _build()

    with pytest.raises(ValidationError):
        _mark(svc, 10, value)
    assert ledger.by_key == {}


def test_normal_attendance_by_self_or_admin():
    svc, _ = _build()

    own = svc.mark_presence(subject_id=10, project_id=None, present=True, marked_by=10)
    by_admin = svc.mark_presence(subject_id=11, project_id=None, present=False, marked_by=1)

    assert own.kind == AttendanceKind.NORMAL
    assert own.project_id is None
    assert by_admin.marked_by == 1
    with pytest.raises(AuthorizationError):
        svc.mark_presence(subject_id=11, project_id=None, present=True, marked_by=10)


def test_normal_and_project_records_are_separate():
    svc, _ = _build()

    _mark(svc, 10)
    svc.mark_presence(subject_id=10, project_id=None, present=True, marked_by=10)

    assert len(svc.query_presence(AttendanceFilter(subject_id=10))) == 2
    assert len(svc.query_presence(AttendanceFilter(subject_id=10, kind=AttendanceKind.NORMAL))) == 1


def test_normal_kind_cannot_carry_a_project():
    svc, _ = _build()

    with pytest.raises(ValidationError):
        svc.mark_presence(subject_id=10, project_id=1, present=True, marked_by=10, kind=AttendanceKind.NORMAL)


def test_query_orders_by_date_then_user_and_honours_range():
    svc, _ = _build()
    _mark(svc, 11, work_date=date(2026, 3, 2))
    _mark(svc, 10, work_date=date(2026, 3, 2))
    _mark(svc, 10, work_date=date(2026, 3, 1))
    _mark(svc, 10, False, work_date=date(2026, 3, 3))

    records = svc.query_presence(AttendanceFilter(project_id=1))
    assert [(r.work_date.day, r.user_id) for r in records] == [(1, 10), (2, 10), (2, 11), (3, 10)]

    ranged = svc.query_presence(
        AttendanceFilter(project_id=1, start=datetime(2026, 3, 2, 18, 0), end=date(2026, 3, 3), present=True)
    )
    assert [(r.work_date.day, r.user_id) for r in ranged] == [(2, 10), (2, 11)]

    with pytest.raises(ValidationError):
        svc.query_presence(AttendanceFilter(start=date(2026, 3, 5), end=date(2026, 3, 1)))


def test_today_roster_defaults_to_absent():
    svc, _ = _build()
    _mark(svc, 10)

    rows = svc.today_roster(1)

    assert [(r.user_id, r.full_name, r.present) for r in rows] == [(10, "Ana Silva", True), (11, "Ben Okoro", False)]
    assert rows[0].marked_by == 20
    assert rows[1].marked_at is None


def test_attendance_summary_matrix_and_totals():
    svc, _ = _build()
    _mark(svc, 10, work_date=date(2026, 3, 1))
    _mark(svc, 10, work_date=date(2026, 3, 2))
    _mark(svc, 11, False, work_date=date(2026, 3, 2))

    summary = svc.attendance_summary(1)

    assert summary.dates == [date(2026, 3, 1), date(2026, 3, 2)]
    assert summary.matrix[date(2026, 3, 1)] == {10: True, 11: None}
    assert summary.matrix[date(2026, 3, 2)] == {10: True, 11: False}
    assert summary.totals == {10: 2, 11: 0}
    assert summary.workers == [{"id": 10, "name": "Ana Silva"}, {"id": 11, "name": "Ben Okoro"}]
