from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, day_bucket, now_local
from ..common.validators import require_bool
from ..core.enums import AttendanceKind
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..projects.model import Project
from ..projects.repository import ProjectRepository
from ..users.repository import PersonRepository
from .model import AttendanceFilter, AttendanceRecord, AttendanceSummary, RosterAttendanceRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        projects: ProjectRepository,
        people: PersonRepository,
        *,
        clock: Clock = now_local,
    ):
        self._attendance = attendance
        self._projects = projects
        self._people = people
        self._clock = clock

    def _get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def mark_presence(
        self,
        *,
        subject_id: int,
        project_id: Optional[int],
        present,
        marked_by: int,
        kind: Optional[AttendanceKind] = None,
        work_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Create or update the single record for (subject, project, day, kind).

        Project records may only be marked by the project's assigned driver and
        only for people on its roster. Normal records are marked by the person
        themselves or by an admin.
        """
        present = require_bool(present, "Present")
        now = now or self._clock()
        work_date = day_bucket(work_date or now)
        if kind is None:
            kind = AttendanceKind.PROJECT if project_id is not None else AttendanceKind.NORMAL
        kind = AttendanceKind(kind)

        if kind == AttendanceKind.PROJECT:
            if project_id is None:
                raise ValidationError("Project attendance requires a project")
            project = self._get_project(project_id)
            if not self._people.get_by_id(int(subject_id)):
                raise NotFoundError("User not found")
            if not project.is_on_roster(subject_id):
                raise ConflictError("User is not assigned to this project")
            if not project.is_driver(marked_by):
                raise AuthorizationError("Only assigned driver can mark attendance")
            project_id = project.project_id
        else:
            if project_id is not None:
                raise ValidationError("Normal attendance cannot reference a project")
            if not self._people.get_by_id(int(subject_id)):
                raise NotFoundError("User not found")
            if int(marked_by) != int(subject_id):
                marker = self._people.get_by_id(int(marked_by))
                if not marker or not marker.is_admin:
                    raise AuthorizationError("Only the person or an admin can mark normal attendance")

        record = self._attendance.upsert(
            user_id=int(subject_id),
            project_id=project_id,
            work_date=work_date,
            kind=kind,
            present=present,
            marked_by=int(marked_by),
            now=now,
        )
        logger.info(
            "attendance %s: user=%s project=%s date=%s present=%s by=%s",
            kind.value,
            subject_id,
            project_id,
            work_date,
            present,
            marked_by,
        )
        return record

    def query_presence(self, filt: AttendanceFilter) -> Sequence[AttendanceRecord]:
        if filt.start is not None:
            filt = replace(filt, start=day_bucket(filt.start))
        if filt.end is not None:
            filt = replace(filt, end=day_bucket(filt.end))
        if filt.start and filt.end and filt.start > filt.end:
            raise ValidationError("startDate must not be after endDate")
        return self._attendance.query(filt)

    def today_roster(self, project_id: int, *, now: Optional[datetime] = None) -> list[RosterAttendanceRow]:
        project = self._get_project(project_id)
        today = day_bucket(now or self._clock())

        records = self._attendance.query(
            AttendanceFilter(project_id=project.project_id, kind=AttendanceKind.PROJECT, start=today, end=today)
        )
        by_user = {r.user_id: r for r in records}
        people = {p.person_id: p for p in self._people.get_many(project.assigned_worker_ids)}

        rows = []
        for worker_id in project.assigned_worker_ids:
            person = people.get(worker_id)
            if not person:
                continue
            rec = by_user.get(worker_id)
            rows.append(
                RosterAttendanceRow(
                    user_id=worker_id,
                    full_name=person.full_name,
                    phone=person.phone,
                    present=rec.present if rec else False,
                    marked_by=rec.marked_by if rec else None,
                    marked_at=rec.created_at if rec else None,
                )
            )
        return rows

    def attendance_summary(
        self,
        project_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> AttendanceSummary:
        """Dates x workers presence grid plus per-worker present totals."""
        project = self._get_project(project_id)
        records = self.query_presence(
            AttendanceFilter(project_id=project.project_id, kind=AttendanceKind.PROJECT, start=start, end=end)
        )

        workers = [
            {"id": p.person_id, "name": p.full_name}
            for p in self._people.get_many(project.assigned_worker_ids)
        ]
        worker_ids = [w["id"] for w in workers]

        dates = sorted({r.work_date for r in records})
        cell = {(r.work_date, r.user_id): r.present for r in records}
        matrix = {d: {w: cell.get((d, w)) for w in worker_ids} for d in dates}
        totals = {w: sum(1 for r in records if r.user_id == w and r.present) for w in worker_ids}

        return AttendanceSummary(dates=dates, workers=workers, matrix=matrix, totals=totals)
