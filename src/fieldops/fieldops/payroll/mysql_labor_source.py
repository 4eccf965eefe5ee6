from __future__ import annotations

from datetime import date
from typing import Optional

from ..attendance.mysql_attendance_repository import row_to_record
from ..core.enums import AttendanceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_snapshot, fetchall, fetchone, in_clause
from ..projects.mysql_project_repository import PROJECT_COLUMNS, load_worker_ids, row_to_project
from ..users.mysql_user_repository import PERSON_COLUMNS, row_to_person
from .model import LaborInputs
from .repository import LaborSourceRepository


class MySQLLaborSource(LaborSourceRepository):
    """Reads roster, wages and attendance inside one consistent snapshot."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _present_records(cur, project_id: int, start: Optional[date], end: Optional[date]):
        clauses = ["project_id=%s", "kind=%s", "present=1"]
        params: list[object] = [project_id, AttendanceKind.PROJECT.value]
        if start is not None:
            clauses.append("work_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("work_date <= %s")
            params.append(end)
        cur.execute(
            f"""
            SELECT attendance_id, user_id, project_id, work_date, kind, present, marked_by, created_at, updated_at
            FROM attendance_records
            WHERE {' AND '.join(clauses)}
            ORDER BY work_date ASC, user_id ASC
            """,
            tuple(params),
        )
        return [row_to_record(r) for r in fetchall(cur)]

    def load(
        self,
        project_id: int,
        *,
        start: Optional[date],
        end: Optional[date],
        crew_start: Optional[date],
        crew_end: Optional[date],
    ) -> Optional[LaborInputs]:
        project_id = int(project_id)
        with db_snapshot(self._conn_factory) as cur:
            cur.execute(f"SELECT {PROJECT_COLUMNS} FROM projects p WHERE p.project_id=%s", (project_id,))
            r = fetchone(cur)
            if not r:
                return None
            workers = load_worker_ids(cur, [project_id])
            project = row_to_project(r, workers[project_id])

            roster = list(project.assigned_worker_ids)
            if project.assigned_driver_id is not None:
                roster.append(int(project.assigned_driver_id))

            people = {}
            if roster:
                cur.execute(
                    f"SELECT {PERSON_COLUMNS} FROM people WHERE person_id IN ({in_clause(roster)})",
                    tuple(roster),
                )
                people = {p.person_id: p for p in (row_to_person(x) for x in fetchall(cur))}

            worker_records = self._present_records(cur, project_id, start, end)
            if (crew_start, crew_end) == (start, end):
                crew_records = worker_records
            else:
                crew_records = self._present_records(cur, project_id, crew_start, crew_end)

            return LaborInputs(
                project=project,
                people=people,
                worker_records=worker_records,
                crew_records=crew_records,
            )
