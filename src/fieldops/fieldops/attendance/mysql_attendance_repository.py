from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceFilter, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, user_id, project_id, work_date, kind, present, marked_by, created_at, updated_at"


def row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        project_id=r.get("project_id"),
        work_date=r["work_date"],
        kind=AttendanceKind(r["kind"]),
        present=bool(r["present"]),
        marked_by=int(r["marked_by"]),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


def _key_clause(project_id: Optional[int]) -> str:
    return "project_id IS NULL" if project_id is None else "project_id=%s"


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_key(cur, *, user_id: int, project_id: Optional[int], work_date: date, kind: AttendanceKind):
        params: list[object] = [int(user_id)]
        if project_id is not None:
            params.append(int(project_id))
        params.extend([work_date, kind.value])
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE user_id=%s AND {_key_clause(project_id)} AND work_date=%s AND kind=%s
            """,
            tuple(params),
        )
        return fetchone(cur)

    def upsert(
        self,
        *,
        user_id: int,
        project_id: Optional[int],
        work_date: date,
        kind: AttendanceKind,
        present: bool,
        marked_by: int,
        now: datetime,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_attendance_natural_key covers (user_id, project_key, work_date, kind)
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, project_id, work_date, kind, present, marked_by, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    present=VALUES(present),
                    marked_by=VALUES(marked_by),
                    updated_at=VALUES(updated_at)
                """,
                (int(user_id), project_id, work_date, kind.value, int(bool(present)), int(marked_by), now, now),
            )
            r = self._select_by_key(cur, user_id=user_id, project_id=project_id, work_date=work_date, kind=kind)
            return row_to_record(r)

    def query(self, filt: AttendanceFilter) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if filt.subject_id is not None:
            clauses.append("user_id=%s")
            params.append(int(filt.subject_id))
        if filt.project_id is not None:
            clauses.append("project_id=%s")
            params.append(int(filt.project_id))
        if filt.kind is not None:
            clauses.append("kind=%s")
            params.append(filt.kind.value)
        if filt.start is not None:
            clauses.append("work_date >= %s")
            params.append(filt.start)
        if filt.end is not None:
            clauses.append("work_date <= %s")
            params.append(filt.end)
        if filt.present is not None:
            clauses.append("present=%s")
            params.append(int(filt.present))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(clauses)}
                ORDER BY work_date ASC, user_id ASC
                """,
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]
