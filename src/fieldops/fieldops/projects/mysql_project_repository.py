from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ProjectStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Client, Project, ProjectFilter
from .repository import ProjectRepository

PROJECT_COLUMNS = """
    p.project_id, p.project_number, p.project_name, p.project_description, p.client_id,
    p.location, p.building, p.apartment_number, p.status, p.progress,
    p.assigned_to, p.assigned_driver_id, p.created_by, p.updated_by, p.created_at, p.updated_at
"""

# API field name -> column; anything else is ignored by update_fields
_UPDATABLE = {
    "project_name": "project_name",
    "description": "project_description",
    "location": "location",
    "building": "building",
    "apartment_number": "apartment_number",
    "assigned_to": "assigned_to",
}


def row_to_project(r: dict, worker_ids: Sequence[int] = ()) -> Project:
    return Project(
        project_id=int(r["project_id"]),
        project_number=r["project_number"],
        project_name=r["project_name"],
        description=r.get("project_description"),
        client_id=int(r["client_id"]),
        location=r["location"],
        building=r["building"],
        apartment_number=r["apartment_number"],
        status=ProjectStatus(r["status"]),
        progress=int(r.get("progress") or 0),
        assigned_to=r.get("assigned_to"),
        assigned_driver_id=r.get("assigned_driver_id"),
        assigned_worker_ids=tuple(int(w) for w in worker_ids),
        created_by=r.get("created_by"),
        updated_by=r.get("updated_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def load_worker_ids(cur, project_ids: Sequence[int]) -> dict[int, list[int]]:
    out: dict[int, list[int]] = {int(pid): [] for pid in project_ids}
    if not project_ids:
        return out
    cur.execute(
        f"""
        SELECT project_id, worker_id
        FROM project_workers
        WHERE project_id IN ({in_clause(project_ids)})
        ORDER BY project_id, worker_id
        """,
        tuple(project_ids),
    )
    for r in fetchall(cur):
        out[int(r["project_id"])].append(int(r["worker_id"]))
    return out


def _field_assignments(fields: dict) -> tuple[list[str], list[object]]:
    sets: list[str] = []
    params: list[object] = []
    for name, value in fields.items():
        column = _UPDATABLE.get(name)
        if column:
            sets.append(f"{column}=%s")
            params.append(value)
    return sets, params


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {PROJECT_COLUMNS} FROM projects p WHERE p.project_id=%s", (int(project_id),))
            r = fetchone(cur)
            if not r:
                return None
            workers = load_worker_ids(cur, [int(project_id)])
            return row_to_project(r, workers[int(project_id)])

    def get_client(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT client_id, client_name, email, contact_person FROM clients WHERE client_id=%s",
                (int(client_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Client(
                client_id=int(r["client_id"]),
                client_name=r["client_name"],
                email=r.get("email"),
                contact_person=r.get("contact_person"),
            )

    def count_numbers_with_prefix(self, prefix: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM projects WHERE project_number LIKE %s", (f"{prefix}%",))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def create(
        self,
        *,
        project_number: str,
        project_name: str,
        client_id: int,
        location: str,
        building: str,
        apartment_number: str,
        description: Optional[str],
        created_by: Optional[int],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects(
                    project_number, project_name, project_description, client_id,
                    location, building, apartment_number, status, progress,
                    created_by, updated_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0,%s,%s,%s,%s)
                """,
                (
                    project_number,
                    project_name,
                    description,
                    int(client_id),
                    location,
                    building,
                    apartment_number,
                    ProjectStatus.DRAFT.value,
                    created_by,
                    created_by,
                    created_at,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def list(self, filt: ProjectFilter, *, offset: int, limit: int) -> tuple[Sequence[Project], int]:
        clauses = ["1=1"]
        params: list[object] = []

        if filt.status is not None:
            clauses.append("p.status=%s")
            params.append(ProjectStatus(filt.status).value)
        if filt.client_id is not None:
            clauses.append("p.client_id=%s")
            params.append(int(filt.client_id))
        if filt.assigned_to is not None:
            clauses.append("p.assigned_to=%s")
            params.append(int(filt.assigned_to))
        if filt.assigned_driver_id is not None:
            clauses.append("p.assigned_driver_id=%s")
            params.append(int(filt.assigned_driver_id))
        if filt.search:
            like = f"%{filt.search}%"
            clauses.append(
                "(p.project_name LIKE %s OR p.project_description LIKE %s OR p.location LIKE %s"
                " OR p.building LIKE %s OR p.apartment_number LIKE %s OR p.project_number LIKE %s)"
            )
            params.extend([like] * 6)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM projects p WHERE {where}", tuple(params))
            total = int(fetchone(cur)["n"])

            cur.execute(
                f"""
                SELECT {PROJECT_COLUMNS}
                FROM projects p
                WHERE {where}
                ORDER BY p.created_at DESC, p.project_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            rows = fetchall(cur)
            workers = load_worker_ids(cur, [int(r["project_id"]) for r in rows])
            return [row_to_project(r, workers[int(r["project_id"])]) for r in rows], total

    def update_fields(self, project_id: int, *, fields: dict, updated_by: Optional[int], updated_at: datetime) -> bool:
        sets, params = _field_assignments(fields)
        sets.extend(["updated_by=%s", "updated_at=%s"])
        params.extend([updated_by, updated_at, int(project_id)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE projects SET {', '.join(sets)} WHERE project_id=%s", tuple(params))
            return cur.rowcount > 0

    def compare_and_set_state(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        status: ProjectStatus,
        progress: Optional[int] = None,
        fields: Optional[dict] = None,
        updated_by: Optional[int],
        updated_at: datetime,
    ) -> bool:
        sets, params = _field_assignments(fields or {})
        sets = ["status=%s", "progress=COALESCE(%s, progress)", *sets, "updated_by=%s", "updated_at=%s"]
        params = [
            ProjectStatus(status).value,
            progress,
            *params,
            updated_by,
            updated_at,
            int(project_id),
            ProjectStatus(expected_status).value,
        ]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE projects SET {', '.join(sets)} WHERE project_id=%s AND status=%s", tuple(params))
            return cur.rowcount > 0

    def set_roster(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        status: ProjectStatus,
        worker_ids: Sequence[int],
        driver_id: int,
        updated_by: Optional[int],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET status=%s, assigned_driver_id=%s, updated_by=%s, updated_at=%s
                WHERE project_id=%s AND status=%s
                """,
                (
                    ProjectStatus(status).value,
                    int(driver_id),
                    updated_by,
                    updated_at,
                    int(project_id),
                    ProjectStatus(expected_status).value,
                ),
            )
            if cur.rowcount == 0:
                return False

            cur.execute("DELETE FROM project_workers WHERE project_id=%s", (int(project_id),))
            cur.executemany(
                "INSERT INTO project_workers(project_id, worker_id) VALUES(%s,%s)",
                [(int(project_id), int(w)) for w in worker_ids],
            )
            return True

    def delete(self, project_id: int, *, expected_status: ProjectStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM projects WHERE project_id=%s AND status=%s",
                (int(project_id), ProjectStatus(expected_status).value),
            )
            return cur.rowcount > 0
