from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Person
from .repository import PersonRepository

PERSON_COLUMNS = "person_id, first_name, last_name, email, password_hash, role, daily_wage, phone, is_active"


def row_to_person(r: dict) -> Person:
    return Person(
        person_id=int(r["person_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        daily_wage=Decimal(r.get("daily_wage") or 0),
        phone=r.get("phone"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {PERSON_COLUMNS} FROM people WHERE person_id=%s", (int(person_id),))
            r = fetchone(cur)
            return row_to_person(r) if r else None

    def get_by_email(self, email: str) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {PERSON_COLUMNS} FROM people WHERE email=%s", (email,))
            r = fetchone(cur)
            return row_to_person(r) if r else None

    def get_many(self, person_ids: Iterable[int]) -> Sequence[Person]:
        ids = [int(i) for i in person_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {PERSON_COLUMNS} FROM people WHERE person_id IN ({in_clause(ids)})",
                tuple(ids),
            )
            return [row_to_person(r) for r in fetchall(cur)]

    def list_by_roles(self, roles: Iterable[Role]) -> Sequence[Person]:
        values = [r.value for r in roles]
        if not values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {PERSON_COLUMNS}
                FROM people
                WHERE role IN ({in_clause(values)}) AND is_active=1
                ORDER BY person_id
                """,
                tuple(values),
            )
            return [row_to_person(r) for r in fetchall(cur)]
