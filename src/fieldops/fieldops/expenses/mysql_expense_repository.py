from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from ..payroll.model import LaborLine, LaborSnapshot
from .model import Expense, MaterialItem
from .repository import ExpenseRepository

_EXPENSE_COLUMNS = "expense_id, project_id, total_material_cost, total_labor_cost, created_by, created_at, updated_at"


def _insert_lines(cur, expense_id: int, materials: Sequence[MaterialItem], labor: LaborSnapshot) -> None:
    cur.executemany(
        """
        INSERT INTO expense_materials(expense_id, description, item_date, invoice_no, amount)
        VALUES(%s,%s,%s,%s,%s)
        """,
        [(expense_id, m.description, m.item_date, m.invoice_no, m.amount) for m in materials],
    )
    cur.executemany(
        """
        INSERT INTO expense_labor_lines(expense_id, person_id, full_name, role, days_present, daily_wage, total_wage)
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        """,
        [
            (expense_id, line.person_id, line.full_name, line.role.value, line.days_present, line.daily_wage, line.total_wage)
            for line in (*labor.workers, labor.driver)
        ],
    )


def _load(cur, rows: list[dict]) -> list[Expense]:
    if not rows:
        return []
    ids = [int(r["expense_id"]) for r in rows]

    cur.execute(
        f"""
        SELECT item_id, expense_id, description, item_date, invoice_no, amount
        FROM expense_materials
        WHERE expense_id IN ({in_clause(ids)})
        ORDER BY item_id
        """,
        tuple(ids),
    )
    materials: dict[int, list[MaterialItem]] = {i: [] for i in ids}
    for m in fetchall(cur):
        materials[int(m["expense_id"])].append(
            MaterialItem(
                item_id=int(m["item_id"]),
                description=m["description"],
                item_date=m["item_date"],
                invoice_no=m["invoice_no"],
                amount=Decimal(m["amount"]),
            )
        )

    cur.execute(
        f"""
        SELECT expense_id, person_id, full_name, role, days_present, daily_wage, total_wage
        FROM expense_labor_lines
        WHERE expense_id IN ({in_clause(ids)})
        ORDER BY line_id
        """,
        tuple(ids),
    )
    lines: dict[int, list[LaborLine]] = {i: [] for i in ids}
    for x in fetchall(cur):
        lines[int(x["expense_id"])].append(
            LaborLine(
                person_id=x.get("person_id"),
                full_name=x["full_name"] or "",
                role=Role(x["role"]),
                days_present=int(x["days_present"]),
                daily_wage=Decimal(x["daily_wage"]),
                total_wage=Decimal(x["total_wage"]),
            )
        )

    out = []
    for r in rows:
        eid = int(r["expense_id"])
        workers = tuple(line for line in lines[eid] if line.role == Role.WORKER)
        driver = next(
            (line for line in lines[eid] if line.role == Role.DRIVER),
            LaborLine(None, "", Role.DRIVER, 0, Decimal("0"), Decimal("0")),
        )
        out.append(
            Expense(
                expense_id=eid,
                project_id=int(r["project_id"]),
                materials=tuple(materials[eid]),
                total_material_cost=Decimal(r["total_material_cost"]),
                labor=LaborSnapshot(
                    project_id=int(r["project_id"]),
                    workers=workers,
                    driver=driver,
                    total_labor_cost=Decimal(r["total_labor_cost"]),
                ),
                created_by=r.get("created_by"),
                created_at=r["created_at"],
                updated_at=r.get("updated_at"),
            )
        )
    return out


class MySQLExpenseRepository(ExpenseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        project_id: int,
        materials: Sequence[MaterialItem],
        total_material_cost: Decimal,
        labor: LaborSnapshot,
        created_by: Optional[int],
        now: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO expenses(project_id, total_material_cost, total_labor_cost, created_by, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(project_id), total_material_cost, labor.total_labor_cost, created_by, now, now),
            )
            expense_id = int(cur.lastrowid)
            _insert_lines(cur, expense_id, materials, labor)
            return expense_id

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EXPENSE_COLUMNS} FROM expenses WHERE expense_id=%s", (int(expense_id),))
            r = fetchone(cur)
            if not r:
                return None
            return _load(cur, [r])[0]

    def list_for_project(self, project_id: int, *, offset: int, limit: int) -> tuple[Sequence[Expense], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM expenses WHERE project_id=%s", (int(project_id),))
            total = int(fetchone(cur)["n"])
            cur.execute(
                f"""
                SELECT {_EXPENSE_COLUMNS}
                FROM expenses
                WHERE project_id=%s
                ORDER BY created_at DESC, expense_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(project_id), int(limit), int(offset)),
            )
            return _load(cur, fetchall(cur)), total

    def list_all_for_project(self, project_id: int) -> Sequence[Expense]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EXPENSE_COLUMNS} FROM expenses WHERE project_id=%s ORDER BY created_at DESC",
                (int(project_id),),
            )
            return _load(cur, fetchall(cur))

    def replace_lines(
        self,
        expense_id: int,
        *,
        materials: Sequence[MaterialItem],
        total_material_cost: Decimal,
        labor: LaborSnapshot,
        now: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE expenses
                SET total_material_cost=%s, total_labor_cost=%s, updated_at=%s
                WHERE expense_id=%s
                """,
                (total_material_cost, labor.total_labor_cost, now, int(expense_id)),
            )
            if cur.rowcount == 0:
                return False
            cur.execute("DELETE FROM expense_materials WHERE expense_id=%s", (int(expense_id),))
            cur.execute("DELETE FROM expense_labor_lines WHERE expense_id=%s", (int(expense_id),))
            _insert_lines(cur, int(expense_id), materials, labor)
            return True

    def delete(self, expense_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # line tables cascade on delete
            cur.execute("DELETE FROM expenses WHERE expense_id=%s", (int(expense_id),))
            return cur.rowcount > 0
