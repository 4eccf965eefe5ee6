from __future__ import annotations

import re
from pathlib import Path

from src.fieldops.fieldops.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def _tables() -> dict[str, str]:
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))
    out = {}
    for stmt in _iter_sql_statements(sql):
        m = re.search(r"CREATE TABLE IF NOT EXISTS (\w+)", stmt)
        assert m, f"unexpected statement: {stmt[:60]!r}"
        out[m.group(1)] = stmt
    return out


def _constraint(table_sql: str, name: str) -> str:
    m = re.search(rf"CONSTRAINT {name} [^\n]*", table_sql)
    assert m, name
    return m.group(0)


def test_schema_splits_into_one_statement_per_table():
    assert set(_tables()) >= {
        "people",
        "projects",
        "attendance_records",
        "expenses",
        "expense_materials",
        "expense_labor_lines",
    }


def test_attendance_project_key_is_not_cascaded():
    # project_key is STORED from project_id, MySQL rejects a cascading FK on that base column
    attendance = _tables()["attendance_records"]

    assert "project_key INT AS (COALESCE(project_id, 0)) STORED" in attendance
    assert "ON DELETE" not in _constraint(attendance, "fk_attendance_project")


def test_deleting_a_draft_project_takes_its_expenses_along():
    tables = _tables()

    assert "ON DELETE CASCADE" in _constraint(tables["expenses"], "fk_expenses_project")
    assert "ON DELETE CASCADE" in _constraint(tables["expense_materials"], "fk_materials_expense")
    assert "ON DELETE CASCADE" in _constraint(tables["expense_labor_lines"], "fk_labor_lines_expense")
