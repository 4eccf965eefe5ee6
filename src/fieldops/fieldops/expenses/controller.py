from __future__ import annotations

import csv
import io

from flask import Flask

from ..common.web import api_response, current_user_id, date_arg, int_arg, json_body, roles_required
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from ..core.enums import Role
from ..container import Container
from .model import Expense

EXPENSE_ROLES = (Role.ADMIN, Role.SUPER_ADMIN, Role.ENGINEER, Role.FINANCE)
DELETE_ROLES = (Role.ADMIN, Role.SUPER_ADMIN, Role.FINANCE)


def expense_csv_rows(expense: Expense) -> list[dict]:
    """Flatten one expense into material rows, labor rows and a totals row."""
    rows = []
    for m in expense.materials:
        rows.append(
            {
                "section": "material",
                "date": m.item_date.isoformat(),
                "description": m.description,
                "invoice_no": m.invoice_no,
                "name": "",
                "days_present": "",
                "daily_wage": "",
                "amount": str(m.amount),
            }
        )
    for line in (*expense.labor.workers, expense.labor.driver):
        rows.append(
            {
                "section": line.role.value,
                "date": "",
                "description": "",
                "invoice_no": "",
                "name": line.full_name,
                "days_present": line.days_present,
                "daily_wage": str(line.daily_wage),
                "amount": str(line.total_wage),
            }
        )
    rows.append(
        {
            "section": "total",
            "date": "",
            "description": "",
            "invoice_no": "",
            "name": "",
            "days_present": "",
            "daily_wage": "",
            "amount": str(expense.total_expense),
        }
    )
    return rows


def register(app: Flask, container: Container) -> None:
    svc = container.expense_service

    @app.route("/api/expenses/project/<int:project_id>/labor-data", methods=["GET"], endpoint="labor_data")
    @roles_required(*EXPENSE_ROLES)
    def labor_data(project_id: int):
        snapshot = svc.labor_data(project_id, start=date_arg("startDate"), end=date_arg("endDate"))
        return api_response(snapshot.to_dict())

    @app.route("/api/expenses/project/<int:project_id>", methods=["POST"], endpoint="create_expense")
    @roles_required(*EXPENSE_ROLES)
    def create_expense(project_id: int):
        body = json_body()
        expense = svc.create_expense(project_id, body.get("materials"), created_by=current_user_id())
        return api_response(expense.to_dict(), "Expense created successfully", 201)

    @app.route("/api/expenses/project/<int:project_id>", methods=["GET"], endpoint="project_expenses")
    @roles_required(*EXPENSE_ROLES)
    def project_expenses(project_id: int):
        result = svc.list_project_expenses(
            project_id,
            page=int_arg("page", DEFAULT_PAGE),
            limit=int_arg("limit", DEFAULT_PAGE_LIMIT),
        )
        return api_response({"expenses": [e.to_dict() for e in result.items], "pagination": result.meta()})

    @app.route("/api/expenses/project/<int:project_id>/summary", methods=["GET"], endpoint="expense_summary")
    @roles_required(*EXPENSE_ROLES)
    def expense_summary(project_id: int):
        return api_response(svc.expense_summary(project_id).to_dict())

    @app.route("/api/expenses/<int:expense_id>", methods=["GET"], endpoint="get_expense")
    @roles_required(*EXPENSE_ROLES)
    def get_expense(expense_id: int):
        return api_response(svc.get_expense(expense_id).to_dict())

    @app.route("/api/expenses/<int:expense_id>", methods=["PUT"], endpoint="update_expense")
    @roles_required(*EXPENSE_ROLES)
    def update_expense(expense_id: int):
        body = json_body()
        expense = svc.update_expense(expense_id, body.get("materials"))
        return api_response(expense.to_dict(), "Expense updated successfully")

    @app.route("/api/expenses/<int:expense_id>", methods=["DELETE"], endpoint="delete_expense")
    @roles_required(*DELETE_ROLES)
    def delete_expense(expense_id: int):
        svc.delete_expense(expense_id)
        return api_response(None, "Expense deleted successfully")

    @app.route("/api/expenses/<int:expense_id>/export.csv", methods=["GET"], endpoint="export_expense_csv")
    @roles_required(*EXPENSE_ROLES)
    def export_expense_csv(expense_id: int):
        expense = svc.get_expense(expense_id)

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=["section", "date", "description", "invoice_no", "name", "days_present", "daily_wage", "amount"],
        )
        writer.writeheader()
        for row in expense_csv_rows(expense):
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=expense_{expense.expense_id}.csv"},
        )
