from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, day_bucket, now_local, parse_iso_date
from ..common.pagination import Page, offset_for
from ..common.validators import require_amount, require_non_empty, require_page
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, ZERO
from ..core.exceptions import NotFoundError, ValidationError
from ..payroll.model import LaborSnapshot
from ..payroll.service import LaborCostService
from .model import Expense, ExpenseSummary, MaterialItem
from .repository import ExpenseRepository

logger = logging.getLogger(__name__)


class ExpenseService:
    """Assembles expense records from material lines and a fresh labor snapshot."""

    def __init__(self, expenses: ExpenseRepository, labor: LaborCostService, *, clock: Clock = now_local):
        self._expenses = expenses
        self._labor = labor
        self._clock = clock

    def labor_data(self, project_id: int, *, start: Optional[date] = None, end: Optional[date] = None) -> LaborSnapshot:
        return self._labor.compute_snapshot(project_id, start=start, end=end)

    def _parse_materials(self, materials) -> list[MaterialItem]:
        if materials is None or not isinstance(materials, (list, tuple)):
            raise ValidationError("Materials array is required")

        today = day_bucket(self._clock())
        items = []
        for i, raw in enumerate(materials, start=1):
            if isinstance(raw, MaterialItem):
                items.append(raw)
                continue
            if not isinstance(raw, dict):
                raise ValidationError(f"Material #{i} must be an object")

            raw_date = raw.get("date")
            if raw_date in (None, ""):
                item_date = today
            elif isinstance(raw_date, (date, datetime)):
                item_date = day_bucket(raw_date)
            else:
                try:
                    item_date = parse_iso_date(str(raw_date)[:10])
                except ValueError:
                    raise ValidationError(f"Material #{i}: date must be YYYY-MM-DD")

            items.append(
                MaterialItem(
                    description=require_non_empty(raw.get("description"), f"Material #{i} description"),
                    item_date=item_date,
                    invoice_no=require_non_empty(raw.get("invoiceNo"), f"Material #{i} invoice number"),
                    amount=require_amount(raw.get("amount"), f"Material #{i} amount"),
                )
            )
        return items

    @staticmethod
    def _material_total(items: Sequence[MaterialItem]):
        return sum((m.amount for m in items), ZERO)

    def create_expense(self, project_id: int, materials, *, created_by: Optional[int]) -> Expense:
        items = self._parse_materials(materials)
        labor = self._labor.compute_snapshot(project_id)

        expense_id = self._expenses.create(
            project_id=labor.project_id,
            materials=items,
            total_material_cost=self._material_total(items),
            labor=labor,
            created_by=created_by,
            now=self._clock(),
        )
        logger.info("expense %s created for project %s by %s", expense_id, labor.project_id, created_by)
        return self.get_expense(expense_id)

    def get_expense(self, expense_id: int) -> Expense:
        expense = self._expenses.get_by_id(int(expense_id))
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def list_project_expenses(
        self,
        project_id: int,
        *,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[Expense]:
        page, limit = require_page(page, limit)
        items, total = self._expenses.list_for_project(int(project_id), offset=offset_for(page, limit), limit=limit)
        return Page(items=list(items), total=total, page=page, limit=limit)

    def update_expense(self, expense_id: int, materials) -> Expense:
        """Replace the material lines and re-take the labor snapshot from current data."""
        items = self._parse_materials(materials)
        existing = self.get_expense(expense_id)
        labor = self._labor.compute_snapshot(existing.project_id)

        ok = self._expenses.replace_lines(
            existing.expense_id,
            materials=items,
            total_material_cost=self._material_total(items),
            labor=labor,
            now=self._clock(),
        )
        if not ok:
            raise NotFoundError("Expense not found")
        logger.info("expense %s updated", existing.expense_id)
        return self.get_expense(existing.expense_id)

    def delete_expense(self, expense_id: int) -> None:
        if not self._expenses.delete(int(expense_id)):
            raise NotFoundError("Expense not found")
        logger.info("expense %s deleted", expense_id)

    def expense_summary(self, project_id: int) -> ExpenseSummary:
        expenses = self._expenses.list_all_for_project(int(project_id))
        material = sum((e.total_material_cost for e in expenses), ZERO)
        labor = sum((e.labor.total_labor_cost for e in expenses), ZERO)
        return ExpenseSummary(
            total_material_cost=material,
            total_labor_cost=labor,
            workers_cost=sum((e.labor.workers_cost for e in expenses), ZERO),
            driver_cost=sum((e.labor.driver.total_wage for e in expenses), ZERO),
            total_expenses=material + labor,
        )
