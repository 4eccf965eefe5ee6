from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..payroll.model import LaborSnapshot
from .model import Expense, MaterialItem


class ExpenseRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def list_for_project(self, project_id: int, *, offset: int, limit: int) -> tuple[Sequence[Expense], int]:
        """Newest first, plus the total count for the project."""

        raise NotImplementedError

    def list_all_for_project(self, project_id: int) -> Sequence[Expense]:
        raise NotImplementedError

    def replace_lines(
        self,
        expense_id: int,
        *,
        materials: Sequence[MaterialItem],
        total_material_cost: Decimal,
        labor: LaborSnapshot,
        now: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete(self, expense_id: int) -> bool:
        raise NotImplementedError
