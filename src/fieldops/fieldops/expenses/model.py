from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..payroll.model import LaborSnapshot


@dataclass(frozen=True)
class MaterialItem:
    description: str
    item_date: date
    invoice_no: str
    amount: Decimal
    item_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.item_id,
            "description": self.description,
            "date": self.item_date.isoformat(),
            "invoiceNo": self.invoice_no,
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class Expense:
    """Persisted expense: material lines plus the labor snapshot taken when it was saved.

    The labor part is a copy; later attendance changes do not touch it until
    the expense is updated again.
    """

    expense_id: int
    project_id: int
    materials: tuple[MaterialItem, ...]
    total_material_cost: Decimal
    labor: LaborSnapshot
    created_by: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime] = None

    @property
    def total_expense(self) -> Decimal:
        return self.total_material_cost + self.labor.total_labor_cost

    def to_dict(self) -> dict:
        return {
            "id": self.expense_id,
            "project": self.project_id,
            "materials": [m.to_dict() for m in self.materials],
            "totalMaterialCost": str(self.total_material_cost),
            "laborDetails": self.labor.to_dict(),
            "totalExpense": str(self.total_expense),
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class ExpenseSummary:
    total_material_cost: Decimal
    total_labor_cost: Decimal
    workers_cost: Decimal
    driver_cost: Decimal
    total_expenses: Decimal

    def to_dict(self) -> dict:
        return {
            "totalMaterialCost": str(self.total_material_cost),
            "totalLaborCost": str(self.total_labor_cost),
            "workersCost": str(self.workers_cost),
            "driverCost": str(self.driver_cost),
            "totalExpenses": str(self.total_expenses),
        }
