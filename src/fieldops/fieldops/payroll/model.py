from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import Role
from ..projects.model import Project
from ..users.model import Person


@dataclass(frozen=True)
class LaborLine:
    """Pay for one person on one project. `person_id` is None for the placeholder driver."""

    person_id: Optional[int]
    full_name: str
    role: Role
    days_present: int
    daily_wage: Decimal
    total_wage: Decimal

    @property
    def is_placeholder(self) -> bool:
        return self.person_id is None

    def to_dict(self) -> dict:
        return {
            "user": self.person_id,
            "name": self.full_name,
            "daysPresent": self.days_present,
            "dailySalary": str(self.daily_wage),
            "totalSalary": str(self.total_wage),
        }


@dataclass(frozen=True)
class LaborSnapshot:
    """Point-in-time labor cost of a project; recomputed on every request."""

    project_id: int
    workers: tuple[LaborLine, ...]
    driver: LaborLine
    total_labor_cost: Decimal
    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def workers_cost(self) -> Decimal:
        return sum((w.total_wage for w in self.workers), Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "workers": [w.to_dict() for w in self.workers],
            "driver": self.driver.to_dict(),
            "totalLaborCost": str(self.total_labor_cost),
        }


@dataclass(frozen=True)
class LaborInputs:
    """Everything the aggregation needs, read in one consistent snapshot.

    `worker_records` are present project records inside the requested range,
    `crew_records` the present project records of the driver window.
    """

    project: Project
    people: dict[int, Person]
    worker_records: Sequence[AttendanceRecord]
    crew_records: Sequence[AttendanceRecord]
