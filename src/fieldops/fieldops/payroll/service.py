from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.constants import ZERO
from ..core.enums import DriverDaysScope, Role
from ..core.exceptions import NotFoundError, ValidationError
from .calculator.base import DayCounter
from .calculator.crew_days import CrewDayCounter
from .calculator.personal_days import PersonalDayCounter
from .model import LaborLine, LaborSnapshot
from .repository import LaborSourceRepository

logger = logging.getLogger(__name__)


class LaborCostService:
    """Turns attendance into per-person and per-project labor cost.

    Pure read + arithmetic: nothing is stored, every call reflects the roster
    and attendance as they are now.
    """

    def __init__(
        self,
        source: LaborSourceRepository,
        *,
        worker_counter: Optional[DayCounter] = None,
        driver_counter: Optional[DayCounter] = None,
        driver_scope: DriverDaysScope = DriverDaysScope.PROJECT,
    ):
        self._source = source
        self._worker_counter = worker_counter or PersonalDayCounter()
        self._driver_counter = driver_counter or CrewDayCounter()
        self._driver_scope = DriverDaysScope(driver_scope)

    def compute_snapshot(
        self,
        project_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> LaborSnapshot:
        if start and end and start > end:
            raise ValidationError("startDate must not be after endDate")

        if self._driver_scope == DriverDaysScope.RANGE:
            crew_start, crew_end = start, end
        else:
            crew_start, crew_end = None, None

        inputs = self._source.load(int(project_id), start=start, end=end, crew_start=crew_start, crew_end=crew_end)
        if inputs is None:
            raise NotFoundError("Project not found")
        project = inputs.project

        workers = []
        for worker_id in project.assigned_worker_ids:
            person = inputs.people.get(worker_id)
            wage = Decimal(person.daily_wage) if person else ZERO
            days = self._worker_counter.days_present(worker_id, inputs.worker_records)
            workers.append(
                LaborLine(
                    person_id=worker_id,
                    full_name=person.full_name if person else "",
                    role=Role.WORKER,
                    days_present=days,
                    daily_wage=wage,
                    total_wage=wage * days,
                )
            )

        driver_person = inputs.people.get(project.assigned_driver_id) if project.assigned_driver_id else None
        if driver_person:
            wage = Decimal(driver_person.daily_wage)
            days = self._driver_counter.days_present(driver_person.person_id, inputs.crew_records)
            driver = LaborLine(
                person_id=driver_person.person_id,
                full_name=driver_person.full_name,
                role=Role.DRIVER,
                days_present=days,
                daily_wage=wage,
                total_wage=wage * days,
            )
        else:
            driver = LaborLine(
                person_id=None,
                full_name="",
                role=Role.DRIVER,
                days_present=0,
                daily_wage=ZERO,
                total_wage=ZERO,
            )

        total = sum((w.total_wage for w in workers), ZERO) + driver.total_wage
        logger.debug("labor snapshot project=%s total=%s", project.project_id, total)
        return LaborSnapshot(
            project_id=project.project_id,
            workers=tuple(workers),
            driver=driver,
            total_labor_cost=total,
            start=start,
            end=end,
        )
