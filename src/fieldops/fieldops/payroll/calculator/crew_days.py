from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from .base import DayCounter


class CrewDayCounter(DayCounter):
    """Driver rule: distinct dates on which anyone on the project was present.

    The driver's own records are not required: the driver is paid for every
    day the crew was on site.
    """

    def days_present(self, person_id: int, records: Sequence[AttendanceRecord]) -> int:
        return len({r.work_date for r in records if r.present})
