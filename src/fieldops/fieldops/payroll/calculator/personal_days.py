from __future__ import annotations

from typing import Sequence

from ...attendance.model import AttendanceRecord
from .base import DayCounter


class PersonalDayCounter(DayCounter):
    """Worker rule: days on which this person was marked present."""

    def days_present(self, person_id: int, records: Sequence[AttendanceRecord]) -> int:
        return sum(1 for r in records if r.present and r.user_id == person_id)
