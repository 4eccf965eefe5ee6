from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.model import AttendanceRecord


class DayCounter(ABC):
    """Counting rule interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def days_present(self, person_id: int, records: Sequence[AttendanceRecord]) -> int:
        raise NotImplementedError
