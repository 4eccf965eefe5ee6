from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceKind
from .model import AttendanceFilter, AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert(
        self,
        *,
        user_id: int,
        project_id: Optional[int],
        work_date: date,
        kind: AttendanceKind,
        present: bool,
        marked_by: int,
        now: datetime,
    ) -> AttendanceRecord:
        """Insert, or update present/marked_by of the record with the same natural key.

        Must be a single atomic write backed by the unique index.
        """

        raise NotImplementedError

    def query(self, filt: AttendanceFilter) -> Sequence[AttendanceRecord]:
        """Matching records ordered by work_date, then user_id."""

        raise NotImplementedError
