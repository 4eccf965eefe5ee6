from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceKind


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one presence mark.

    Unique per (user_id, project_id, work_date, kind); only `present` and
    `marked_by` change after creation.
    """

    attendance_id: int
    user_id: int
    project_id: Optional[int]
    work_date: date
    kind: AttendanceKind
    present: bool
    marked_by: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user": self.user_id,
            "project": self.project_id,
            "date": self.work_date.isoformat(),
            "kind": self.kind.value,
            "present": self.present,
            "markedBy": self.marked_by,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class AttendanceFilter:
    """All fields optional; `start`/`end` are inclusive calendar days."""

    subject_id: Optional[int] = None
    project_id: Optional[int] = None
    kind: Optional[AttendanceKind] = None
    start: Optional[date] = None
    end: Optional[date] = None
    present: Optional[bool] = None


@dataclass(frozen=True)
class RosterAttendanceRow:
    """Read-model for the driver's daily sheet: one row per assigned worker."""

    user_id: int
    full_name: str
    phone: Optional[str]
    present: bool
    marked_by: Optional[int]
    marked_at: Optional[datetime]


@dataclass(frozen=True)
class AttendanceSummary:
    dates: list[date]
    workers: list[dict]
    # date -> worker id -> present (None when nothing was marked)
    matrix: dict[date, dict[int, Optional[bool]]]
    totals: dict[int, int]
