from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import ProjectStatus
from ..users.model import Person


@dataclass(frozen=True)
class Client:
    client_id: int
    client_name: str
    email: Optional[str] = None
    contact_person: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Domain entity: a construction/service job and its assigned crew."""

    project_id: int
    project_number: str
    project_name: str
    client_id: int
    location: str
    building: str
    apartment_number: str
    status: ProjectStatus = ProjectStatus.DRAFT
    progress: int = 0
    description: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_driver_id: Optional[int] = None
    assigned_worker_ids: tuple[int, ...] = field(default_factory=tuple)
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_driver(self, person_id: int) -> bool:
        return self.assigned_driver_id is not None and self.assigned_driver_id == int(person_id)

    def is_worker(self, person_id: int) -> bool:
        return int(person_id) in self.assigned_worker_ids

    def is_on_roster(self, person_id: int) -> bool:
        """True for the assigned driver and every assigned worker."""
        return self.is_worker(person_id) or self.is_driver(person_id)

    def to_dict(self) -> dict:
        return {
            "id": self.project_id,
            "projectNumber": self.project_number,
            "projectName": self.project_name,
            "projectDescription": self.description,
            "client": self.client_id,
            "location": self.location,
            "building": self.building,
            "apartmentNumber": self.apartment_number,
            "status": self.status.value,
            "progress": self.progress,
            "assignedTo": self.assigned_to,
            "assignedDriver": self.assigned_driver_id,
            "assignedWorkers": list(self.assigned_worker_ids),
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class ProjectFilter:
    status: Optional[ProjectStatus] = None
    client_id: Optional[int] = None
    search: Optional[str] = None
    assigned_to: Optional[int] = None
    assigned_driver_id: Optional[int] = None


@dataclass(frozen=True)
class AssignedTeam:
    workers: list[Person]
    driver: Optional[Person]
