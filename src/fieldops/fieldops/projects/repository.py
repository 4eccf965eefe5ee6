from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ProjectStatus
from .model import Client, Project, ProjectFilter


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def get_client(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def count_numbers_with_prefix(self, prefix: str) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        project_number: str,
        project_name: str,
        client_id: int,
        location: str,
        building: str,
        apartment_number: str,
        description: Optional[str],
        created_by: Optional[int],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list(self, filt: ProjectFilter, *, offset: int, limit: int) -> tuple[Sequence[Project], int]:
        """Page of projects (newest first) plus the total matching count."""

        raise NotImplementedError

    def update_fields(self, project_id: int, *, fields: dict, updated_by: Optional[int], updated_at: datetime) -> bool:
        raise NotImplementedError

    def compare_and_set_state(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        status: ProjectStatus,
        progress: Optional[int] = None,
        fields: Optional[dict] = None,
        updated_by: Optional[int],
        updated_at: datetime,
    ) -> bool:
        """Write status, progress and `fields` together, only if the stored status is still `expected_status`."""

        raise NotImplementedError

    def set_roster(
        self,
        project_id: int,
        *,
        expected_status: ProjectStatus,
        status: ProjectStatus,
        worker_ids: Sequence[int],
        driver_id: int,
        updated_by: Optional[int],
        updated_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def delete(self, project_id: int, *, expected_status: ProjectStatus) -> bool:
        raise NotImplementedError
