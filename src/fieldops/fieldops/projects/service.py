from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..comments.model import Comment
from ..comments.repository import CommentRepository
from ..common.datetime_utils import Clock, now_local
from ..common.pagination import Page, offset_for
from ..common.validators import require_non_empty, require_page, require_progress
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, PROJECT_NUMBER_PREFIX
from ..core.enums import CommentAction, ProjectStatus, Role
from ..core.exceptions import ConflictError, InvalidOperationError, NotFoundError, ValidationError
from ..notifications.service import ProjectNotifier
from ..users.repository import PersonRepository
from . import lifecycle
from .model import AssignedTeam, Project, ProjectFilter
from .repository import ProjectRepository

logger = logging.getLogger(__name__)

ADMIN_ROLES = (Role.ADMIN, Role.SUPER_ADMIN)
EDITABLE_FIELDS = frozenset({"project_name", "description", "location", "building", "apartment_number"})


class ProjectService:
    """Use cases around a project: CRUD, lifecycle, progress and crew."""

    def __init__(
        self,
        projects: ProjectRepository,
        people: PersonRepository,
        comments: CommentRepository,
        notifier: ProjectNotifier,
        *,
        clock: Clock = now_local,
    ):
        self._projects = projects
        self._people = people
        self._comments = comments
        self._notifier = notifier
        self._clock = clock

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def _next_project_number(self) -> str:
        prefix = f"{PROJECT_NUMBER_PREFIX}-{self._clock():%Y%m}-"
        seq = self._projects.count_numbers_with_prefix(prefix) + 1
        return f"{prefix}{seq:04d}"

    def create_project(
        self,
        *,
        project_name: str,
        client_id: int,
        location: str,
        building: str,
        apartment_number: str,
        description: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Project:
        try:
            project_name = require_non_empty(project_name, "Project name")
            location = require_non_empty(location, "Location")
            building = require_non_empty(building, "Building")
            apartment_number = require_non_empty(apartment_number, "Apartment number")
            client_id = int(client_id)
        except (TypeError, ValueError, ValidationError):
            raise ValidationError("Required fields are missing")

        if not self._projects.get_client(client_id):
            raise NotFoundError("Client not found")

        project_id = self._projects.create(
            project_number=self._next_project_number(),
            project_name=project_name,
            client_id=client_id,
            location=location,
            building=building,
            apartment_number=apartment_number,
            description=(description or "").strip() or None,
            created_by=created_by,
            created_at=self._clock(),
        )
        logger.info("project %s created by %s", project_id, created_by)
        return self.get_project(project_id)

    def list_projects(
        self,
        filt: Optional[ProjectFilter] = None,
        *,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[Project]:
        page, limit = require_page(page, limit)
        items, total = self._projects.list(filt or ProjectFilter(), offset=offset_for(page, limit), limit=limit)
        return Page(items=list(items), total=total, page=page, limit=limit)

    def request_transition(self, project_id: int, target, *, acting_user_id: Optional[int], note: str = "") -> Project:
        """Explicit status change; only edges of the lifecycle graph are accepted."""
        project = self.get_project(project_id)
        target = lifecycle.ensure_transition(project.status, target)

        self._write_state(project, status=target, acting_user_id=acting_user_id)
        self._record_status_change(project, target, acting_user_id=acting_user_id, note=note)
        return self.get_project(project.project_id)

    def _write_state(
        self,
        project: Project,
        *,
        status: ProjectStatus,
        acting_user_id: Optional[int],
        progress: Optional[int] = None,
        fields: Optional[dict] = None,
    ) -> None:
        ok = self._projects.compare_and_set_state(
            project.project_id,
            expected_status=project.status,
            status=status,
            progress=progress,
            fields=fields,
            updated_by=acting_user_id,
            updated_at=self._clock(),
        )
        if not ok:
            raise ConflictError("Project was modified by another request, reload and try again")

    def _record_status_change(
        self, project: Project, target: ProjectStatus, *, acting_user_id: Optional[int], note: str = ""
    ) -> None:
        content = f"Status changed from {project.status.value} to {target.value}"
        if note and note.strip():
            content = f"{content}: {note.strip()}"
        self._comments.create(
            project_id=project.project_id,
            user_id=acting_user_id,
            content=content,
            action_type=CommentAction.STATUS_CHANGE,
            created_at=self._clock(),
        )
        logger.info("project %s status %s -> %s by %s", project.project_id, project.status.value, target.value, acting_user_id)

    def update_progress(
        self,
        project_id: int,
        progress,
        *,
        acting_user_id: Optional[int],
        comment: Optional[str] = None,
    ) -> Project:
        progress = require_progress(progress)
        project = self.get_project(project_id)

        new_status = lifecycle.status_after_progress(project.status, progress)
        self._write_state(project, status=new_status, progress=progress, acting_user_id=acting_user_id)
        return self._record_progress(project, project.status, progress, acting_user_id=acting_user_id, comment=comment)

    def _record_progress(
        self,
        project: Project,
        from_status: ProjectStatus,
        progress: int,
        *,
        acting_user_id: Optional[int],
        comment: Optional[str] = None,
    ) -> Project:
        """Comment and notify after a stored progress write. `project` is the state before the write."""
        old_progress = project.progress
        updated = self.get_project(project.project_id)
        if updated.status != from_status:
            logger.info(
                "project %s auto-advanced %s -> %s at %s%%",
                project.project_id,
                from_status.value,
                updated.status.value,
                progress,
            )

        comment = (comment or "").strip() or None
        if comment or progress != old_progress:
            self._comments.create(
                project_id=project.project_id,
                user_id=acting_user_id,
                content=comment or f"Progress updated from {old_progress}% to {progress}%",
                action_type=CommentAction.PROGRESS_UPDATE,
                progress=progress,
                created_at=self._clock(),
            )

        if progress != old_progress:
            self._notifier.progress_updated(
                updated,
                progress=progress,
                comment=comment,
                client=self._projects.get_client(updated.client_id),
                engineer=self._people.get_by_id(updated.assigned_to) if updated.assigned_to else None,
                admins=self._people.list_by_roles(ADMIN_ROLES),
            )
        return updated

    def update_project(self, project_id: int, changes: dict, *, acting_user_id: Optional[int]) -> Project:
        """Generic edit. `progress` and `status` go through the same rules as their dedicated calls.

        When either is present the field edits ride on the same conditional write, so a
        lost race stores nothing.
        """
        project = self.get_project(project_id)

        progress = changes.get("progress")
        if progress is not None:
            progress = require_progress(progress)
        status = changes.get("status")
        target = lifecycle.ensure_transition(project.status, status) if status else project.status

        fields = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        for name in ("project_name", "location", "building", "apartment_number"):
            if name in fields:
                fields[name] = require_non_empty(fields[name], name.replace("_", " ").capitalize())

        if not status and progress is None:
            if fields:
                self._projects.update_fields(
                    project.project_id,
                    fields=fields,
                    updated_by=acting_user_id,
                    updated_at=self._clock(),
                )
            return self.get_project(project.project_id)

        final = lifecycle.status_after_progress(target, progress) if progress is not None else target
        self._write_state(project, status=final, progress=progress, fields=fields, acting_user_id=acting_user_id)
        if status:
            self._record_status_change(project, target, acting_user_id=acting_user_id)
        if progress is not None:
            return self._record_progress(project, target, progress, acting_user_id=acting_user_id)
        return self.get_project(project.project_id)

    def assign_engineer(self, project_id: int, engineer_id: int, *, acting_user_id: Optional[int]) -> Project:
        project = self.get_project(project_id)
        engineer = self._people.get_by_id(int(engineer_id))
        if not engineer:
            raise NotFoundError("Engineer not found")

        self._projects.update_fields(
            project.project_id,
            fields={"assigned_to": engineer.person_id},
            updated_by=acting_user_id,
            updated_at=self._clock(),
        )
        updated = self.get_project(project.project_id)
        self._notifier.engineer_assigned(updated, engineer=engineer, admins=self._people.list_by_roles(ADMIN_ROLES))
        return updated

    def assign_team(
        self,
        project_id: int,
        *,
        worker_ids: Sequence[int],
        driver_id: int,
        acting_user_id: Optional[int],
    ) -> Project:
        if not worker_ids or driver_id is None:
            raise ValidationError("Both workers array and driverId are required")
        try:
            ids = list(dict.fromkeys(int(w) for w in worker_ids))
            driver_id = int(driver_id)
        except (TypeError, ValueError):
            raise ValidationError("Worker and driver ids must be integers")

        project = self.get_project(project_id)
        target = lifecycle.ensure_transition(project.status, ProjectStatus.TEAM_ASSIGNED)

        workers = list(self._people.get_many(ids))
        if len(workers) != len(ids):
            raise NotFoundError("One or more workers not found")
        if any(w.role != Role.WORKER for w in workers):
            raise ValidationError("All assigned workers must have the worker role")

        driver = self._people.get_by_id(driver_id)
        if not driver:
            raise NotFoundError("Driver not found")
        if driver.role != Role.DRIVER:
            raise ValidationError("Valid driver ID is required")

        ok = self._projects.set_roster(
            project.project_id,
            expected_status=project.status,
            status=target,
            worker_ids=ids,
            driver_id=driver.person_id,
            updated_by=acting_user_id,
            updated_at=self._clock(),
        )
        if not ok:
            raise ConflictError("Project was modified by another request, reload and try again")

        logger.info("project %s team assigned: driver=%s workers=%s", project.project_id, driver.person_id, ids)
        updated = self.get_project(project.project_id)
        self._notifier.team_assigned(
            updated,
            members=[*workers, driver],
            admins=self._people.list_by_roles(ADMIN_ROLES),
        )
        return updated

    def get_assigned_team(self, project_id: int) -> AssignedTeam:
        project = self.get_project(project_id)
        by_id = {p.person_id: p for p in self._people.get_many(project.assigned_worker_ids)}
        workers = [by_id[w] for w in project.assigned_worker_ids if w in by_id]
        driver = self._people.get_by_id(project.assigned_driver_id) if project.assigned_driver_id else None
        return AssignedTeam(workers=workers, driver=driver)

    def list_progress_updates(self, project_id: int) -> Sequence[Comment]:
        self.get_project(project_id)
        return self._comments.list_for_project(int(project_id), action_type=CommentAction.PROGRESS_UPDATE)

    def delete_project(self, project_id: int) -> None:
        project = self.get_project(project_id)
        if project.status != ProjectStatus.DRAFT:
            raise InvalidOperationError("Cannot delete project that has already started")
        if not self._projects.delete(project.project_id, expected_status=ProjectStatus.DRAFT):
            raise ConflictError("Project was modified by another request, reload and try again")
        logger.info("project %s deleted", project.project_id)
