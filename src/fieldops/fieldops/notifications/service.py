from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..projects.model import Client, Project
from ..users.model import Person
from .sender import NotificationSender

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,\nTECHNICAL SERVICE TEAM"


def unique_emails(addresses: Iterable[Optional[str]]) -> list[str]:
    seen: list[str] = []
    for a in addresses:
        a = (a or "").strip()
        if a and a not in seen:
            seen.append(a)
    return seen


class ProjectNotifier:
    """Best-effort project emails.

    Every public method returns True when the mail went out and False when it
    failed; failures are logged and never raised to the caller.
    """

    def __init__(self, sender: NotificationSender, *, base_url: str = "", inbox: str = ""):
        self._sender = sender
        self._base_url = base_url.rstrip("/")
        self._inbox = inbox

    def _project_url(self, project: Project) -> str:
        return f"{self._base_url}/app/project-view/{project.project_id}"

    def _deliver(self, *, event: str, project: Project, to: Sequence[str], subject: str, text: str, bcc: Sequence[str] = ()) -> bool:
        if not to and not bcc:
            logger.info("no recipients for %s on project %s", event, project.project_id)
            return False
        try:
            self._sender.send(to=to, subject=subject, text=text, bcc=bcc)
        except Exception:
            logger.exception("failed to send %s email for project %s", event, project.project_id)
            return False
        logger.info("sent %s email for project %s", event, project.project_id)
        return True

    def engineer_assigned(self, project: Project, *, engineer: Person, admins: Sequence[Person]) -> bool:
        recipients = unique_emails([engineer.email, *(a.email for a in admins)])
        text = (
            f"Dear Team,\n\nEngineer {engineer.first_name or 'Engineer'} has been assigned to project "
            f'"{project.project_name}".\n\nView project details: {self._project_url(project)}\n\n{SIGNATURE}'
        )
        return self._deliver(
            event="engineer_assigned",
            project=project,
            to=recipients,
            subject=f"Project Assignment: {project.project_name}",
            text=text,
        )

    def team_assigned(self, project: Project, *, members: Sequence[Person], admins: Sequence[Person]) -> bool:
        recipients = unique_emails([*(m.email for m in members), *(a.email for a in admins)])
        text = (
            f"Dear Team,\n\nYou have been assigned to project \"{project.project_name}\".\n\n"
            f"View project details: {self._project_url(project)}\n\n{SIGNATURE}"
        )
        return self._deliver(
            event="team_assigned",
            project=project,
            to=recipients,
            subject=f"Team Assigned: {project.project_name}",
            text=text,
        )

    def progress_updated(
        self,
        project: Project,
        *,
        progress: int,
        comment: Optional[str],
        client: Optional[Client],
        engineer: Optional[Person],
        admins: Sequence[Person],
    ) -> bool:
        recipients = unique_emails(
            [
                client.email if client else None,
                engineer.email if engineer else None,
                *(a.email for a in admins),
            ]
        )
        details = f"Details: {comment}\n\n" if comment else ""
        text = (
            f"Dear Team,\n\nThe progress for project {project.project_name} has been updated to {progress}%.\n\n"
            f"{details}View project: {self._project_url(project)}\n\n{SIGNATURE}"
        )
        to = [self._inbox] if self._inbox else recipients
        bcc = recipients if self._inbox else []
        return self._deliver(
            event="progress_updated",
            project=project,
            to=to,
            subject=f"Progress Update: {project.project_name} ({progress}% Complete)",
            text=text,
            bcc=bcc,
        )
