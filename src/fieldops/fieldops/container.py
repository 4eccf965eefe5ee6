from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .comments.mysql_comment_repository import MySQLCommentRepository
from .core.enums import DriverDaysScope
from .database.connection import DBConfig, DatabaseConnection
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.service import ExpenseService
from .notifications.sender import LogNotificationSender, NotificationSender, SmtpNotificationSender, SmtpSettings
from .notifications.service import ProjectNotifier
from .payroll.mysql_labor_source import MySQLLaborSource
from .payroll.service import LaborCostService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .users.mysql_user_repository import MySQLPersonRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    project_service: ProjectService
    attendance_service: AttendanceService
    labor_cost_service: LaborCostService
    expense_service: ExpenseService
    conn: Optional[DatabaseConnection] = None


def build_sender(settings: Any) -> NotificationSender:
    host = getattr(settings, "SMTP_HOST", "")
    if not host:
        return LogNotificationSender()
    return SmtpNotificationSender(
        SmtpSettings(
            host=host,
            port=int(getattr(settings, "SMTP_PORT", 465)),
            user=getattr(settings, "SMTP_USER", ""),
            password=getattr(settings, "SMTP_PASSWORD", ""),
            mail_from=getattr(settings, "MAIL_FROM", "") or getattr(settings, "SMTP_USER", ""),
            use_ssl=bool(getattr(settings, "SMTP_USE_SSL", True)),
        )
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    people_repo = MySQLPersonRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    comments_repo = MySQLCommentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    labor_source = MySQLLaborSource(conn)
    expenses_repo = MySQLExpenseRepository(conn)

    notifier = ProjectNotifier(
        build_sender(settings),
        base_url=getattr(settings, "APP_BASE_URL", ""),
        inbox=getattr(settings, "NOTIFICATION_INBOX", ""),
    )

    labor_cost_service = LaborCostService(
        labor_source,
        driver_scope=DriverDaysScope(getattr(settings, "DRIVER_DAYS_SCOPE", DriverDaysScope.PROJECT.value)),
    )

    return Container(
        conn=conn,
        auth_service=AuthService(people_repo),
        project_service=ProjectService(projects_repo, people_repo, comments_repo, notifier),
        attendance_service=AttendanceService(attendance_repo, projects_repo, people_repo),
        labor_cost_service=labor_cost_service,
        expense_service=ExpenseService(expenses_repo, labor_cost_service),
    )
