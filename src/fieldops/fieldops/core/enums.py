from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for route guards and roster validation."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    ENGINEER = "engineer"
    FINANCE = "finance"
    DRIVER = "driver"
    WORKER = "worker"


class ProjectStatus(str, Enum):
    """Project lifecycle states, stored as-is in the database."""

    DRAFT = "draft"
    ESTIMATION_PREPARED = "estimation_prepared"
    QUOTATION_SENT = "quotation_sent"
    QUOTATION_APPROVED = "quotation_approved"
    QUOTATION_REJECTED = "quotation_rejected"
    LPO_RECEIVED = "lpo_received"
    TEAM_ASSIGNED = "team_assigned"
    WORK_STARTED = "work_started"
    IN_PROGRESS = "in_progress"
    WORK_COMPLETED = "work_completed"
    QUALITY_CHECK = "quality_check"
    CLIENT_HANDOVER = "client_handover"
    FINAL_INVOICE_SENT = "final_invoice_sent"
    PAYMENT_RECEIVED = "payment_received"
    PROJECT_CLOSED = "project_closed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class AttendanceKind(str, Enum):
    """PROJECT records are tied to a project and marked by its driver."""

    PROJECT = "project"
    NORMAL = "normal"


class CommentAction(str, Enum):
    PROGRESS_UPDATE = "progress_update"
    STATUS_CHANGE = "status_change"


class DriverDaysScope(str, Enum):
    """Which attendance window the driver day-count looks at.

    PROJECT counts every present day the project ever had, RANGE applies the
    same date range the workers are counted in.
    """

    PROJECT = "project"
    RANGE = "range"
