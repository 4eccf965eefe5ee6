from __future__ import annotations

from flask import Flask, request

from ..common.web import api_response, current_role, current_user_id, date_arg, json_body, login_required, roles_required
from ..core.enums import AttendanceKind, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container
from .model import AttendanceFilter


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    def _present_arg():
        value = request.args.get("present")
        if value in (None, ""):
            return None
        if value.lower() in ("true", "1"):
            return True
        if value.lower() in ("false", "0"):
            return False
        raise ValidationError("present must be true or false")

    @app.route("/api/attendance/project/<int:project_id>/user/<int:user_id>", methods=["POST"], endpoint="mark_attendance")
    @roles_required(Role.DRIVER)
    def mark_attendance(project_id: int, user_id: int):
        body = json_body()
        record = svc.mark_presence(
            subject_id=user_id,
            project_id=project_id,
            present=body.get("present"),
            marked_by=current_user_id(),
            kind=AttendanceKind.PROJECT,
        )
        return api_response(record.to_dict(), "Attendance marked successfully")

    @app.route("/api/attendance/project/<int:project_id>/user/<int:user_id>", methods=["GET"], endpoint="user_attendance")
    @login_required
    def user_attendance(project_id: int, user_id: int):
        records = svc.query_presence(
            AttendanceFilter(
                subject_id=user_id,
                project_id=project_id,
                kind=AttendanceKind.PROJECT,
                start=date_arg("startDate"),
                end=date_arg("endDate"),
            )
        )
        return api_response([r.to_dict() for r in records])

    @app.route("/api/attendance/project/<int:project_id>", methods=["GET"], endpoint="project_attendance")
    @roles_required(Role.ADMIN, Role.SUPER_ADMIN, Role.ENGINEER)
    def project_attendance(project_id: int):
        records = svc.query_presence(
            AttendanceFilter(
                project_id=project_id,
                kind=AttendanceKind.PROJECT,
                start=date_arg("startDate"),
                end=date_arg("endDate"),
                present=_present_arg(),
            )
        )
        return api_response([r.to_dict() for r in records])

    @app.route("/api/attendance/project/<int:project_id>/today", methods=["GET"], endpoint="today_attendance")
    @roles_required(Role.ADMIN, Role.SUPER_ADMIN, Role.ENGINEER, Role.DRIVER)
    def today_attendance(project_id: int):
        rows = svc.today_roster(project_id)
        return api_response(
            [
                {
                    "user": {"id": r.user_id, "name": r.full_name, "phone": r.phone},
                    "present": r.present,
                    "markedBy": r.marked_by,
                    "markedAt": r.marked_at.isoformat() if r.marked_at else None,
                }
                for r in rows
            ]
        )

    @app.route("/api/attendance/project/<int:project_id>/summary", methods=["GET"], endpoint="attendance_summary")
    @roles_required(Role.ADMIN, Role.SUPER_ADMIN, Role.ENGINEER)
    def attendance_summary(project_id: int):
        summary = svc.attendance_summary(project_id, start=date_arg("startDate"), end=date_arg("endDate"))
        return api_response(
            {
                "dates": [d.isoformat() for d in summary.dates],
                "workers": summary.workers,
                "attendanceMatrix": {
                    d.isoformat(): {str(w): present for w, present in row.items()}
                    for d, row in summary.matrix.items()
                },
                "totals": {str(w): n for w, n in summary.totals.items()},
            }
        )

    @app.route("/api/attendance/me", methods=["POST"], endpoint="mark_own_attendance")
    @login_required
    def mark_own_attendance():
        body = json_body()
        record = svc.mark_presence(
            subject_id=current_user_id(),
            project_id=None,
            present=body.get("present"),
            marked_by=current_user_id(),
            kind=AttendanceKind.NORMAL,
        )
        return api_response(record.to_dict(), "Attendance marked successfully")

    @app.route("/api/attendance/user/<int:user_id>", methods=["GET"], endpoint="normal_attendance")
    @login_required
    def normal_attendance(user_id: int):
        uid = current_user_id()
        if uid != user_id and current_role() not in (Role.ADMIN, Role.SUPER_ADMIN):
            raise AuthorizationError("You can only view your own attendance")
        records = svc.query_presence(
            AttendanceFilter(
                subject_id=user_id,
                kind=AttendanceKind.NORMAL,
                start=date_arg("startDate"),
                end=date_arg("endDate"),
            )
        )
        return api_response([r.to_dict() for r in records])
