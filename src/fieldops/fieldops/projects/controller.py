from __future__ import annotations

from flask import Flask, request

from ..common.web import api_response, current_user_id, int_arg, json_body, login_required, roles_required
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from ..core.enums import ProjectStatus, Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ProjectFilter

MANAGERS = (Role.ADMIN, Role.SUPER_ADMIN)
SUPERVISORS = (Role.ADMIN, Role.SUPER_ADMIN, Role.ENGINEER)

# JSON key -> service field for generic updates
_UPDATE_KEYS = {
    "projectName": "project_name",
    "projectDescription": "description",
    "location": "location",
    "building": "building",
    "apartmentNumber": "apartment_number",
    "status": "status",
    "progress": "progress",
}


def _person_dict(p) -> dict:
    return {"id": p.person_id, "name": p.full_name, "email": p.email, "phone": p.phone, "role": p.role.value}


def register(app: Flask, container: Container) -> None:
    svc = container.project_service

    def _paged(filt: ProjectFilter):
        result = svc.list_projects(
            filt,
            page=int_arg("page", DEFAULT_PAGE),
            limit=int_arg("limit", DEFAULT_PAGE_LIMIT),
        )
        return api_response({"projects": [p.to_dict() for p in result.items], "pagination": result.meta()})

    def _status_arg():
        value = request.args.get("status")
        if not value:
            return None
        try:
            return ProjectStatus(value)
        except ValueError:
            raise ValidationError(f"Unknown status: {value}")

    @app.route("/api/projects", methods=["POST"], endpoint="create_project")
    @roles_required(*MANAGERS)
    def create_project():
        body = json_body()
        project = svc.create_project(
            project_name=body.get("projectName"),
            client_id=body.get("client"),
            location=body.get("location"),
            building=body.get("building"),
            apartment_number=body.get("apartmentNumber"),
            description=body.get("projectDescription"),
            created_by=current_user_id(),
        )
        return api_response(project.to_dict(), "Project created successfully", 201)

    @app.route("/api/projects", methods=["GET"], endpoint="list_projects")
    @login_required
    def list_projects():
        return _paged(
            ProjectFilter(
                status=_status_arg(),
                client_id=int_arg("client"),
                search=(request.args.get("search") or "").strip() or None,
            )
        )

    @app.route("/api/projects/engineer", methods=["GET"], endpoint="engineer_projects")
    @roles_required(Role.ENGINEER)
    def engineer_projects():
        return _paged(ProjectFilter(status=_status_arg(), assigned_to=current_user_id()))

    @app.route("/api/projects/driver", methods=["GET"], endpoint="driver_projects")
    @roles_required(Role.DRIVER)
    def driver_projects():
        return _paged(ProjectFilter(status=_status_arg(), assigned_driver_id=current_user_id()))

    @app.route("/api/projects/<int:project_id>", methods=["GET"], endpoint="get_project")
    @login_required
    def get_project(project_id: int):
        return api_response(svc.get_project(project_id).to_dict())

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="update_project")
    @roles_required(*MANAGERS)
    def update_project(project_id: int):
        body = json_body()
        changes = {field: body[key] for key, field in _UPDATE_KEYS.items() if key in body}
        project = svc.update_project(project_id, changes, acting_user_id=current_user_id())
        return api_response(project.to_dict(), "Project updated successfully")

    @app.route("/api/projects/<int:project_id>/status", methods=["PATCH"], endpoint="project_status")
    @roles_required(*SUPERVISORS)
    def project_status(project_id: int):
        body = json_body()
        if not body.get("status"):
            raise ValidationError("Status is required")
        project = svc.request_transition(
            project_id,
            body["status"],
            acting_user_id=current_user_id(),
            note=body.get("comment") or "",
        )
        return api_response(project.to_dict(), "Project status updated")

    @app.route("/api/projects/<int:project_id>/assign", methods=["PATCH"], endpoint="assign_engineer")
    @roles_required(*MANAGERS)
    def assign_engineer(project_id: int):
        body = json_body()
        if body.get("assignedTo") is None:
            raise ValidationError("assignedTo is required")
        project = svc.assign_engineer(project_id, body["assignedTo"], acting_user_id=current_user_id())
        return api_response(project.to_dict(), "Project assigned successfully")

    @app.route("/api/projects/<int:project_id>/progress", methods=["PATCH"], endpoint="update_progress")
    @roles_required(*SUPERVISORS)
    def update_progress(project_id: int):
        body = json_body()
        project = svc.update_progress(
            project_id,
            body.get("progress"),
            acting_user_id=current_user_id(),
            comment=body.get("comment"),
        )
        return api_response(project.to_dict(), "Progress updated successfully")

    @app.route("/api/projects/<int:project_id>/progress", methods=["GET"], endpoint="progress_updates")
    @login_required
    def progress_updates(project_id: int):
        return api_response([c.to_dict() for c in svc.list_progress_updates(project_id)])

    @app.route("/api/projects/<int:project_id>/team", methods=["POST"], endpoint="assign_team")
    @roles_required(*SUPERVISORS)
    def assign_team(project_id: int):
        body = json_body()
        workers = body.get("workers")
        if workers is not None and not isinstance(workers, list):
            raise ValidationError("Workers must be an array")
        project = svc.assign_team(
            project_id,
            worker_ids=workers or [],
            driver_id=body.get("driverId"),
            acting_user_id=current_user_id(),
        )
        return api_response(project.to_dict(), "Team assigned successfully")

    @app.route("/api/projects/<int:project_id>/team", methods=["GET"], endpoint="assigned_team")
    @login_required
    def assigned_team(project_id: int):
        team = svc.get_assigned_team(project_id)
        return api_response(
            {
                "workers": [_person_dict(w) for w in team.workers],
                "driver": _person_dict(team.driver) if team.driver else None,
            }
        )

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="delete_project")
    @roles_required(*MANAGERS)
    def delete_project(project_id: int):
        svc.delete_project(project_id)
        return api_response(None, "Project deleted successfully")
