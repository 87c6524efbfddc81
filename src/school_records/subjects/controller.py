from __future__ import annotations

from flask import Flask

from ..common.access import login_required, roles_required
from ..common.http import json_body, ok
from ..common.validators import optional_str
from ..container import Container
from ..core.enums import Role
from .model import Subject


def subject_json(subject: Subject) -> dict:
    return {
        "id": subject.subject_id,
        "name": subject.name,
        "code": subject.code,
        "description": subject.description,
        "created_at": subject.created_at,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/subjects", methods=["GET"], endpoint="subjects_list")
    @login_required
    def subjects_list():
        return ok([subject_json(s) for s in container.subject_service.list_subjects()])

    @app.route("/api/subjects/<subject_id>", methods=["GET"], endpoint="subjects_get")
    @login_required
    def subjects_get(subject_id: str):
        return ok(subject_json(container.subject_service.resolve(subject_id)))

    @app.route("/api/subjects", methods=["POST"], endpoint="subjects_create")
    @roles_required(Role.ADMIN)
    def subjects_create():
        data = json_body()
        subject = container.subject_service.create_subject(
            name=data.get("name", ""),
            code=optional_str(data, "code"),
            description=optional_str(data, "description"),
        )
        return ok(subject_json(subject), "Subject created successfully", 201)

    @app.route("/api/subjects/<subject_id>", methods=["PUT"], endpoint="subjects_update")
    @roles_required(Role.ADMIN)
    def subjects_update(subject_id: str):
        data = json_body()
        subject = container.subject_service.update_subject(
            subject_id,
            name=data.get("name", ""),
            code=optional_str(data, "code"),
            description=optional_str(data, "description"),
        )
        return ok(subject_json(subject), "Subject updated successfully")

    @app.route("/api/subjects/<subject_id>", methods=["DELETE"], endpoint="subjects_delete")
    @roles_required(Role.ADMIN)
    def subjects_delete(subject_id: str):
        container.subject_service.delete_subject(subject_id)
        return ok(None, "Subject deleted successfully")
