from __future__ import annotations

from flask import Flask

from ..common.access import login_required, roles_required
from ..common.http import json_body, ok
from ..common.validators import optional_str
from ..container import Container
from ..core.enums import Role
from .model import ClassView, SchoolClass


def class_summary(school_class: SchoolClass) -> dict:
    return {
        "id": school_class.class_id,
        "name": school_class.name,
        "grade_level": school_class.grade_level,
        "academic_year": school_class.academic_year,
    }


def class_json(view: ClassView) -> dict:
    c = view.school_class
    return {
        **class_summary(c),
        "description": c.description,
        "student_count": view.student_count,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes", methods=["GET"], endpoint="classes_list")
    @login_required
    def classes_list():
        return ok([class_json(v) for v in container.class_service.list_classes()])

    @app.route("/api/classes/<class_id>", methods=["GET"], endpoint="classes_get")
    @login_required
    def classes_get(class_id: str):
        return ok(class_json(container.class_service.get_class(class_id)))

    @app.route("/api/classes", methods=["POST"], endpoint="classes_create")
    @roles_required(Role.ADMIN)
    def classes_create():
        data = json_body()
        view = container.class_service.create_class(
            name=data.get("name", ""),
            description=optional_str(data, "description"),
            grade_level=optional_str(data, "grade_level"),
            academic_year=optional_str(data, "academic_year"),
        )
        return ok(class_json(view), "Class created successfully", 201)

    @app.route("/api/classes/<class_id>", methods=["PUT"], endpoint="classes_update")
    @roles_required(Role.ADMIN)
    def classes_update(class_id: str):
        data = json_body()
        view = container.class_service.update_class(
            class_id,
            name=data.get("name", ""),
            description=optional_str(data, "description"),
            grade_level=optional_str(data, "grade_level"),
            academic_year=optional_str(data, "academic_year"),
        )
        return ok(class_json(view), "Class updated successfully")

    @app.route("/api/classes/<class_id>", methods=["DELETE"], endpoint="classes_delete")
    @roles_required(Role.ADMIN)
    def classes_delete(class_id: str):
        container.class_service.delete_class(class_id)
        return ok(None, "Class deleted successfully")
