from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from flask import Flask

from ..classes.controller import class_summary
from ..common.access import current_actor, roles_required
from ..common.http import json_body, json_list, ok
from ..common.validators import optional_date, optional_decimal, optional_str, require_decimal, require_non_empty
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.controller import user_summary
from .model import MarkView
from .service import MarkChanges, NewMark


def mark_json(view: MarkView) -> dict:
    m = view.mark
    return {
        "id": m.mark_id,
        "student": user_summary(view.student),
        "class": class_summary(view.school_class),
        "subject": {"id": view.subject.subject_id, "name": view.subject.name, "code": view.subject.code},
        "exam_type": m.exam_type,
        "score": m.score,
        "max_score": m.max_score,
        "percentage": m.percentage,
        "grade": m.grade,
        "exam_date": m.exam_date,
        "notes": m.notes,
        "graded_by": user_summary(view.graded_by) if view.graded_by else None,
        "created_at": m.created_at,
    }


def _max_score(value: Any) -> Optional[Decimal]:
    max_score = optional_decimal(value, "Max score")
    if max_score is not None and max_score <= 0:
        raise ValidationError("Max score must be greater than 0")
    return max_score


def _new_mark(data: dict) -> NewMark:
    return NewMark(
        student_id=require_non_empty(data.get("student_id"), "Student id"),
        class_id=require_non_empty(data.get("class_id"), "Class id"),
        subject_id=require_non_empty(data.get("subject_id"), "Subject id"),
        exam_type=require_non_empty(data.get("exam_type"), "Exam type"),
        score=require_decimal(data.get("score"), "Score"),
        max_score=_max_score(data.get("max_score")),
        exam_date=optional_date(data.get("exam_date"), "Exam date"),
        notes=optional_str(data, "notes"),
    )


def register(app: Flask, container: Container) -> None:
    marks = container.mark_service

    @app.route("/api/marks/my-marks", methods=["GET"], endpoint="marks_mine")
    @roles_required(Role.STUDENT)
    def marks_mine():
        return ok([mark_json(v) for v in marks.marks_for_student(current_actor().user_id)])

    @app.route("/api/marks/my-average", methods=["GET"], endpoint="marks_my_average")
    @roles_required(Role.STUDENT)
    def marks_my_average():
        return ok(marks.student_average(current_actor().user_id))

    @app.route("/api/marks/student/<student_id>", methods=["GET"], endpoint="marks_by_student")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_by_student(student_id: str):
        return ok([mark_json(v) for v in marks.marks_for_student(student_id)])

    @app.route("/api/marks/student/<student_id>/average", methods=["GET"], endpoint="marks_student_average")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_student_average(student_id: str):
        return ok(marks.student_average(student_id))

    @app.route("/api/marks/class/<class_id>/subject/<subject_id>", methods=["GET"], endpoint="marks_by_class_subject")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_by_class_subject(class_id: str, subject_id: str):
        return ok([mark_json(v) for v in marks.marks_for_class_subject(class_id, subject_id)])

    @app.route(
        "/api/marks/class/<class_id>/subject/<subject_id>/average",
        methods=["GET"],
        endpoint="marks_class_subject_average",
    )
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_class_subject_average(class_id: str, subject_id: str):
        return ok(marks.class_subject_average(class_id, subject_id))

    @app.route("/api/marks", methods=["POST"], endpoint="marks_add")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_add():
        view = marks.add(_new_mark(json_body()), graded_by=current_actor().user_id)
        return ok(mark_json(view), "Mark added successfully", 201)

    @app.route("/api/marks/bulk", methods=["POST"], endpoint="marks_bulk")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_bulk():
        items = [_new_mark(item) for item in json_list()]
        views = marks.add_bulk(items, graded_by=current_actor().user_id)
        return ok([mark_json(v) for v in views], "Marks added successfully", 201)

    @app.route("/api/marks/<mark_id>", methods=["PUT"], endpoint="marks_update")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def marks_update(mark_id: str):
        data = json_body()
        changes = MarkChanges(
            exam_type=require_non_empty(data.get("exam_type"), "Exam type"),
            score=require_decimal(data.get("score"), "Score"),
            max_score=_max_score(data.get("max_score")),
            exam_date=optional_date(data.get("exam_date"), "Exam date"),
            notes=optional_str(data, "notes"),
        )
        view = marks.update(mark_id, changes, graded_by=current_actor().user_id)
        return ok(mark_json(view), "Mark updated successfully")

    @app.route("/api/marks/<mark_id>", methods=["DELETE"], endpoint="marks_delete")
    @roles_required(Role.ADMIN)
    def marks_delete(mark_id: str):
        marks.delete(mark_id)
        return ok(None, "Mark deleted successfully")
