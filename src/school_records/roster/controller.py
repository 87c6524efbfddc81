from __future__ import annotations

from flask import Flask

from ..classes.controller import class_summary
from ..common.access import current_actor, roles_required
from ..common.http import json_body, ok
from ..common.validators import optional_str, require_non_empty
from ..container import Container
from ..core.enums import Role
from ..subjects.controller import subject_json
from ..users.controller import user_summary
from .model import AssignmentView, EnrollmentView


def enrollment_json(view: EnrollmentView) -> dict:
    return {
        "id": view.enrollment.enrollment_id,
        "student": user_summary(view.student),
        "class": class_summary(view.school_class),
        "enrolled_at": view.enrollment.enrolled_at,
    }


def assignment_json(view: AssignmentView) -> dict:
    return {
        "id": view.assignment.assignment_id,
        "teacher": user_summary(view.teacher),
        "class": class_summary(view.school_class),
        "subject": subject_json(view.subject) if view.subject else None,
        "student_count": view.student_count,
        "created_at": view.assignment.created_at,
    }


def register(app: Flask, container: Container) -> None:
    roster = container.roster_service

    # ===== STUDENT <-> CLASS =====

    @app.route("/api/student-classes/my-classes", methods=["GET"], endpoint="student_classes_mine")
    @roles_required(Role.STUDENT)
    def student_classes_mine():
        views = roster.enrollments_for_student(current_actor().user_id)
        return ok([enrollment_json(v) for v in views])

    @app.route("/api/student-classes/student/<student_id>", methods=["GET"], endpoint="student_classes_by_student")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def student_classes_by_student(student_id: str):
        return ok([enrollment_json(v) for v in roster.enrollments_for_student(student_id)])

    @app.route("/api/student-classes/class/<class_id>", methods=["GET"], endpoint="student_classes_by_class")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def student_classes_by_class(class_id: str):
        return ok([enrollment_json(v) for v in roster.enrollments_for_class(class_id)])

    @app.route("/api/student-classes", methods=["POST"], endpoint="student_classes_enroll")
    @roles_required(Role.ADMIN)
    def student_classes_enroll():
        data = json_body()
        view = roster.enroll(
            student_id=require_non_empty(data.get("student_id"), "Student id"),
            class_id=require_non_empty(data.get("class_id"), "Class id"),
        )
        return ok(enrollment_json(view), "Student enrolled successfully", 201)

    @app.route("/api/student-classes/<enrollment_id>", methods=["DELETE"], endpoint="student_classes_delete")
    @roles_required(Role.ADMIN)
    def student_classes_delete(enrollment_id: str):
        roster.unenroll(enrollment_id)
        return ok(None, "Student removed from class successfully")

    @app.route(
        "/api/student-classes/student/<student_id>/class/<class_id>",
        methods=["DELETE"],
        endpoint="student_classes_delete_pair",
    )
    @roles_required(Role.ADMIN)
    def student_classes_delete_pair(student_id: str, class_id: str):
        roster.unenroll_student(student_id=student_id, class_id=class_id)
        return ok(None, "Student removed from class successfully")

    # ===== TEACHER <-> CLASS =====

    @app.route("/api/teacher-classes/my-classes", methods=["GET"], endpoint="teacher_classes_mine")
    @roles_required(Role.TEACHER)
    def teacher_classes_mine():
        views = roster.assignments_for_teacher(current_actor().user_id)
        return ok([assignment_json(v) for v in views])

    @app.route("/api/teacher-classes/teacher/<teacher_id>", methods=["GET"], endpoint="teacher_classes_by_teacher")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def teacher_classes_by_teacher(teacher_id: str):
        return ok([assignment_json(v) for v in roster.assignments_for_teacher(teacher_id)])

    @app.route("/api/teacher-classes/class/<class_id>", methods=["GET"], endpoint="teacher_classes_by_class")
    @roles_required(Role.ADMIN)
    def teacher_classes_by_class(class_id: str):
        return ok([assignment_json(v) for v in roster.assignments_for_class(class_id)])

    @app.route("/api/teacher-classes", methods=["POST"], endpoint="teacher_classes_assign")
    @roles_required(Role.ADMIN)
    def teacher_classes_assign():
        data = json_body()
        view = roster.assign(
            teacher_id=require_non_empty(data.get("teacher_id"), "Teacher id"),
            class_id=require_non_empty(data.get("class_id"), "Class id"),
            subject_id=optional_str(data, "subject_id"),
        )
        return ok(assignment_json(view), "Teacher assigned successfully", 201)

    @app.route("/api/teacher-classes/<assignment_id>", methods=["DELETE"], endpoint="teacher_classes_delete")
    @roles_required(Role.ADMIN)
    def teacher_classes_delete(assignment_id: str):
        roster.remove_assignment(assignment_id)
        return ok(None, "Teacher removed from class successfully")
