from __future__ import annotations

from flask import Flask, request

from ..classes.controller import class_summary
from ..common.access import current_actor, roles_required
from ..common.http import json_body, json_list, ok
from ..common.validators import optional_str, parse_status, require_date, require_non_empty
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..users.controller import user_summary
from .model import AttendanceStats, AttendanceView
from .service import MarkAttendance, StudentStatus


def attendance_json(view: AttendanceView) -> dict:
    r = view.record
    return {
        "id": r.attendance_id,
        "student": user_summary(view.student),
        "class": class_summary(view.school_class),
        "date": r.attendance_date,
        "status": r.status,
        "notes": r.notes,
        "marked_by": user_summary(view.marked_by) if view.marked_by else None,
        "created_at": r.created_at,
    }


def stats_json(stats: AttendanceStats) -> dict:
    return {
        "student_id": stats.student_id,
        "total_days": stats.total_days,
        "present_days": stats.present_days,
        "absent_days": stats.absent_days,
        "late_days": stats.late_days,
        "excused_days": stats.excused_days,
        "attendance_percentage": stats.attendance_percentage,
    }


def _mark_request(data: dict) -> MarkAttendance:
    return MarkAttendance(
        student_id=require_non_empty(data.get("student_id"), "Student id"),
        class_id=require_non_empty(data.get("class_id"), "Class id"),
        attendance_date=require_date(data.get("date"), "Date"),
        status=parse_status(data.get("status")),
        notes=optional_str(data, "notes"),
    )


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/attendance/my-attendance", methods=["GET"], endpoint="attendance_mine")
    @roles_required(Role.STUDENT)
    def attendance_mine():
        views = attendance.history_for_student(current_actor().user_id)
        return ok([attendance_json(v) for v in views])

    @app.route("/api/attendance/my-stats", methods=["GET"], endpoint="attendance_my_stats")
    @roles_required(Role.STUDENT)
    def attendance_my_stats():
        return ok(stats_json(attendance.stats_for_student(current_actor().user_id)))

    @app.route("/api/attendance/student/<student_id>", methods=["GET"], endpoint="attendance_by_student")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_by_student(student_id: str):
        return ok([attendance_json(v) for v in attendance.history_for_student(student_id)])

    @app.route("/api/attendance/student/<student_id>/stats", methods=["GET"], endpoint="attendance_student_stats")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_student_stats(student_id: str):
        return ok(stats_json(attendance.stats_for_student(student_id)))

    @app.route("/api/attendance/class/<class_id>", methods=["GET"], endpoint="attendance_by_class")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_by_class(class_id: str):
        day = require_date(request.args.get("date"), "Date")
        return ok([attendance_json(v) for v in attendance.class_on_date(class_id, day)])

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_mark")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_mark():
        view = attendance.mark(_mark_request(json_body()), marked_by=current_actor().user_id)
        return ok(attendance_json(view), "Attendance marked successfully")

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_bulk():
        requests = [_mark_request(item) for item in json_list()]
        views = attendance.mark_bulk(requests, marked_by=current_actor().user_id)
        return ok([attendance_json(v) for v in views], "Bulk attendance marked successfully")

    @app.route("/api/attendance/class-bulk", methods=["POST"], endpoint="attendance_class_bulk")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_class_bulk():
        data = json_body()
        records = data.get("records")
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ValidationError("Records must be a list of objects")

        entries = [
            StudentStatus(
                student_id=require_non_empty(r.get("student_id"), "Student id"),
                status=parse_status(r.get("status")),
                notes=optional_str(r, "notes"),
            )
            for r in records
        ]
        views = attendance.mark_class(
            class_id=require_non_empty(data.get("class_id"), "Class id"),
            attendance_date=require_date(data.get("date"), "Date"),
            entries=entries,
            marked_by=current_actor().user_id,
        )
        return ok([attendance_json(v) for v in views], "Bulk attendance marked successfully")

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @roles_required(Role.ADMIN)
    def attendance_delete(attendance_id: str):
        attendance.delete(attendance_id)
        return ok(None, "Attendance record deleted successfully")
