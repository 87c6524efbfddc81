from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.identifiers import new_id
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Enrollment, TeachingAssignment
from .repository import AssignmentRepository, EnrollmentRepository


def _to_enrollment(row: Dict[str, Any]) -> Enrollment:
    return Enrollment(
        enrollment_id=row["enrollment_id"],
        student_id=row["student_id"],
        class_id=row["class_id"],
        enrolled_at=row.get("enrolled_at"),
    )


def _to_assignment(row: Dict[str, Any]) -> TeachingAssignment:
    return TeachingAssignment(
        assignment_id=row["assignment_id"],
        teacher_id=row["teacher_id"],
        class_id=row["class_id"],
        subject_id=row.get("subject_id"),
        created_at=row.get("created_at"),
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM student_classes WHERE enrollment_id=%s", (enrollment_id,))
            row = fetchone(cur)
            return _to_enrollment(row) if row else None

    def find(self, *, student_id: str, class_id: str) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT * FROM student_classes WHERE student_id=%s AND class_id=%s",
                (student_id, class_id),
            )
            row = fetchone(cur)
            return _to_enrollment(row) if row else None

    def create_enrollment(self, *, student_id: str, class_id: str) -> str:
        enrollment_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO student_classes(enrollment_id, student_id, class_id) VALUES(%s,%s,%s)",
                (enrollment_id, student_id, class_id),
            )
        return enrollment_id

    def delete_by_id(self, enrollment_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM student_classes WHERE enrollment_id=%s", (enrollment_id,))
            return cur.rowcount > 0

    def list_by_student(self, student_id: str) -> Sequence[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sc.*
                FROM student_classes sc
                JOIN classes c ON c.class_id = sc.class_id
                WHERE sc.student_id=%s
                ORDER BY c.name ASC
                """,
                (student_id,),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def list_by_class(self, class_id: str) -> Sequence[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT sc.*
                FROM student_classes sc
                JOIN users u ON u.user_id = sc.student_id
                WHERE sc.class_id=%s
                ORDER BY u.full_name ASC
                """,
                (class_id,),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def count_by_class(self, class_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM student_classes WHERE class_id=%s", (class_id,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0


class MySQLAssignmentRepository(AssignmentRepository):
    _COLUMNS = "assignment_id, teacher_id, class_id, subject_id, created_at"

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, assignment_id: str) -> Optional[TeachingAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {self._COLUMNS} FROM teacher_classes WHERE assignment_id=%s", (assignment_id,))
            row = fetchone(cur)
            return _to_assignment(row) if row else None

    def find(self, *, teacher_id: str, class_id: str, subject_id: Optional[str]) -> Optional[TeachingAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {self._COLUMNS}
                FROM teacher_classes
                WHERE teacher_id=%s AND class_id=%s AND subject_key=COALESCE(%s, '')
                """,
                (teacher_id, class_id, subject_id),
            )
            row = fetchone(cur)
            return _to_assignment(row) if row else None

    def create_assignment(self, *, teacher_id: str, class_id: str, subject_id: Optional[str]) -> str:
        assignment_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_classes(assignment_id, teacher_id, class_id, subject_id)
                VALUES(%s,%s,%s,%s)
                """,
                (assignment_id, teacher_id, class_id, subject_id),
            )
        return assignment_id

    def delete_by_id(self, assignment_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teacher_classes WHERE assignment_id=%s", (assignment_id,))
            return cur.rowcount > 0

    def list_by_teacher(self, teacher_id: str) -> Sequence[TeachingAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {self._COLUMNS} FROM teacher_classes WHERE teacher_id=%s ORDER BY created_at ASC",
                (teacher_id,),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def list_by_class(self, class_id: str) -> Sequence[TeachingAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {self._COLUMNS} FROM teacher_classes WHERE class_id=%s ORDER BY created_at ASC",
                (class_id,),
            )
            return [_to_assignment(r) for r in fetchall(cur)]
