from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..common.identifiers import new_id
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MarkRecord
from .repository import MarkRepository

_COLUMNS = (
    "mark_id, student_id, class_id, subject_id, exam_type, score, max_score, "
    "exam_date, notes, graded_by, created_at"
)


def _to_mark(row: Dict[str, Any]) -> MarkRecord:
    return MarkRecord(
        mark_id=row["mark_id"],
        student_id=row["student_id"],
        class_id=row["class_id"],
        subject_id=row["subject_id"],
        exam_type=row["exam_type"],
        score=Decimal(row["score"]),
        max_score=Decimal(row["max_score"]),
        exam_date=row["exam_date"],
        notes=row.get("notes"),
        graded_by=row.get("graded_by"),
        created_at=row.get("created_at"),
    )


def _average(row: Optional[Dict[str, Any]]) -> Optional[Decimal]:
    if not row or row.get("avg_pct") is None:
        return None
    return Decimal(row["avg_pct"])


class MySQLMarkRepository(MarkRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, mark_id: str) -> Optional[MarkRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM marks WHERE mark_id=%s", (mark_id,))
            row = fetchone(cur)
            return _to_mark(row) if row else None

    def create_mark(
        self,
        *,
        student_id: str,
        class_id: str,
        subject_id: str,
        exam_type: str,
        score: Decimal,
        max_score: Decimal,
        exam_date: date,
        notes: Optional[str],
        graded_by: Optional[str],
    ) -> str:
        mark_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO marks(
                    mark_id, student_id, class_id, subject_id, exam_type,
                    score, max_score, exam_date, notes, graded_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (mark_id, student_id, class_id, subject_id, exam_type, score, max_score, exam_date, notes, graded_by),
            )
        return mark_id

    def update_mark(
        self,
        mark_id: str,
        *,
        exam_type: str,
        score: Decimal,
        max_score: Decimal,
        exam_date: date,
        notes: Optional[str],
        graded_by: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE marks
                SET exam_type=%s, score=%s, max_score=%s, exam_date=%s, notes=%s, graded_by=%s
                WHERE mark_id=%s
                """,
                (exam_type, score, max_score, exam_date, notes, graded_by, mark_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, mark_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM marks WHERE mark_id=%s", (mark_id,))
            return cur.rowcount > 0

    def list_by_student(self, student_id: str) -> Sequence[MarkRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM marks WHERE student_id=%s ORDER BY exam_date DESC, created_at DESC",
                (student_id,),
            )
            return [_to_mark(r) for r in fetchall(cur)]

    def list_by_class_and_subject(self, class_id: str, subject_id: str) -> Sequence[MarkRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM marks
                WHERE class_id=%s AND subject_id=%s
                ORDER BY exam_date DESC, created_at DESC
                """,
                (class_id, subject_id),
            )
            return [_to_mark(r) for r in fetchall(cur)]

    def average_for_student(self, student_id: str) -> Optional[Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT AVG(score * 100 / max_score) AS avg_pct FROM marks WHERE student_id=%s",
                (student_id,),
            )
            return _average(fetchone(cur))

    def average_for_class_and_subject(self, class_id: str, subject_id: str) -> Optional[Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT AVG(score * 100 / max_score) AS avg_pct FROM marks WHERE class_id=%s AND subject_id=%s",
                (class_id, subject_id),
            )
            return _average(fetchone(cur))
