from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..common.identifiers import new_id
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, student_id, class_id, attendance_date, status, notes, marked_by, created_at"


def _to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=row["attendance_id"],
        student_id=row["student_id"],
        class_id=row["class_id"],
        attendance_date=row["attendance_date"],
        status=AttendanceStatus(row["status"]),
        notes=row.get("notes"),
        marked_by=row.get("marked_by"),
        created_at=row.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def get_for_key(
        self,
        *,
        student_id: str,
        class_id: str,
        attendance_date: date,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE student_id=%s AND class_id=%s AND attendance_date=%s
        """
        if for_update:
            sql += " FOR UPDATE"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (student_id, class_id, attendance_date))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create_record(
        self,
        *,
        student_id: str,
        class_id: str,
        attendance_date: date,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: Optional[str],
    ) -> str:
        attendance_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_id, student_id, class_id, attendance_date, status, notes, marked_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (attendance_id, student_id, class_id, attendance_date, status.value, notes, marked_by),
            )
        return attendance_id

    def update_record(
        self,
        attendance_id: str,
        *,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET status=%s, notes=%s, marked_by=%s WHERE attendance_id=%s",
                (status.value, notes, marked_by, attendance_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, attendance_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            return cur.rowcount > 0

    def list_by_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY attendance_date DESC, created_at DESC
                """,
                (student_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_class_and_date(self, class_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.attendance_id, a.student_id, a.class_id, a.attendance_date, a.status, a.notes, a.marked_by, a.created_at
                FROM attendance_records a
                JOIN users u ON u.user_id = a.student_id
                WHERE a.class_id=%s AND a.attendance_date=%s
                ORDER BY u.full_name ASC
                """,
                (class_id, attendance_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_student(self, student_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE student_id=%s", (student_id,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def count_by_status(self, student_id: str) -> Dict[AttendanceStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT status, COUNT(*) AS n FROM attendance_records WHERE student_id=%s GROUP BY status",
                (student_id,),
            )
            return {AttendanceStatus(r["status"]): int(r["n"]) for r in fetchall(cur)}
