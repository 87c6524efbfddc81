from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.identifiers import new_id
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Subject
from .repository import SubjectRepository

_COLUMNS = "subject_id, name, code, description, created_at"


def _to_subject(row: Dict[str, Any]) -> Subject:
    return Subject(
        subject_id=row["subject_id"],
        name=row["name"],
        code=row.get("code"),
        description=row.get("description"),
        created_at=row.get("created_at"),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM subjects WHERE subject_id=%s", (subject_id,))
            row = fetchone(cur)
            return _to_subject(row) if row else None

    def get_by_code(self, code: str) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM subjects WHERE code=%s", (code,))
            row = fetchone(cur)
            return _to_subject(row) if row else None

    def create_subject(self, *, name: str, code: Optional[str] = None, description: Optional[str] = None) -> str:
        subject_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO subjects(subject_id, name, code, description) VALUES(%s,%s,%s,%s)",
                (subject_id, name, code, description),
            )
        return subject_id

    def update_subject(self, subject_id: str, *, name: str, code: Optional[str], description: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE subjects SET name=%s, code=%s, description=%s WHERE subject_id=%s",
                (name, code, description, subject_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, subject_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM subjects WHERE subject_id=%s", (subject_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM subjects ORDER BY name ASC")
            return [_to_subject(r) for r in fetchall(cur)]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM subjects")
            row = fetchone(cur)
            return int(row["n"]) if row else 0
