from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.identifiers import new_id
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SchoolClass
from .repository import ClassRepository

_COLUMNS = "class_id, name, description, grade_level, academic_year, created_at, updated_at"


def _to_class(row: Dict[str, Any]) -> SchoolClass:
    return SchoolClass(
        class_id=row["class_id"],
        name=row["name"],
        academic_year=row["academic_year"],
        description=row.get("description"),
        grade_level=row.get("grade_level"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE class_id=%s", (class_id,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def get_by_name_and_year(self, name: str, academic_year: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM classes WHERE name=%s AND academic_year=%s",
                (name, academic_year),
            )
            row = fetchone(cur)
            return _to_class(row) if row else None

    def create_class(
        self,
        *,
        name: str,
        academic_year: str,
        description: Optional[str] = None,
        grade_level: Optional[str] = None,
    ) -> str:
        class_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classes(class_id, name, description, grade_level, academic_year)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (class_id, name, description, grade_level, academic_year),
            )
        return class_id

    def update_class(
        self,
        class_id: str,
        *,
        name: str,
        academic_year: str,
        description: Optional[str],
        grade_level: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE classes
                SET name=%s, description=%s, grade_level=%s, academic_year=%s
                WHERE class_id=%s
                """,
                (name, description, grade_level, academic_year, class_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, class_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE class_id=%s", (class_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes ORDER BY name ASC, academic_year DESC")
            return [_to_class(r) for r in fetchall(cur)]

    def count_all(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM classes")
            row = fetchone(cur)
            return int(row["n"]) if row else 0
