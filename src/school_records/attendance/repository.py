from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_key(
        self,
        *,
        student_id: str,
        class_id: str,
        attendance_date: date,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        """Look up the record for one (student, class, date).

        ``for_update`` locks the row until the surrounding transaction ends.
        On a missing key it only takes a gap lock, which two transactions can
        hold at once, so it is meant for rows known to exist.
        """

        raise NotImplementedError

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
        """Insert a new record. Raises DuplicateKeyError if the key is taken."""

        raise NotImplementedError

    def update_record(
        self,
        attendance_id: str,
        *,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, attendance_id: str) -> bool:
        raise NotImplementedError

    def list_by_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_by_class_and_date(self, class_id: str, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_student(self, student_id: str) -> int:
        raise NotImplementedError

    def count_by_status(self, student_id: str) -> Dict[AttendanceStatus, int]:
        """Counts per status; statuses with no rows may be missing."""

        raise NotImplementedError
