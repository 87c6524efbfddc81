from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

import structlog

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.unit_of_work import UnitOfWork
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateKeyError, NotFoundError
from ..users.model import User
from ..users.service import IdentityDirectory
from .model import AttendanceRecord, AttendanceStats, AttendanceView
from .repository import AttendanceRepository

logger = structlog.get_logger(__name__)

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class MarkAttendance:
    student_id: str
    class_id: str
    attendance_date: date
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class StudentStatus:
    """One line of a class-wide roll call (class and date shared by the batch)."""

    student_id: str
    status: AttendanceStatus
    notes: Optional[str] = None


def attendance_percentage(*, present: int, late: int, total: int) -> Decimal:
    """(present + late) / total * 100, half-up to 2 places; 0 when there are no records."""

    if total <= 0:
        return Decimal("0.00")
    return (Decimal(present + late) * 100 / Decimal(total)).quantize(_CENT, rounding=ROUND_HALF_UP)


class AttendanceService:
    """Attendance ledger: at most one status per (student, class, date).

    Marking is an upsert on that key, so re-marking the same day overwrites the
    earlier status instead of adding a row.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: IdentityDirectory,
        classes: ClassRepository,
        uow: UnitOfWork,
    ):
        self._attendance = attendance
        self._directory = directory
        self._classes = classes
        self._uow = uow

    def _class(self, class_id: str) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def _view(self, record: AttendanceRecord) -> AttendanceView:
        return AttendanceView(
            record=record,
            student=self._directory.resolve(record.student_id, label="Student"),
            school_class=self._class(record.class_id),
            marked_by=self._directory.find(record.marked_by),
        )

    def _upsert(
        self,
        *,
        student: User,
        school_class: SchoolClass,
        attendance_date: date,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: str,
    ) -> AttendanceView:
        key = dict(student_id=student.user_id, class_id=school_class.class_id, attendance_date=attendance_date)

        existing = self._attendance.get_for_key(**key)
        if existing is None:
            try:
                attendance_id = self._attendance.create_record(
                    **key, status=status, notes=notes, marked_by=marked_by
                )
            except DuplicateKeyError:
                # A concurrent mark committed the same key first; lock its row and take it over.
                existing = self._attendance.get_for_key(**key, for_update=True)
                if existing is None:
                    raise
                logger.warning("attendance.insert_race", attendance_id=existing.attendance_id, **key)
            else:
                logger.info("attendance.marked", attendance_id=attendance_id, status=status.value, **key)
                return self._view(self._attendance.get_by_id(attendance_id))

        self._attendance.update_record(existing.attendance_id, status=status, notes=notes, marked_by=marked_by)
        logger.info(
            "attendance.remarked",
            attendance_id=existing.attendance_id,
            previous=existing.status.value,
            status=status.value,
            **key,
        )
        return self._view(self._attendance.get_by_id(existing.attendance_id))

    def _mark(self, request: MarkAttendance, *, marked_by: str) -> AttendanceView:
        student = self._directory.resolve(request.student_id, label="Student")
        school_class = self._class(request.class_id)
        return self._upsert(
            student=student,
            school_class=school_class,
            attendance_date=request.attendance_date,
            status=request.status,
            notes=request.notes,
            marked_by=marked_by,
        )

    def mark(self, request: MarkAttendance, *, marked_by: str) -> AttendanceView:
        with self._uow.transaction():
            return self._mark(request, marked_by=marked_by)

    def mark_bulk(self, requests: Sequence[MarkAttendance], *, marked_by: str) -> List[AttendanceView]:
        """Mark every request in order as one unit; any failure discards the whole batch."""

        with self._uow.transaction():
            views = [self._mark(r, marked_by=marked_by) for r in requests]
        logger.info("attendance.bulk_marked", count=len(views))
        return views

    def mark_class(
        self,
        *,
        class_id: str,
        attendance_date: date,
        entries: Sequence[StudentStatus],
        marked_by: str,
    ) -> List[AttendanceView]:
        """Roll call for one class and date, all-or-nothing."""

        with self._uow.transaction():
            school_class = self._class(class_id)
            views = []
            for entry in entries:
                student = self._directory.find(entry.student_id)
                if not student:
                    raise NotFoundError(f"Student not found: {entry.student_id}")
                views.append(
                    self._upsert(
                        student=student,
                        school_class=school_class,
                        attendance_date=attendance_date,
                        status=entry.status,
                        notes=entry.notes,
                        marked_by=marked_by,
                    )
                )
        logger.info("attendance.bulk_marked", class_id=class_id, attendance_date=attendance_date, count=len(views))
        return views

    def delete(self, attendance_id: str) -> None:
        with self._uow.transaction():
            if not self._attendance.delete_by_id(attendance_id):
                raise NotFoundError("Attendance record not found")
        logger.info("attendance.deleted", attendance_id=attendance_id)

    def history_for_student(self, student_id: str) -> Sequence[AttendanceView]:
        return [self._view(r) for r in self._attendance.list_by_student(student_id)]

    def class_on_date(self, class_id: str, attendance_date: date) -> Sequence[AttendanceView]:
        return [self._view(r) for r in self._attendance.list_by_class_and_date(class_id, attendance_date)]

    def stats_for_student(self, student_id: str) -> AttendanceStats:
        total = self._attendance.count_for_student(student_id)
        counts = self._attendance.count_by_status(student_id)

        present = counts.get(AttendanceStatus.PRESENT, 0)
        late = counts.get(AttendanceStatus.LATE, 0)
        return AttendanceStats(
            student_id=student_id,
            total_days=total,
            present_days=present,
            absent_days=counts.get(AttendanceStatus.ABSENT, 0),
            late_days=late,
            excused_days=counts.get(AttendanceStatus.EXCUSED, 0),
            attendance_percentage=attendance_percentage(present=present, late=late, total=total),
        )
