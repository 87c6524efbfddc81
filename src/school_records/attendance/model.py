from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..classes.model import SchoolClass
from ..core.enums import AttendanceStatus
from ..users.model import User


@dataclass(frozen=True)
class AttendanceRecord:
    attendance_id: str
    student_id: str
    class_id: str
    attendance_date: date
    status: AttendanceStatus
    notes: Optional[str] = None
    marked_by: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceView:
    record: AttendanceRecord
    student: User
    school_class: SchoolClass
    marked_by: Optional[User] = None


@dataclass(frozen=True)
class AttendanceStats:
    student_id: str
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: Decimal
