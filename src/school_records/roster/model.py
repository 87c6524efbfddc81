from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..classes.model import SchoolClass
from ..subjects.model import Subject
from ..users.model import User


@dataclass(frozen=True)
class Enrollment:
    enrollment_id: str
    student_id: str
    class_id: str
    enrolled_at: Optional[datetime] = None


@dataclass(frozen=True)
class TeachingAssignment:
    assignment_id: str
    teacher_id: str
    class_id: str
    subject_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EnrollmentView:
    enrollment: Enrollment
    student: User
    school_class: SchoolClass


@dataclass(frozen=True)
class AssignmentView:
    assignment: TeachingAssignment
    teacher: User
    school_class: SchoolClass
    subject: Optional[Subject]
    student_count: int
