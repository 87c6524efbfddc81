from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..classes.model import SchoolClass
from ..subjects.model import Subject
from ..users.model import User
from .grading import letter_grade, percentage


@dataclass(frozen=True)
class MarkRecord:
    mark_id: str
    student_id: str
    class_id: str
    subject_id: str
    exam_type: str
    score: Decimal
    max_score: Decimal
    exam_date: date
    notes: Optional[str] = None
    graded_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def percentage(self) -> Decimal:
        return percentage(self.score, self.max_score)

    @property
    def grade(self) -> str:
        return letter_grade(self.percentage)


@dataclass(frozen=True)
class MarkView:
    mark: MarkRecord
    student: User
    school_class: SchoolClass
    subject: Subject
    graded_by: Optional[User] = None
