from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import MarkRecord


class MarkRepository(Protocol):
    def get_by_id(self, mark_id: str) -> Optional[MarkRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def delete_by_id(self, mark_id: str) -> bool:
        raise NotImplementedError

    def list_by_student(self, student_id: str) -> Sequence[MarkRecord]:
        """Newest exam first."""

        raise NotImplementedError

    def list_by_class_and_subject(self, class_id: str, subject_id: str) -> Sequence[MarkRecord]:
        raise NotImplementedError

    def average_for_student(self, student_id: str) -> Optional[Decimal]:
        """Mean of score * 100 / max_score over the student's marks, unrounded; None if there are none."""

        raise NotImplementedError

    def average_for_class_and_subject(self, class_id: str, subject_id: str) -> Optional[Decimal]:
        raise NotImplementedError
