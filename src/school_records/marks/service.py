from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

import structlog

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.datetime_utils import today_local
from ..common.unit_of_work import UnitOfWork
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_MAX_SCORE
from ..core.exceptions import NotFoundError
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from ..users.service import IdentityDirectory
from .grading import round_average
from .model import MarkRecord, MarkView
from .repository import MarkRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NewMark:
    student_id: str
    class_id: str
    subject_id: str
    exam_type: str
    score: Decimal
    max_score: Optional[Decimal] = None
    exam_date: Optional[date] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class MarkChanges:
    """Update payload. ``None`` on an optional field keeps the stored value."""

    exam_type: str
    score: Decimal
    max_score: Optional[Decimal] = None
    exam_date: Optional[date] = None
    notes: Optional[str] = None


class MarkService:
    """Mark ledger. Every add is a new row; marks are never merged by key."""

    def __init__(
        self,
        marks: MarkRepository,
        directory: IdentityDirectory,
        classes: ClassRepository,
        subjects: SubjectRepository,
        uow: UnitOfWork,
    ):
        self._marks = marks
        self._directory = directory
        self._classes = classes
        self._subjects = subjects
        self._uow = uow

    def _class(self, class_id: str) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def _subject(self, subject_id: str) -> Subject:
        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def _resolve(self, mark_id: str) -> MarkRecord:
        mark = self._marks.get_by_id(mark_id)
        if not mark:
            raise NotFoundError("Mark not found")
        return mark

    def _view(self, mark: MarkRecord) -> MarkView:
        return MarkView(
            mark=mark,
            student=self._directory.resolve(mark.student_id, label="Student"),
            school_class=self._class(mark.class_id),
            subject=self._subject(mark.subject_id),
            graded_by=self._directory.find(mark.graded_by),
        )

    def add(self, new: NewMark, *, graded_by: str) -> MarkView:
        exam_type = require_non_empty(new.exam_type, "Exam type")

        with self._uow.transaction():
            self._directory.resolve(new.student_id, label="Student")
            self._class(new.class_id)
            self._subject(new.subject_id)

            mark_id = self._marks.create_mark(
                student_id=new.student_id,
                class_id=new.class_id,
                subject_id=new.subject_id,
                exam_type=exam_type,
                score=new.score,
                max_score=new.max_score if new.max_score is not None else DEFAULT_MAX_SCORE,
                exam_date=new.exam_date or today_local(),
                notes=new.notes,
                graded_by=graded_by,
            )
            view = self._view(self._resolve(mark_id))

        logger.info(
            "mark.added",
            mark_id=mark_id,
            student_id=new.student_id,
            class_id=new.class_id,
            subject_id=new.subject_id,
            exam_type=exam_type,
        )
        return view

    def add_bulk(self, items: Sequence[NewMark], *, graded_by: str) -> List[MarkView]:
        """Add each mark in its own transaction.

        A failing item stops the loop; the items before it stay stored.
        """

        return [self.add(item, graded_by=graded_by) for item in items]

    def update(self, mark_id: str, changes: MarkChanges, *, graded_by: str) -> MarkView:
        exam_type = require_non_empty(changes.exam_type, "Exam type")

        with self._uow.transaction():
            current = self._resolve(mark_id)
            self._marks.update_mark(
                mark_id,
                exam_type=exam_type,
                score=changes.score,
                max_score=changes.max_score if changes.max_score is not None else current.max_score,
                exam_date=changes.exam_date or current.exam_date,
                notes=changes.notes if changes.notes is not None else current.notes,
                graded_by=graded_by,
            )
            view = self._view(self._resolve(mark_id))

        logger.info("mark.updated", mark_id=mark_id, graded_by=graded_by)
        return view

    def delete(self, mark_id: str) -> None:
        with self._uow.transaction():
            if not self._marks.delete_by_id(mark_id):
                raise NotFoundError("Mark not found")
        logger.info("mark.deleted", mark_id=mark_id)

    def marks_for_student(self, student_id: str) -> Sequence[MarkView]:
        return [self._view(m) for m in self._marks.list_by_student(student_id)]

    def marks_for_class_subject(self, class_id: str, subject_id: str) -> Sequence[MarkView]:
        return [self._view(m) for m in self._marks.list_by_class_and_subject(class_id, subject_id)]

    def student_average(self, student_id: str) -> Optional[Decimal]:
        return round_average(self._marks.average_for_student(student_id))

    def class_subject_average(self, class_id: str, subject_id: str) -> Optional[Decimal]:
        return round_average(self._marks.average_for_class_and_subject(class_id, subject_id))
