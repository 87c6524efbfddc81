from __future__ import annotations

from typing import Optional, Sequence

import structlog

from ..common.unit_of_work import UnitOfWork
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ACADEMIC_YEAR
from ..core.exceptions import ConflictError, DuplicateKeyError, NotFoundError
from ..roster.repository import EnrollmentRepository
from .model import ClassView, SchoolClass
from .repository import ClassRepository

logger = structlog.get_logger(__name__)


class ClassService:
    def __init__(
        self,
        classes: ClassRepository,
        enrollments: EnrollmentRepository,
        uow: UnitOfWork,
        *,
        default_academic_year: str = DEFAULT_ACADEMIC_YEAR,
    ):
        self._classes = classes
        self._enrollments = enrollments
        self._uow = uow
        self._default_academic_year = default_academic_year

    def _view(self, school_class: SchoolClass) -> ClassView:
        return ClassView(
            school_class=school_class,
            student_count=self._enrollments.count_by_class(school_class.class_id),
        )

    def resolve(self, class_id: str) -> SchoolClass:
        school_class = self._classes.get_by_id(class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class

    def list_classes(self) -> Sequence[ClassView]:
        return [self._view(c) for c in self._classes.list_all()]

    def get_class(self, class_id: str) -> ClassView:
        return self._view(self.resolve(class_id))

    def create_class(
        self,
        *,
        name: str,
        description: Optional[str] = None,
        grade_level: Optional[str] = None,
        academic_year: Optional[str] = None,
    ) -> ClassView:
        name = require_non_empty(name, "Class name")
        academic_year = (academic_year or "").strip() or self._default_academic_year

        with self._uow.transaction():
            if self._classes.get_by_name_and_year(name, academic_year):
                raise ConflictError("Class with this name already exists for this academic year")
            try:
                class_id = self._classes.create_class(
                    name=name,
                    academic_year=academic_year,
                    description=description,
                    grade_level=grade_level,
                )
            except DuplicateKeyError:
                raise ConflictError("Class with this name already exists for this academic year")
            view = self._view(self.resolve(class_id))

        logger.info("class.created", class_id=class_id, name=name, academic_year=academic_year)
        return view

    def update_class(
        self,
        class_id: str,
        *,
        name: str,
        description: Optional[str] = None,
        grade_level: Optional[str] = None,
        academic_year: Optional[str] = None,
    ) -> ClassView:
        name = require_non_empty(name, "Class name")

        with self._uow.transaction():
            current = self.resolve(class_id)
            year = (academic_year or "").strip() or current.academic_year

            clash = self._classes.get_by_name_and_year(name, year)
            if clash and clash.class_id != class_id:
                raise ConflictError("Class with this name already exists for this academic year")

            try:
                self._classes.update_class(
                    class_id,
                    name=name,
                    academic_year=year,
                    description=description,
                    grade_level=grade_level,
                )
            except DuplicateKeyError:
                raise ConflictError("Class with this name already exists for this academic year")
            return self._view(self.resolve(class_id))

    def delete_class(self, class_id: str) -> None:
        with self._uow.transaction():
            if not self._classes.delete_by_id(class_id):
                raise NotFoundError("Class not found")
        logger.info("class.deleted", class_id=class_id)
