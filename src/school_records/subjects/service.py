from __future__ import annotations

from typing import Optional, Sequence

import structlog

from ..common.unit_of_work import UnitOfWork
from ..common.validators import require_non_empty
from ..core.exceptions import ConflictError, DuplicateKeyError, NotFoundError
from .model import Subject
from .repository import SubjectRepository

logger = structlog.get_logger(__name__)


def _normalize_code(code: Optional[str]) -> Optional[str]:
    """Blank codes are stored as NULL, which the unique index ignores."""
    return (code or "").strip() or None


class SubjectService:
    def __init__(self, subjects: SubjectRepository, uow: UnitOfWork):
        self._subjects = subjects
        self._uow = uow

    def resolve(self, subject_id: str) -> Subject:
        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Subject not found")
        return subject

    def list_subjects(self) -> Sequence[Subject]:
        return self._subjects.list_all()

    def create_subject(self, *, name: str, code: Optional[str] = None, description: Optional[str] = None) -> Subject:
        name = require_non_empty(name, "Subject name")
        code = _normalize_code(code)

        with self._uow.transaction():
            if code and self._subjects.get_by_code(code):
                raise ConflictError("Subject with this code already exists")
            try:
                subject_id = self._subjects.create_subject(name=name, code=code, description=description)
            except DuplicateKeyError:
                raise ConflictError("Subject with this code already exists")
            subject = self.resolve(subject_id)

        logger.info("subject.created", subject_id=subject_id, code=code)
        return subject

    def update_subject(
        self,
        subject_id: str,
        *,
        name: str,
        code: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Subject:
        name = require_non_empty(name, "Subject name")
        code = _normalize_code(code)

        with self._uow.transaction():
            self.resolve(subject_id)
            if code:
                clash = self._subjects.get_by_code(code)
                if clash and clash.subject_id != subject_id:
                    raise ConflictError("Subject with this code already exists")
            try:
                self._subjects.update_subject(subject_id, name=name, code=code, description=description)
            except DuplicateKeyError:
                raise ConflictError("Subject with this code already exists")
            return self.resolve(subject_id)

    def delete_subject(self, subject_id: str) -> None:
        with self._uow.transaction():
            if not self._subjects.delete_by_id(subject_id):
                raise NotFoundError("Subject not found")
        logger.info("subject.deleted", subject_id=subject_id)
