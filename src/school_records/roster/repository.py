from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Enrollment, TeachingAssignment


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        raise NotImplementedError

    def find(self, *, student_id: str, class_id: str) -> Optional[Enrollment]:
        raise NotImplementedError

    def create_enrollment(self, *, student_id: str, class_id: str) -> str:
        raise NotImplementedError

    def delete_by_id(self, enrollment_id: str) -> bool:
        raise NotImplementedError

    def list_by_student(self, student_id: str) -> Sequence[Enrollment]:
        raise NotImplementedError

    def list_by_class(self, class_id: str) -> Sequence[Enrollment]:
        raise NotImplementedError

    def count_by_class(self, class_id: str) -> int:
        raise NotImplementedError


class AssignmentRepository(Protocol):
    def get_by_id(self, assignment_id: str) -> Optional[TeachingAssignment]:
        raise NotImplementedError

    def find(self, *, teacher_id: str, class_id: str, subject_id: Optional[str]) -> Optional[TeachingAssignment]:
        """Exact triple match; ``subject_id=None`` only matches general assignments."""

        raise NotImplementedError

    def create_assignment(self, *, teacher_id: str, class_id: str, subject_id: Optional[str]) -> str:
        raise NotImplementedError

    def delete_by_id(self, assignment_id: str) -> bool:
        raise NotImplementedError

    def list_by_teacher(self, teacher_id: str) -> Sequence[TeachingAssignment]:
        raise NotImplementedError

    def list_by_class(self, class_id: str) -> Sequence[TeachingAssignment]:
        raise NotImplementedError
