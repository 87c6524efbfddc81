from __future__ import annotations

from typing import Optional, Sequence

import structlog

from ..classes.model import SchoolClass
from ..classes.repository import ClassRepository
from ..common.unit_of_work import UnitOfWork
from ..core.enums import Role
from ..core.exceptions import ConflictError, DuplicateKeyError, NotFoundError, RoleMismatchError
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from ..users.service import IdentityDirectory
from .model import AssignmentView, Enrollment, EnrollmentView, TeachingAssignment
from .repository import AssignmentRepository, EnrollmentRepository

logger = structlog.get_logger(__name__)


class RosterService:
    """Enrollments (student <-> class) and teaching assignments (teacher <-> class <-> subject).

    Both relations are unique on their natural key and require the linked user
    to hold the matching role at the time the link is created.
    """

    def __init__(
        self,
        directory: IdentityDirectory,
        classes: ClassRepository,
        subjects: SubjectRepository,
        enrollments: EnrollmentRepository,
        assignments: AssignmentRepository,
        uow: UnitOfWork,
    ):
        self._directory = directory
        self._classes = classes
        self._subjects = subjects
        self._enrollments = enrollments
        self._assignments = assignments
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

    def _enrollment_view(self, enrollment: Enrollment) -> EnrollmentView:
        return EnrollmentView(
            enrollment=enrollment,
            student=self._directory.resolve(enrollment.student_id, label="Student"),
            school_class=self._class(enrollment.class_id),
        )

    def _assignment_view(self, assignment: TeachingAssignment) -> AssignmentView:
        return AssignmentView(
            assignment=assignment,
            teacher=self._directory.resolve(assignment.teacher_id, label="Teacher"),
            school_class=self._class(assignment.class_id),
            subject=self._subject(assignment.subject_id) if assignment.subject_id else None,
            student_count=self._enrollments.count_by_class(assignment.class_id),
        )

    # ===== Enrollments =====

    def enroll(self, *, student_id: str, class_id: str) -> EnrollmentView:
        with self._uow.transaction():
            student = self._directory.resolve(student_id, label="Student")
            if self._directory.role_of(student) != Role.STUDENT:
                raise RoleMismatchError("User is not a student")

            self._class(class_id)

            if self._enrollments.find(student_id=student_id, class_id=class_id):
                raise ConflictError("Student is already enrolled in this class")
            try:
                enrollment_id = self._enrollments.create_enrollment(student_id=student_id, class_id=class_id)
            except DuplicateKeyError:
                raise ConflictError("Student is already enrolled in this class")

            view = self._enrollment_view(self._enrollments.get_by_id(enrollment_id))

        logger.info("roster.enrolled", enrollment_id=enrollment_id, student_id=student_id, class_id=class_id)
        return view

    def unenroll(self, enrollment_id: str) -> None:
        with self._uow.transaction():
            if not self._enrollments.delete_by_id(enrollment_id):
                raise NotFoundError("Student enrollment not found")
        logger.info("roster.unenrolled", enrollment_id=enrollment_id)

    def unenroll_student(self, *, student_id: str, class_id: str) -> None:
        with self._uow.transaction():
            enrollment = self._enrollments.find(student_id=student_id, class_id=class_id)
            if not enrollment:
                raise NotFoundError("Student enrollment not found")
            self._enrollments.delete_by_id(enrollment.enrollment_id)
        logger.info("roster.unenrolled", enrollment_id=enrollment.enrollment_id)

    def enrollments_for_student(self, student_id: str) -> Sequence[EnrollmentView]:
        return [self._enrollment_view(e) for e in self._enrollments.list_by_student(student_id)]

    def enrollments_for_class(self, class_id: str) -> Sequence[EnrollmentView]:
        return [self._enrollment_view(e) for e in self._enrollments.list_by_class(class_id)]

    # ===== Teaching assignments =====

    def assign(self, *, teacher_id: str, class_id: str, subject_id: Optional[str] = None) -> AssignmentView:
        with self._uow.transaction():
            teacher = self._directory.resolve(teacher_id, label="Teacher")
            if self._directory.role_of(teacher) != Role.TEACHER:
                raise RoleMismatchError("User is not a teacher")

            self._class(class_id)
            if subject_id:
                self._subject(subject_id)

            existing = self._assignments.find(teacher_id=teacher_id, class_id=class_id, subject_id=subject_id)
            if existing:
                raise ConflictError("Teacher is already assigned to this class and subject")
            try:
                assignment_id = self._assignments.create_assignment(
                    teacher_id=teacher_id,
                    class_id=class_id,
                    subject_id=subject_id,
                )
            except DuplicateKeyError:
                raise ConflictError("Teacher is already assigned to this class and subject")

            view = self._assignment_view(self._assignments.get_by_id(assignment_id))

        logger.info(
            "roster.assigned",
            assignment_id=assignment_id,
            teacher_id=teacher_id,
            class_id=class_id,
            subject_id=subject_id,
        )
        return view

    def remove_assignment(self, assignment_id: str) -> None:
        with self._uow.transaction():
            if not self._assignments.delete_by_id(assignment_id):
                raise NotFoundError("Teacher class assignment not found")
        logger.info("roster.assignment_removed", assignment_id=assignment_id)

    def assignments_for_teacher(self, teacher_id: str) -> Sequence[AssignmentView]:
        return [self._assignment_view(a) for a in self._assignments.list_by_teacher(teacher_id)]

    def assignments_for_class(self, class_id: str) -> Sequence[AssignmentView]:
        return [self._assignment_view(a) for a in self._assignments.list_by_class(class_id)]
