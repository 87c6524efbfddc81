from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from school_records.attendance.model import AttendanceRecord
from school_records.classes.model import SchoolClass
from school_records.common.identifiers import new_id
from school_records.container import Container, wire
from school_records.core.enums import Role
from school_records.core.exceptions import DuplicateKeyError
from school_records.marks.model import MarkRecord
from school_records.roster.model import Enrollment, TeachingAssignment
from school_records.subjects.model import Subject
from school_records.users.model import User

_EPOCH = datetime(2024, 9, 1, 8, 0, 0)


class _Clock:
    def __init__(self):
        self._tick = 0

    def next(self) -> datetime:
        self._tick += 1
        return _EPOCH + timedelta(seconds=self._tick)


class InMemoryUnitOfWork:
    """Snapshots every store on entry and restores them if the block raises."""

    def __init__(self, *stores):
        self._stores = list(stores)
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self):
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = [copy.deepcopy(s.rows) for s in self._stores]
        self._depth = 1
        try:
            yield
        except BaseException:
            for store, rows in zip(self._stores, snapshot):
                store.rows = rows
            self.rollbacks += 1
            raise
        else:
            self.commits += 1
        finally:
            self._depth = 0


class InMemoryUsers:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, User] = {}

    def get_by_id(self, user_id):
        return self.rows.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.rows.values() if u.email == email), None)

    def create_user(self, *, email, password_hash, full_name, role, phone=None):
        if self.get_by_email(email):
            raise DuplicateKeyError(email)
        user_id = new_id()
        now = self._clock.next()
        self.rows[user_id] = User(
            user_id=user_id,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
        return user_id

    def update_profile(self, user_id, *, full_name, phone):
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], full_name=full_name, phone=phone)
        return True

    def set_active(self, user_id, *, is_active):
        if user_id not in self.rows:
            return False
        self.rows[user_id] = replace(self.rows[user_id], is_active=is_active)
        return True

    def delete_by_id(self, user_id):
        return self.rows.pop(user_id, None) is not None

    def list_all(self):
        return sorted(self.rows.values(), key=lambda u: u.created_at, reverse=True)

    def list_by_role(self, role):
        return sorted((u for u in self.rows.values() if u.role == role), key=lambda u: u.full_name)

    def count_by_role(self, role):
        return sum(1 for u in self.rows.values() if u.role == role)


class InMemoryClasses:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, SchoolClass] = {}

    def get_by_id(self, class_id):
        return self.rows.get(class_id)

    def get_by_name_and_year(self, name, academic_year):
        return next(
            (c for c in self.rows.values() if c.name == name and c.academic_year == academic_year),
            None,
        )

    def create_class(self, *, name, academic_year, description=None, grade_level=None):
        if self.get_by_name_and_year(name, academic_year):
            raise DuplicateKeyError(name)
        class_id = new_id()
        now = self._clock.next()
        self.rows[class_id] = SchoolClass(
            class_id=class_id,
            name=name,
            academic_year=academic_year,
            description=description,
            grade_level=grade_level,
            created_at=now,
            updated_at=now,
        )
        return class_id

    def update_class(self, class_id, *, name, academic_year, description, grade_level):
        if class_id not in self.rows:
            return False
        clash = self.get_by_name_and_year(name, academic_year)
        if clash and clash.class_id != class_id:
            raise DuplicateKeyError(name)
        self.rows[class_id] = replace(
            self.rows[class_id],
            name=name,
            academic_year=academic_year,
            description=description,
            grade_level=grade_level,
            updated_at=self._clock.next(),
        )
        return True

    def delete_by_id(self, class_id):
        return self.rows.pop(class_id, None) is not None

    def list_all(self):
        return sorted(self.rows.values(), key=lambda c: c.name)

    def count_all(self):
        return len(self.rows)


class InMemorySubjects:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, Subject] = {}

    def get_by_id(self, subject_id):
        return self.rows.get(subject_id)

    def get_by_code(self, code):
        return next((s for s in self.rows.values() if s.code == code), None)

    def create_subject(self, *, name, code=None, description=None):
        if code and self.get_by_code(code):
            raise DuplicateKeyError(code)
        subject_id = new_id()
        self.rows[subject_id] = Subject(
            subject_id=subject_id,
            name=name,
            code=code,
            description=description,
            created_at=self._clock.next(),
        )
        return subject_id

    def update_subject(self, subject_id, *, name, code, description):
        if subject_id not in self.rows:
            return False
        clash = self.get_by_code(code) if code else None
        if clash and clash.subject_id != subject_id:
            raise DuplicateKeyError(code)
        self.rows[subject_id] = replace(self.rows[subject_id], name=name, code=code, description=description)
        return True

    def delete_by_id(self, subject_id):
        return self.rows.pop(subject_id, None) is not None

    def list_all(self):
        return sorted(self.rows.values(), key=lambda s: s.name)

    def count_all(self):
        return len(self.rows)


class InMemoryEnrollments:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, Enrollment] = {}

    def get_by_id(self, enrollment_id):
        return self.rows.get(enrollment_id)

    def find(self, *, student_id, class_id):
        return next(
            (e for e in self.rows.values() if e.student_id == student_id and e.class_id == class_id),
            None,
        )

    def create_enrollment(self, *, student_id, class_id):
        if self.find(student_id=student_id, class_id=class_id):
            raise DuplicateKeyError(f"{student_id}/{class_id}")
        enrollment_id = new_id()
        self.rows[enrollment_id] = Enrollment(
            enrollment_id=enrollment_id,
            student_id=student_id,
            class_id=class_id,
            enrolled_at=self._clock.next(),
        )
        return enrollment_id

    def delete_by_id(self, enrollment_id):
        return self.rows.pop(enrollment_id, None) is not None

    def list_by_student(self, student_id):
        return [e for e in self.rows.values() if e.student_id == student_id]

    def list_by_class(self, class_id):
        return [e for e in self.rows.values() if e.class_id == class_id]

    def count_by_class(self, class_id):
        return len(self.list_by_class(class_id))


class InMemoryAssignments:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, TeachingAssignment] = {}

    def get_by_id(self, assignment_id):
        return self.rows.get(assignment_id)

    def find(self, *, teacher_id, class_id, subject_id):
        return next(
            (
                a
                for a in self.rows.values()
                if a.teacher_id == teacher_id and a.class_id == class_id and a.subject_id == subject_id
            ),
            None,
        )

    def create_assignment(self, *, teacher_id, class_id, subject_id):
        if self.find(teacher_id=teacher_id, class_id=class_id, subject_id=subject_id):
            raise DuplicateKeyError(f"{teacher_id}/{class_id}/{subject_id}")
        assignment_id = new_id()
        self.rows[assignment_id] = TeachingAssignment(
            assignment_id=assignment_id,
            teacher_id=teacher_id,
            class_id=class_id,
            subject_id=subject_id,
            created_at=self._clock.next(),
        )
        return assignment_id

    def delete_by_id(self, assignment_id):
        return self.rows.pop(assignment_id, None) is not None

    def list_by_teacher(self, teacher_id):
        return [a for a in self.rows.values() if a.teacher_id == teacher_id]

    def list_by_class(self, class_id):
        return [a for a in self.rows.values() if a.class_id == class_id]


class InMemoryAttendance:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, AttendanceRecord] = {}

    def get_by_id(self, attendance_id):
        return self.rows.get(attendance_id)

    def get_for_key(self, *, student_id, class_id, attendance_date, for_update=False):
        return self._find(student_id, class_id, attendance_date)

    def _find(self, student_id, class_id, attendance_date):
        return next(
            (
                r
                for r in self.rows.values()
                if (r.student_id, r.class_id, r.attendance_date) == (student_id, class_id, attendance_date)
            ),
            None,
        )

    def create_record(self, *, student_id, class_id, attendance_date, status, notes, marked_by):
        if self._find(student_id, class_id, attendance_date):
            raise DuplicateKeyError(f"{student_id}/{class_id}/{attendance_date}")
        attendance_id = new_id()
        self.rows[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student_id,
            class_id=class_id,
            attendance_date=attendance_date,
            status=status,
            notes=notes,
            marked_by=marked_by,
            created_at=self._clock.next(),
        )
        return attendance_id

    def update_record(self, attendance_id, *, status, notes, marked_by):
        if attendance_id not in self.rows:
            return False
        self.rows[attendance_id] = replace(self.rows[attendance_id], status=status, notes=notes, marked_by=marked_by)
        return True

    def delete_by_id(self, attendance_id):
        return self.rows.pop(attendance_id, None) is not None

    def list_by_student(self, student_id):
        items = [r for r in self.rows.values() if r.student_id == student_id]
        return sorted(items, key=lambda r: (r.attendance_date, r.created_at), reverse=True)

    def list_by_class_and_date(self, class_id, attendance_date):
        return [r for r in self.rows.values() if r.class_id == class_id and r.attendance_date == attendance_date]

    def count_for_student(self, student_id):
        return sum(1 for r in self.rows.values() if r.student_id == student_id)

    def count_by_status(self, student_id):
        counts = {}
        for r in self.rows.values():
            if r.student_id == student_id:
                counts[r.status] = counts.get(r.status, 0) + 1
        return counts


class InMemoryMarks:
    def __init__(self, clock: _Clock):
        self._clock = clock
        self.rows: dict[str, MarkRecord] = {}

    def get_by_id(self, mark_id):
        return self.rows.get(mark_id)

    def create_mark(
        self, *, student_id, class_id, subject_id, exam_type, score, max_score, exam_date, notes, graded_by
    ):
        mark_id = new_id()
        self.rows[mark_id] = MarkRecord(
            mark_id=mark_id,
            student_id=student_id,
            class_id=class_id,
            subject_id=subject_id,
            exam_type=exam_type,
            score=Decimal(score),
            max_score=Decimal(max_score),
            exam_date=exam_date,
            notes=notes,
            graded_by=graded_by,
            created_at=self._clock.next(),
        )
        return mark_id

    def update_mark(self, mark_id, *, exam_type, score, max_score, exam_date, notes, graded_by):
        if mark_id not in self.rows:
            return False
        self.rows[mark_id] = replace(
            self.rows[mark_id],
            exam_type=exam_type,
            score=Decimal(score),
            max_score=Decimal(max_score),
            exam_date=exam_date,
            notes=notes,
            graded_by=graded_by,
        )
        return True

    def delete_by_id(self, mark_id):
        return self.rows.pop(mark_id, None) is not None

    def list_by_student(self, student_id):
        items = [m for m in self.rows.values() if m.student_id == student_id]
        return sorted(items, key=lambda m: (m.exam_date, m.created_at), reverse=True)

    def list_by_class_and_subject(self, class_id, subject_id):
        return [m for m in self.rows.values() if m.class_id == class_id and m.subject_id == subject_id]

    @staticmethod
    def _average(marks) -> Optional[Decimal]:
        marks = list(marks)
        if not marks:
            return None
        return sum((m.score * 100 / m.max_score for m in marks), Decimal(0)) / len(marks)

    def average_for_student(self, student_id):
        return self._average(m for m in self.rows.values() if m.student_id == student_id)

    def average_for_class_and_subject(self, class_id, subject_id):
        return self._average(
            m for m in self.rows.values() if m.class_id == class_id and m.subject_id == subject_id
        )


@dataclass
class Store:
    uow: InMemoryUnitOfWork
    users: InMemoryUsers
    classes: InMemoryClasses
    subjects: InMemorySubjects
    enrollments: InMemoryEnrollments
    assignments: InMemoryAssignments
    attendance: InMemoryAttendance
    marks: InMemoryMarks

    def add_user(self, full_name: str, role: Role, *, email: Optional[str] = None, password: str = "secret1") -> User:
        email = email or f"{full_name.lower().replace(' ', '.')}@school.local"
        user_id = self.users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            full_name=full_name,
            role=role,
        )
        return self.users.get_by_id(user_id)

    def add_class(self, name: str, academic_year: str = "2024-2025") -> SchoolClass:
        return self.classes.get_by_id(self.classes.create_class(name=name, academic_year=academic_year))

    def add_subject(self, name: str, code: Optional[str] = None) -> Subject:
        return self.subjects.get_by_id(self.subjects.create_subject(name=name, code=code))


@pytest.fixture
def store() -> Store:
    clock = _Clock()
    users = InMemoryUsers(clock)
    classes = InMemoryClasses(clock)
    subjects = InMemorySubjects(clock)
    enrollments = InMemoryEnrollments(clock)
    assignments = InMemoryAssignments(clock)
    attendance = InMemoryAttendance(clock)
    marks = InMemoryMarks(clock)
    uow = InMemoryUnitOfWork(users, classes, subjects, enrollments, assignments, attendance, marks)
    return Store(
        uow=uow,
        users=users,
        classes=classes,
        subjects=subjects,
        enrollments=enrollments,
        assignments=assignments,
        attendance=attendance,
        marks=marks,
    )


@pytest.fixture
def container(store: Store) -> Container:
    return wire(
        uow=store.uow,
        users_repo=store.users,
        classes_repo=store.classes,
        subjects_repo=store.subjects,
        enrollments_repo=store.enrollments,
        assignments_repo=store.assignments,
        attendance_repo=store.attendance,
        marks_repo=store.marks,
    )


@pytest.fixture
def fixed_now(monkeypatch) -> datetime:
    now = datetime(2024, 9, 15, 9, 30, 0)
    monkeypatch.setattr("school_records.marks.service.today_local", lambda: now.date())
    return now


@pytest.fixture
def school_day() -> date:
    return date(2024, 9, 1)
