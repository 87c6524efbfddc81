from __future__ import annotations

from dataclasses import dataclass

from ..classes.repository import ClassRepository
from ..core.enums import Role
from ..subjects.repository import SubjectRepository
from ..users.repository import UserRepository


@dataclass(frozen=True)
class DashboardStats:
    total_students: int
    total_teachers: int
    total_classes: int
    total_subjects: int


class DashboardService:
    def __init__(self, users: UserRepository, classes: ClassRepository, subjects: SubjectRepository):
        self._users = users
        self._classes = classes
        self._subjects = subjects

    def stats(self) -> DashboardStats:
        return DashboardStats(
            total_students=self._users.count_by_role(Role.STUDENT),
            total_teachers=self._users.count_by_role(Role.TEACHER),
            total_classes=self._classes.count_all(),
            total_subjects=self._subjects.count_all(),
        )
