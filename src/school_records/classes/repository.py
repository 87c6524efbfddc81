from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def get_by_name_and_year(self, name: str, academic_year: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def create_class(
        self,
        *,
        name: str,
        academic_year: str,
        description: Optional[str] = None,
        grade_level: Optional[str] = None,
    ) -> str:
        raise NotImplementedError

    def update_class(
        self,
        class_id: str,
        *,
        name: str,
        academic_year: str,
        description: Optional[str],
        grade_level: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, class_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        """Classes ordered by name."""

        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
