from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Subject


class SubjectRepository(Protocol):
    def get_by_id(self, subject_id: str) -> Optional[Subject]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Subject]:
        raise NotImplementedError

    def create_subject(self, *, name: str, code: Optional[str] = None, description: Optional[str] = None) -> str:
        raise NotImplementedError

    def update_subject(self, subject_id: str, *, name: str, code: Optional[str], description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, subject_id: str) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Subject]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
