from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    class_id: str
    name: str
    academic_year: str
    description: Optional[str] = None
    grade_level: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class ClassView:
    school_class: SchoolClass
    student_count: int
