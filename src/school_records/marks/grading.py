"""Percentage and letter grade for a single mark.

Both are derived on read and never stored.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.constants import FAILING_GRADE, GRADE_BANDS

_CENT = Decimal("0.01")


def round_percentage(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def percentage(score: Decimal, max_score: Decimal) -> Decimal:
    """score / max_score * 100, rounded half-up to 2 places."""

    return round_percentage(Decimal(score) * 100 / Decimal(max_score))


def letter_grade(pct: Decimal) -> str:
    for threshold, grade in GRADE_BANDS:
        if pct >= threshold:
            return grade
    return FAILING_GRADE


def round_average(value: Optional[Decimal]) -> Optional[Decimal]:
    # None means "no marks", which is not the same as an average of zero.
    if value is None:
        return None
    return round_percentage(Decimal(value))
