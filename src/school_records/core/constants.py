"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_ACADEMIC_YEAR = "2024-2025"
DEFAULT_MAX_SCORE = Decimal("100")
MIN_PASSWORD_LENGTH = 6

# (threshold, grade), highest first; first match wins.
GRADE_BANDS = (
    (Decimal("90"), "A+"),
    (Decimal("85"), "A"),
    (Decimal("80"), "A-"),
    (Decimal("75"), "B+"),
    (Decimal("70"), "B"),
    (Decimal("65"), "B-"),
    (Decimal("60"), "C+"),
    (Decimal("55"), "C"),
    (Decimal("50"), "C-"),
    (Decimal("45"), "D"),
)
FAILING_GRADE = "F"
