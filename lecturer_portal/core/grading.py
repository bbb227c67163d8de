"""
Grading engine: totals, letter grades and grade points.

Grade scale (inclusive integer ranges, highest first)::

    A   90 - 100      C+  74 - 76
    A-  87 - 89       C   70 - 73
    B+  84 - 86       C-  67 - 69
    B   80 - 83       D+  64 - 66
    B-  77 - 79       D   62 - 63
                      D-  60 - 61
                      F    0 - 59

Totals are not always integers, so each range extends up to (but excluding)
the next range's minimum: 89.5 is an A-, 59.99 is an F. Only the top range
is closed at 100.

Rounding uses ROUND_HALF_UP on the decimal representation of each component,
so ``82.005`` becomes ``82.01`` regardless of binary float artefacts.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Union

from .enums import (
    AssessmentComponent, Grade, GRADE_POINTS, MAX_TOTAL_MARKS, MIN_PASSING_SCORE
)
from .exceptions import GradeBoundaryError


Number = Union[int, float, Decimal]


class GradeBoundary(NamedTuple):
    """Score range for one letter grade."""
    grade: Grade
    min_score: int
    max_score: int

    def contains(self, score: float) -> bool:
        """Check whether a (clamped) score falls into this boundary."""
        if self.max_score >= MAX_TOTAL_MARKS:
            return self.min_score <= score <= self.max_score
        return self.min_score <= score < self.max_score + 1


GRADE_BOUNDARIES: Sequence[GradeBoundary] = (
    GradeBoundary(Grade.A, 90, 100),
    GradeBoundary(Grade.A_MINUS, 87, 89),
    GradeBoundary(Grade.B_PLUS, 84, 86),
    GradeBoundary(Grade.B, 80, 83),
    GradeBoundary(Grade.B_MINUS, 77, 79),
    GradeBoundary(Grade.C_PLUS, 74, 76),
    GradeBoundary(Grade.C, 70, 73),
    GradeBoundary(Grade.C_MINUS, 67, 69),
    GradeBoundary(Grade.D_PLUS, 64, 66),
    GradeBoundary(Grade.D, 62, 63),
    GradeBoundary(Grade.D_MINUS, 60, 61),
    GradeBoundary(Grade.F, 0, 59),
)


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal through its shortest string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number, places: int = 2) -> float:
    """Round to ``places`` decimals with halves rounded away from zero."""
    amount = to_decimal(value)
    if not amount.is_finite():
        return float(amount)
    return float(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def component_value(scores: Any, component: AssessmentComponent) -> Number:
    """Read one component score from a scores object."""
    return getattr(scores, component.value)


def compute_total(scores: Any) -> float:
    """Sum the five component scores, rounded to 2 decimal places.

    No range checking happens here; out-of-range input is summed as given.
    Scores of 8, 12, 20, 18 and 25 give 83.0.
    """
    total = sum(
        (to_decimal(component_value(scores, component)) for component in AssessmentComponent),
        Decimal(0),
    )
    return round_half_up(total)


def _clamp(total: Number) -> float:
    # NaN compares false both ways and is left as is
    score = float(total)
    if score < 0:
        return 0.0
    if score > MAX_TOTAL_MARKS:
        return float(MAX_TOTAL_MARKS)
    return score


def compute_grade(total: Number) -> Grade:
    """Map a total score to its letter grade, clamping into [0, 100].

    Raises:
        GradeBoundaryError: if no boundary contains the score (e.g. NaN).
    """
    score = _clamp(total)
    for boundary in GRADE_BOUNDARIES:
        if boundary.contains(score):
            return boundary.grade
    raise GradeBoundaryError(
        f"Score {total!r} is not covered by any grade boundary",
        error_code="GRADE_BOUNDARY",
        details={"total": total},
    )


def grade_boundary(grade: Grade) -> Optional[GradeBoundary]:
    """Get the boundary for a grade."""
    for boundary in GRADE_BOUNDARIES:
        if boundary.grade == grade:
            return boundary
    return None


def is_passing(grade: Grade) -> bool:
    """Check if a grade is passing (D- or better)."""
    return grade != Grade.F


def is_passing_score(total: Number) -> bool:
    """Check if a total score is passing."""
    return float(total) >= MIN_PASSING_SCORE


def grade_points(grade: Grade) -> float:
    """Get grade points on the 4.0 scale."""
    return GRADE_POINTS[grade]


def grade_point_average(grades: Iterable[Grade]) -> float:
    """Unweighted mean of grade points, 0.0 for no grades."""
    points: List[Decimal] = [to_decimal(grade_points(grade)) for grade in grades]
    if not points:
        return 0.0
    return round_half_up(sum(points, Decimal(0)) / len(points))


def compare_grades(first: Grade, second: Grade) -> int:
    """Positive if ``first`` is the better grade, negative if worse, 0 if equal."""
    first_boundary = grade_boundary(first)
    second_boundary = grade_boundary(second)
    if first_boundary is None or second_boundary is None:
        return 0
    return first_boundary.min_score - second_boundary.min_score


def calculate_percentage(score: Number, max_score: Number = MAX_TOTAL_MARKS) -> float:
    """Express a score as a percentage of ``max_score``."""
    if not max_score:
        return 0.0
    return round_half_up(to_decimal(score) * 100 / to_decimal(max_score))


def check_boundaries(boundaries: Sequence[GradeBoundary] = GRADE_BOUNDARIES) -> None:
    """Verify a boundary table is ordered, contiguous and covers [0, 100].

    Raises:
        GradeBoundaryError: describing the first defect found.
    """
    if not boundaries:
        raise GradeBoundaryError("Boundary table is empty")
    if boundaries[0].max_score != MAX_TOTAL_MARKS:
        raise GradeBoundaryError(f"Top boundary must end at {MAX_TOTAL_MARKS}")
    if boundaries[-1].min_score != 0:
        raise GradeBoundaryError("Bottom boundary must start at 0")
    for upper, lower in zip(boundaries, boundaries[1:]):
        if lower.max_score + 1 != upper.min_score:
            raise GradeBoundaryError(
                f"Gap or overlap between {lower.grade.value} and {upper.grade.value}"
            )
    for boundary in boundaries:
        if boundary.min_score > boundary.max_score:
            raise GradeBoundaryError(f"Inverted boundary for {boundary.grade.value}")
