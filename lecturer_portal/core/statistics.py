"""
Class-wide aggregation over graded records.

Aggregates are always recomputed from the full record set; nothing here keeps
state between calls.
"""

from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence

from .enums import Grade
from .grading import is_passing, round_half_up, to_decimal
from .models import AssessmentScores, ClassAggregate, ClassStatistics, GradedRecord, StudentWithMarks


def grade_record(scores: AssessmentScores) -> GradedRecord:
    """Attach the derived total and grade to a set of scores."""
    return GradedRecord.from_scores(scores)


def empty_distribution() -> Dict[str, int]:
    """Zero count for every grade label, highest first."""
    return {grade.value: 0 for grade in Grade}


def grade_distribution(records: Iterable[GradedRecord]) -> Dict[str, int]:
    """Count how many records received each grade."""
    distribution = empty_distribution()
    for record in records:
        distribution[record.grade.value] += 1
    return distribution


def aggregate(records: Iterable[GradedRecord]) -> ClassAggregate:
    """Compute count, average, extremes, pass rate and distribution in one pass.

    Empty input yields zeros everywhere rather than dividing by zero.
    """
    count = 0
    passing = 0
    total = Decimal(0)
    highest: Optional[float] = None
    lowest: Optional[float] = None
    distribution = empty_distribution()

    for record in records:
        score = record.total_score
        grade = record.grade
        count += 1
        total += to_decimal(score)
        highest = score if highest is None or score > highest else highest
        lowest = score if lowest is None or score < lowest else lowest
        if is_passing(grade):
            passing += 1
        distribution[grade.value] += 1

    if count == 0:
        return ClassAggregate(grade_distribution=distribution)

    return ClassAggregate(
        count=count,
        average_score=round_half_up(total / count),
        highest_score=highest,
        lowest_score=lowest,
        pass_rate=round_half_up(Decimal(passing) * 100 / count),
        grade_distribution=distribution,
    )


def class_statistics(students: Sequence[StudentWithMarks], course_id: str,
                     course_name: str) -> ClassStatistics:
    """Course statistics over a roster; students without marks only count towards the total."""
    marks = [student.marks for student in students if student.marks is not None]
    summary = aggregate(marks)
    return ClassStatistics(
        course_id=course_id,
        course_name=course_name,
        total_students=len(students),
        students_with_marks=len(marks),
        average_score=summary.average_score,
        highest_score=summary.highest_score,
        lowest_score=summary.lowest_score,
        pass_rate=summary.pass_rate,
        grade_distribution=summary.grade_distribution,
    )
