"""
Enumerations and constants for the lecturer portal.
"""

from enum import Enum
from typing import Dict


class Grade(Enum):
    """Letter grades, highest first."""
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    D_MINUS = "D-"
    F = "F"


class AssessmentComponent(Enum):
    """The five assessed components of a course mark."""
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    PROJECT = "project"
    MIDSEM = "midsem"
    FINAL_EXAM = "final_exam"

    @property
    def label(self) -> str:
        """Human readable name used in messages and report headers."""
        return _COMPONENT_LABELS[self]

    @property
    def max_marks(self) -> int:
        """Maximum marks for this component."""
        return MAX_MARKS[self]


class ExportFormat(Enum):
    """Supported export formats."""
    CSV = "csv"
    HTML = "html"


class ExportKind(Enum):
    """Report kinds, used in export filenames."""
    MARKS = "Marks"
    STATISTICS = "Statistics"
    MARKS_REPORT = "Marks_Report"


_COMPONENT_LABELS: Dict[AssessmentComponent, str] = {
    AssessmentComponent.ASSIGNMENT: "Assignment",
    AssessmentComponent.QUIZ: "Quiz",
    AssessmentComponent.PROJECT: "Project",
    AssessmentComponent.MIDSEM: "Midsem",
    AssessmentComponent.FINAL_EXAM: "Final Exam",
}

MAX_MARKS: Dict[AssessmentComponent, int] = {
    AssessmentComponent.ASSIGNMENT: 10,
    AssessmentComponent.QUIZ: 15,
    AssessmentComponent.PROJECT: 25,
    AssessmentComponent.MIDSEM: 20,
    AssessmentComponent.FINAL_EXAM: 30,
}

MAX_TOTAL_MARKS = 100

# D- is the lowest passing grade
MIN_PASSING_SCORE = 60

MAX_MARK_DECIMALS = 2

GRADE_POINTS: Dict[Grade, float] = {
    Grade.A: 4.0,
    Grade.A_MINUS: 3.7,
    Grade.B_PLUS: 3.3,
    Grade.B: 3.0,
    Grade.B_MINUS: 2.7,
    Grade.C_PLUS: 2.3,
    Grade.C: 2.0,
    Grade.C_MINUS: 1.7,
    Grade.D_PLUS: 1.3,
    Grade.D: 1.0,
    Grade.D_MINUS: 0.7,
    Grade.F: 0.0,
}
