"""
Data model for the lecturer portal.

Records mirror the backend's JSON shapes: snake_case attributes in Python,
camelCase keys on the wire.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .enums import AssessmentComponent, Grade
from .grading import compute_grade, compute_total


class PortalModel(BaseModel):
    """Base for all wire records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> Dict:
        """Serialise to a JSON-ready dict with wire keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================
# People
# ============================================

class Lecturer(PortalModel):
    """Lecturer profile, owned by the backend."""
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    course_id: str
    course_name: str = ""
    created_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Student(PortalModel):
    """Student registered for a course (read-only for lecturers)."""
    id: str
    first_name: str
    last_name: str
    email: str
    registration_number: str
    course_id: str
    created_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ============================================
# Authentication
# ============================================

class LoginCredentials(PortalModel):
    email: str
    password: str = Field(repr=False)


class LoginResponse(PortalModel):
    token: str = Field(repr=False)
    lecturer: Lecturer


class LecturerRegistrationData(PortalModel):
    """Registration form; each lecturer is assigned to one course."""
    first_name: str
    last_name: str
    email: str
    phone: str
    password: str = Field(repr=False)
    course_id: str


# ============================================
# Marks
# ============================================

class AssessmentScores(PortalModel):
    """Raw scores for the five components.

    No range checks are applied here so that invalid input can still be
    represented and reported by the validators.
    """
    assignment: float
    quiz: float
    project: float
    midsem: float
    final_exam: float

    def component(self, component: AssessmentComponent) -> float:
        """Get the score for one component."""
        return getattr(self, component.value)

    def components(self) -> Dict[AssessmentComponent, float]:
        """Get all component scores keyed by component."""
        return {component: self.component(component) for component in AssessmentComponent}


class GradedRecord(AssessmentScores):
    """Scores plus their total and grade, always derived at read time."""

    @computed_field(alias="totalScore")
    @property
    def total_score(self) -> float:
        return compute_total(self)

    @computed_field(alias="grade")
    @property
    def grade(self) -> Grade:
        return compute_grade(self.total_score)

    @classmethod
    def from_scores(cls, scores: AssessmentScores) -> "GradedRecord":
        """Grade an existing set of scores."""
        return cls(**{component.value: scores.component(component) for component in AssessmentComponent})


class StudentMarks(GradedRecord):
    """Marks record as stored by the backend.

    Any total or grade sent by the backend is ignored and recomputed.
    """
    id: str
    student_id: str
    course_id: str
    lecturer_id: str
    submitted_at: Optional[str] = None
    updated_at: Optional[str] = None


class MarksInput(AssessmentScores):
    """Marks for one student as entered by the lecturer."""
    student_id: str


class MarksUpdate(PortalModel):
    """Partial marks update; unset fields are left unchanged remotely."""
    student_id: Optional[str] = None
    assignment: Optional[float] = None
    quiz: Optional[float] = None
    project: Optional[float] = None
    midsem: Optional[float] = None
    final_exam: Optional[float] = None

    def is_complete(self) -> bool:
        """True when the student and every component are present."""
        return self.student_id is not None and all(
            getattr(self, component.value) is not None for component in AssessmentComponent
        )


class BulkMarksInput(PortalModel):
    marks: List[MarksInput]


class StudentWithMarks(Student):
    """Student joined with their marks record, if any."""
    marks: Optional[StudentMarks] = None


# ============================================
# Statistics
# ============================================

class ClassAggregate(PortalModel):
    """Summary over a set of graded records."""
    count: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    pass_rate: float = 0.0
    grade_distribution: Dict[str, int]


class ClassStatistics(PortalModel):
    """Course level statistics, as computed locally or by the backend."""
    course_id: str
    course_name: str
    total_students: int
    students_with_marks: int
    average_score: float
    highest_score: float
    lowest_score: float
    pass_rate: float
    grade_distribution: Dict[str, int]
