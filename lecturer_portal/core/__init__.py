"""
Core module containing the data model, grading and validation rules.
"""

from .enums import *
from .exceptions import *
from .models import *
from .grading import *
from .statistics import *
from .validation import *
from .session import SessionContext

__all__ = [
    # Enums and constants
    "Grade",
    "AssessmentComponent",
    "ExportFormat",
    "ExportKind",
    "MAX_MARKS",
    "MAX_TOTAL_MARKS",
    "MIN_PASSING_SCORE",
    "GRADE_POINTS",

    # Models
    "Lecturer",
    "Student",
    "StudentWithMarks",
    "LoginCredentials",
    "LoginResponse",
    "LecturerRegistrationData",
    "AssessmentScores",
    "GradedRecord",
    "StudentMarks",
    "MarksInput",
    "MarksUpdate",
    "BulkMarksInput",
    "ClassAggregate",
    "ClassStatistics",

    # Grading engine
    "GradeBoundary",
    "GRADE_BOUNDARIES",
    "compute_total",
    "compute_grade",
    "is_passing",
    "is_passing_score",
    "grade_points",
    "grade_point_average",
    "grade_boundary",
    "compare_grades",
    "calculate_percentage",
    "check_boundaries",
    "round_half_up",

    # Statistics
    "aggregate",
    "class_statistics",
    "grade_distribution",
    "empty_distribution",
    "grade_record",

    # Validation
    "FieldError",
    "ValidationResult",
    "validate_email",
    "validate_phone",
    "validate_password",
    "validate_name",
    "validate_mark",
    "validate_marks",
    "validate_marks_update",
    "validate_bulk_marks",
    "validate_login_credentials",
    "validate_lecturer_registration",
    "first_error",
    "all_errors",
    "errors_by_field",

    # Session
    "SessionContext",

    # Exceptions
    "LecturerPortalError",
    "ConfigurationError",
    "GradeBoundaryError",
    "ResponseFormatError",
    "ExportError",
]
