"""
Input validation for the lecturer portal.

Every validator returns a ValidationResult listing field-attributed errors in
the order they were found. Bad input is never signalled by raising.
"""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic.alias_generators import to_camel

from .enums import AssessmentComponent, MAX_MARK_DECIMALS, MAX_TOTAL_MARKS
from .grading import to_decimal
from .models import BulkMarksInput


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_PATTERN = re.compile(r"^[A-Za-z\s\-']+$")
MAX_EMAIL_LENGTH = 255
MIN_PHONE_DIGITS = 10
MAX_PHONE_DIGITS = 15
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50


@dataclass(frozen=True)
class FieldError:
    """A single validation failure."""
    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation run."""
    errors: Tuple[FieldError, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def prefixed(self, prefix: str) -> "ValidationResult":
        """Copy of this result with every field name namespaced under ``prefix``."""
        return ValidationResult(tuple(
            FieldError(f"{prefix}.{error.field}", error.message) for error in self.errors
        ))


def _result(errors: Sequence[FieldError]) -> ValidationResult:
    return ValidationResult(tuple(errors))


def _read(source: Any, name: str) -> Any:
    """Read a field from a model or from raw form data keyed either way."""
    if isinstance(source, Mapping):
        if name in source:
            return source[name]
        return source.get(to_camel(name))
    return getattr(source, name, None)


def _label(field_name: str) -> str:
    words = re.sub(r"(?<!^)(?=[A-Z])", "_", field_name).replace("_", " ").strip()
    return words[:1].upper() + words[1:].lower()


def _format_number(value: Decimal) -> str:
    return f"{float(value):g}"


# ============================================
# Contact and account fields
# ============================================

def validate_email(email: Optional[str]) -> ValidationResult:
    """Email must be present, look like local@domain.tld and fit in 255 chars."""
    if not email:
        return _result([FieldError("email", "Email is required")])

    errors: List[FieldError] = []
    if not EMAIL_PATTERN.match(email):
        errors.append(FieldError("email", "Invalid email format"))
    if len(email) > MAX_EMAIL_LENGTH:
        errors.append(FieldError("email", f"Email must be at most {MAX_EMAIL_LENGTH} characters"))
    return _result(errors)


def validate_phone(phone: Optional[str]) -> ValidationResult:
    """Phone must contain 10 to 15 digits once punctuation is stripped."""
    if not phone:
        return _result([FieldError("phone", "Phone number is required")])

    errors: List[FieldError] = []
    digits = re.sub(r"\D", "", phone)
    if len(digits) < MIN_PHONE_DIGITS:
        errors.append(FieldError("phone", f"Phone number must be at least {MIN_PHONE_DIGITS} digits"))
    if len(digits) > MAX_PHONE_DIGITS:
        errors.append(FieldError("phone", f"Phone number must be at most {MAX_PHONE_DIGITS} digits"))
    return _result(errors)


def validate_password(password: Optional[str]) -> ValidationResult:
    """Password strength for registration: length, upper, lower and digit."""
    if not password:
        return _result([FieldError("password", "Password is required")])

    errors: List[FieldError] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(FieldError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters"))
    if not re.search(r"[A-Z]", password):
        errors.append(FieldError("password", "Password must contain at least one uppercase letter"))
    if not re.search(r"[a-z]", password):
        errors.append(FieldError("password", "Password must contain at least one lowercase letter"))
    if not re.search(r"[0-9]", password):
        errors.append(FieldError("password", "Password must contain at least one number"))
    return _result(errors)


def validate_name(name: Optional[str], field_name: str = "name") -> ValidationResult:
    """Names are 2-50 letters, spaces, hyphens or apostrophes."""
    label = _label(field_name)
    if not name:
        return _result([FieldError(field_name, f"{label} is required")])

    errors: List[FieldError] = []
    if len(name) < MIN_NAME_LENGTH:
        errors.append(FieldError(field_name, f"{label} must be at least {MIN_NAME_LENGTH} characters"))
    if len(name) > MAX_NAME_LENGTH:
        errors.append(FieldError(field_name, f"{label} must be at most {MAX_NAME_LENGTH} characters"))
    if not NAME_PATTERN.match(name):
        errors.append(FieldError(
            field_name, f"{label} can only contain letters, spaces, hyphens, and apostrophes"
        ))
    return _result(errors)


# ============================================
# Marks
# ============================================

def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def _decimal_places(value: Any) -> int:
    exponent = to_decimal(value).normalize().as_tuple().exponent
    return max(0, -exponent)


def validate_mark(value: Any, component: AssessmentComponent,
                  max_value: Optional[float] = None) -> ValidationResult:
    """Check one component score.

    Over-maximum and too-many-decimals are reported independently, so a
    single value can produce more than one error.
    """
    field_name = component.value
    label = component.label
    limit = component.max_marks if max_value is None else max_value

    if not _is_number(value):
        return _result([FieldError(field_name, f"{label} must be a valid number")])

    errors: List[FieldError] = []
    if value < 0:
        errors.append(FieldError(field_name, f"{label} cannot be negative"))
    if value > limit:
        errors.append(FieldError(field_name, f"{label} cannot exceed {limit}"))
    if _decimal_places(value) > MAX_MARK_DECIMALS:
        errors.append(FieldError(field_name, f"{label} can have at most {MAX_MARK_DECIMALS} decimal places"))
    return _result(errors)


def _validate_components(marks: Any, components: Sequence[AssessmentComponent]) -> List[FieldError]:
    errors: List[FieldError] = []
    for component in components:
        errors.extend(validate_mark(_read(marks, component.value), component).errors)
    return errors


def _total_error(marks: Any) -> Optional[FieldError]:
    total = sum((to_decimal(_read(marks, c.value)) for c in AssessmentComponent), Decimal(0))
    if total > MAX_TOTAL_MARKS:
        return FieldError(
            "total", f"Total marks ({_format_number(total)}) cannot exceed {MAX_TOTAL_MARKS}"
        )
    return None


def validate_marks(marks: Any) -> ValidationResult:
    """Validate one student's marks.

    The total is only checked when every component is individually valid;
    otherwise the check is skipped rather than reported as passing.
    """
    errors: List[FieldError] = []
    if not _read(marks, "student_id"):
        errors.append(FieldError("student_id", "Student ID is required"))

    component_errors = _validate_components(marks, list(AssessmentComponent))
    errors.extend(component_errors)

    if not component_errors:
        total_error = _total_error(marks)
        if total_error:
            errors.append(total_error)
    return _result(errors)


def validate_marks_update(update: Any) -> ValidationResult:
    """Validate a partial update: only the components present are checked."""
    present = [c for c in AssessmentComponent if _read(update, c.value) is not None]
    if len(present) == len(AssessmentComponent) and _read(update, "student_id"):
        return validate_marks(update)
    return _result(_validate_components(update, present))


def validate_bulk_marks(entries: Any) -> ValidationResult:
    """Validate a batch of marks.

    Entry errors are namespaced ``marks[i].<field>``. Duplicate student IDs
    produce a single aggregate error naming each duplicated ID once.
    """
    if isinstance(entries, BulkMarksInput):
        entries = entries.marks
    if not entries or isinstance(entries, (str, bytes, Mapping)):
        return _result([FieldError("marks", "At least one student's marks is required")])

    errors: List[FieldError] = []
    seen = set()
    duplicates: List[str] = []
    for index, entry in enumerate(entries):
        errors.extend(validate_marks(entry).prefixed(f"marks[{index}]").errors)
        student_id = _read(entry, "student_id")
        if not student_id:
            continue
        if student_id in seen and student_id not in duplicates:
            duplicates.append(student_id)
        seen.add(student_id)

    if duplicates:
        errors.append(FieldError("marks", f"Duplicate student IDs found: {', '.join(duplicates)}"))
    return _result(errors)


# ============================================
# Authentication forms
# ============================================

def validate_login_credentials(credentials: Any) -> ValidationResult:
    """Email format plus password presence; strength rules do not apply to login."""
    errors = list(validate_email(_read(credentials, "email")).errors)
    if not _read(credentials, "password"):
        errors.append(FieldError("password", "Password is required"))
    return _result(errors)


def validate_lecturer_registration(data: Any) -> ValidationResult:
    """Validate every registration field."""
    errors: List[FieldError] = []
    errors.extend(validate_name(_read(data, "first_name"), "first_name").errors)
    errors.extend(validate_name(_read(data, "last_name"), "last_name").errors)
    errors.extend(validate_email(_read(data, "email")).errors)
    errors.extend(validate_phone(_read(data, "phone")).errors)
    errors.extend(validate_password(_read(data, "password")).errors)
    if not _read(data, "course_id"):
        errors.append(FieldError("course_id", "Course ID is required"))
    return _result(errors)


# ============================================
# Result helpers
# ============================================

def first_error(result: ValidationResult) -> Optional[str]:
    """First error message, or None when valid."""
    return result.errors[0].message if result.errors else None


def all_errors(result: ValidationResult) -> List[str]:
    """All error messages in order."""
    return [error.message for error in result.errors]


def errors_by_field(result: ValidationResult) -> Dict[str, List[str]]:
    """Error messages grouped by field."""
    grouped: Dict[str, List[str]] = {}
    for error in result.errors:
        grouped.setdefault(error.field, []).append(error.message)
    return grouped
