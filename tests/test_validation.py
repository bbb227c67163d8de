"""Tests for input validation."""

import copy

import pytest

from lecturer_portal.core import (
    AssessmentComponent, BulkMarksInput, FieldError, LecturerRegistrationData, LoginCredentials,
    MarksInput, MarksUpdate, all_errors, errors_by_field, first_error, validate_bulk_marks,
    validate_email, validate_lecturer_registration, validate_login_credentials, validate_mark,
    validate_marks, validate_marks_update, validate_name, validate_password, validate_phone
)


def marks(student_id="s1", **overrides) -> MarksInput:
    data = dict(student_id=student_id, assignment=8, quiz=12, project=20, midsem=18, final_exam=25)
    data.update(overrides)
    return MarksInput(**data)


class TestFieldValidators:
    """Test single field validators."""

    def test_email(self):
        assert validate_email("lecturer@example.edu").is_valid
        assert all_errors(validate_email("")) == ["Email is required"]
        assert all_errors(validate_email("not-an-email")) == ["Invalid email format"]
        assert not validate_email("a@b.c" + "x" * 260).is_valid

    def test_phone(self):
        assert validate_phone("+254 712 345 678").is_valid
        assert not validate_phone("12345").is_valid
        assert not validate_phone("1" * 16).is_valid

    def test_password(self):
        assert validate_password("Password123").is_valid
        messages = all_errors(validate_password("short"))
        assert "Password must be at least 8 characters" in messages
        assert "Password must contain at least one uppercase letter" in messages
        assert "Password must contain at least one number" in messages

    def test_name(self):
        assert validate_name("Mary-Jane O'Neil", "first_name").is_valid
        assert first_error(validate_name("", "first_name")) == "First name is required"
        assert not validate_name("R2D2", "last_name").is_valid
        assert not validate_name("A", "last_name").is_valid


class TestValidateMark:
    """Test component score checks."""

    def test_within_range(self):
        assert validate_mark(10, AssessmentComponent.ASSIGNMENT).is_valid
        assert validate_mark(0, AssessmentComponent.QUIZ).is_valid
        assert validate_mark(12.75, AssessmentComponent.QUIZ).is_valid

    def test_over_maximum(self):
        result = validate_mark(11, AssessmentComponent.ASSIGNMENT)
        assert result.errors == (FieldError("assignment", "Assignment cannot exceed 10"),)

    def test_negative(self):
        assert first_error(validate_mark(-1, AssessmentComponent.MIDSEM)) == "Midsem cannot be negative"

    def test_too_many_decimals(self):
        assert first_error(validate_mark(12.345, AssessmentComponent.QUIZ)) == \
            "Quiz can have at most 2 decimal places"

    def test_over_maximum_and_too_precise_are_both_reported(self):
        assert len(validate_mark(30.125, AssessmentComponent.PROJECT).errors) == 2

    @pytest.mark.parametrize("value", ["abc", None, float("nan"), float("inf"), True])
    def test_not_a_number(self, value):
        assert all_errors(validate_mark(value, AssessmentComponent.FINAL_EXAM)) == \
            ["Final Exam must be a valid number"]

    def test_custom_maximum(self):
        assert not validate_mark(9, AssessmentComponent.ASSIGNMENT, max_value=5).is_valid


class TestValidateMarks:
    """Test whole-record marks validation."""

    def test_valid(self, valid_marks):
        assert validate_marks(valid_marks).is_valid

    def test_full_marks_are_valid(self):
        assert validate_marks(marks(assignment=10, quiz=15, project=25, midsem=20, final_exam=30)).is_valid

    def test_assignment_over_maximum(self):
        result = validate_marks(marks(assignment=11))
        assert errors_by_field(result) == {"assignment": ["Assignment cannot exceed 10"]}

    def test_missing_student_id(self):
        assert first_error(validate_marks(marks(student_id=""))) == "Student ID is required"

    def test_raw_form_data_with_wire_keys(self):
        form = {"studentId": "s1", "assignment": 8, "quiz": 12, "project": 20,
                "midsem": 18, "finalExam": "abc"}
        assert errors_by_field(validate_marks(form)) == {
            "final_exam": ["Final Exam must be a valid number"]
        }

    def test_total_check_skipped_on_component_errors(self):
        form = {"student_id": "s1", "assignment": 10, "quiz": 15, "project": 25,
                "midsem": 20, "final_exam": 30.5}
        result = validate_marks(form)
        assert "total" not in errors_by_field(result)
        assert "final_exam" in errors_by_field(result)

    def test_is_pure(self):
        form = {"student_id": "s1", "assignment": 11, "quiz": 12, "project": 20,
                "midsem": 18, "final_exam": 25}
        snapshot = copy.deepcopy(form)
        first = validate_marks(form)
        second = validate_marks(form)
        assert first == second
        assert form == snapshot


class TestValidateMarksUpdate:
    """Test partial update validation."""

    def test_only_present_components_are_checked(self):
        assert validate_marks_update(MarksUpdate(final_exam=29)).is_valid

    def test_present_component_over_maximum(self):
        assert first_error(validate_marks_update(MarksUpdate(quiz=16))) == "Quiz cannot exceed 15"

    def test_complete_update_is_fully_validated(self):
        update = MarksUpdate(student_id="s1", assignment=8, quiz=12, project=20, midsem=18, final_exam=25)
        assert validate_marks_update(update).is_valid
        update = MarksUpdate(student_id="s1", assignment=8, quiz=12, project=20, midsem=18, final_exam=31)
        assert not validate_marks_update(update).is_valid


class TestValidateBulkMarks:
    """Test batch validation."""

    def test_valid_batch(self):
        assert validate_bulk_marks(BulkMarksInput(marks=[marks("s1"), marks("s2")])).is_valid

    def test_empty_batch(self):
        assert all_errors(validate_bulk_marks([])) == ["At least one student's marks is required"]

    def test_entry_errors_are_namespaced(self):
        result = validate_bulk_marks([marks("s1"), marks("s2", assignment=11)])
        assert errors_by_field(result) == {"marks[1].assignment": ["Assignment cannot exceed 10"]}

    def test_duplicates_give_exactly_one_error(self):
        batch = [marks("a"), marks("b"), marks("a"), marks("a"), marks("b"), marks("c")]
        result = validate_bulk_marks(batch)
        assert result.errors == (FieldError("marks", "Duplicate student IDs found: a, b"),)

    def test_no_duplicate_error_without_duplicates(self):
        result = validate_bulk_marks([marks("a"), marks("b")])
        assert "marks" not in errors_by_field(result)

    def test_blank_ids_are_not_duplicates(self):
        result = validate_bulk_marks([marks(""), marks("")])
        assert errors_by_field(result) == {
            "marks[0].student_id": ["Student ID is required"],
            "marks[1].student_id": ["Student ID is required"],
        }


class TestAuthForms:
    """Test login and registration validation."""

    def test_login(self):
        assert validate_login_credentials(LoginCredentials(email="a@b.co", password="x")).is_valid
        result = validate_login_credentials(LoginCredentials(email="bad", password=""))
        assert all_errors(result) == ["Invalid email format", "Password is required"]

    def test_registration(self):
        data = LecturerRegistrationData(first_name="Ada", last_name="Lovelace", email="ada@example.edu",
                                        phone="0712345678", password="Password123", course_id="c1")
        assert validate_lecturer_registration(data).is_valid

    def test_registration_errors_cover_every_field(self):
        data = LecturerRegistrationData(first_name="A", last_name="", email="bad", phone="1",
                                        password="weak", course_id="")
        fields = set(errors_by_field(validate_lecturer_registration(data)))
        assert fields == {"first_name", "last_name", "email", "phone", "password", "course_id"}
