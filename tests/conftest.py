"""Shared fixtures for lecturer portal tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from lecturer_portal.api.gateway import ApiFailure, ApiSuccess
from lecturer_portal.core import (
    Lecturer, LoginResponse, MarksInput, SessionContext, Student, StudentMarks, StudentWithMarks
)


def make_student(index: int, **overrides) -> Student:
    data = dict(
        id=f"s{index}",
        first_name="Student",
        last_name=f"Number{chr(64 + index)}",
        email=f"student{index}@students.example.edu",
        registration_number=f"REG/{index:03d}",
        course_id="course-1",
    )
    data.update(overrides)
    return Student(**data)


def make_marks(student_id: str, assignment=8, quiz=12, project=20, midsem=18, final_exam=25,
               **overrides) -> StudentMarks:
    data = dict(
        id=f"m-{student_id}",
        student_id=student_id,
        course_id="course-1",
        lecturer_id="lecturer-1",
        assignment=assignment,
        quiz=quiz,
        project=project,
        midsem=midsem,
        final_exam=final_exam,
    )
    data.update(overrides)
    return StudentMarks(**data)


class FakeGateway:
    """Records every call and answers with preset responses.

    Responses default to success; set ``responses[name]`` to an ApiFailure,
    another ApiSuccess or an exception instance to change that.
    """

    def __init__(self, session: SessionContext):
        self.session = session
        self.calls: List[tuple] = []
        self.events: List[str] = []
        self.responses: Dict[str, Any] = {}

    def _answer(self, name: str, default: Any):
        response = self.responses.get(name, ApiSuccess(default))
        if isinstance(response, Exception):
            raise response
        return response

    async def _call(self, name: str, default: Any, *args):
        self.calls.append((name,) + args)
        self.events.append(f"{name}:start")
        await asyncio.sleep(0)
        self.events.append(f"{name}:end")
        return self._answer(name, default)

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def login(self, credentials):
        lecturer = Lecturer(id="lecturer-1", first_name="Ada", last_name="Lovelace",
                            email=credentials.email, course_id="course-1", course_name="Algorithms")
        response = await self._call("login", LoginResponse(token="tok-123", lecturer=lecturer), credentials)
        if isinstance(response, ApiSuccess):
            self.session.start(response.data.token, response.data.lecturer)
        return response

    async def logout(self):
        try:
            return await self._call("logout", None)
        finally:
            self.session.clear()

    async def register(self, data):
        return await self._call("register", None, data)

    async def get_profile(self):
        lecturer = Lecturer(id="lecturer-1", first_name="Ada", last_name="Lovelace",
                            email="ada@example.edu", course_id="course-1")
        return await self._call("get_profile", lecturer)

    async def get_students_by_course(self, course_id):
        return await self._call("get_students_by_course", [], course_id)

    async def get_student(self, student_id):
        return await self._call("get_student", None, student_id)

    async def get_marks_by_course(self, course_id):
        return await self._call("get_marks_by_course", [], course_id)

    async def get_marks_by_student(self, student_id):
        return await self._call("get_marks_by_student", None, student_id)

    async def create_marks(self, marks):
        return await self._call("create_marks", make_marks(marks.student_id), marks)

    async def update_marks(self, marks_id, update):
        return await self._call("update_marks", make_marks("s1"), marks_id, update)

    async def bulk_create_marks(self, bulk):
        return await self._call("bulk_create_marks", [], bulk)

    async def get_course_statistics(self, course_id):
        return await self._call("get_course_statistics", None, course_id)


@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest.fixture
def fake_gateway(session) -> FakeGateway:
    return FakeGateway(session)


@pytest.fixture
def students() -> List[Student]:
    return [make_student(i) for i in range(1, 4)]


@pytest.fixture
def roster() -> List[StudentWithMarks]:
    """Three students: a B, an F and one without marks."""
    return [
        StudentWithMarks(**make_student(1).model_dump(), marks=make_marks("s1")),
        StudentWithMarks(**make_student(2).model_dump(),
                         marks=make_marks("s2", assignment=5, quiz=5, project=5, midsem=5, final_exam=10)),
        StudentWithMarks(**make_student(3).model_dump()),
    ]


@pytest.fixture
def valid_marks() -> MarksInput:
    return MarksInput(student_id="s1", assignment=8, quiz=12, project=20, midsem=18, final_exam=25)


def failure(message: str = "Something went wrong", error: str = "Request failed",
            status_code: Optional[int] = 500) -> ApiFailure:
    return ApiFailure(error, message, status_code)
