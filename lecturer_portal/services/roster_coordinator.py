"""
Course roster workflow: students, optionally joined with their marks.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..api.gateway import ApiSuccess, RemoteGateway
from ..core.models import Student, StudentMarks, StudentWithMarks
from .base import BaseCoordinator


logger = logging.getLogger(__name__)


def join_marks(students: List[Student], marks: List[StudentMarks]) -> List[StudentWithMarks]:
    """Attach each student's marks record; students without one are kept with ``marks=None``."""
    by_student: Dict[str, StudentMarks] = {record.student_id: record for record in marks}
    return [
        StudentWithMarks(**student.model_dump(), marks=by_student.get(student.id))
        for student in students
    ]


class RosterCoordinator(BaseCoordinator):
    """Fetches and caches the students of a course.

    A failed fetch leaves previously loaded students in place. Overlapping
    fetches are not cancelled; whichever finishes last wins.
    """

    def __init__(self, gateway: RemoteGateway):
        super().__init__(gateway)
        self._students: List[Student] = []
        self._students_with_marks: List[StudentWithMarks] = []
        self._is_loading = False
        self._is_refreshing = False
        self._last_course_id: Optional[str] = None
        self._last_with_marks = False

    @property
    def students(self) -> List[Student]:
        return list(self._students)

    @property
    def students_with_marks(self) -> List[StudentWithMarks]:
        return list(self._students_with_marks)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_refreshing(self) -> bool:
        return self._is_refreshing

    @property
    def last_course_id(self) -> Optional[str]:
        return self._last_course_id

    async def fetch_students(self, course_id: str) -> bool:
        """Fetch the students of a course."""
        self._error = None
        self._is_loading = True
        try:
            response = await self._gateway.get_students_by_course(course_id)
            if isinstance(response, ApiSuccess):
                self._students = response.data
                self._last_course_id = course_id
                self._last_with_marks = False
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("Failed to fetch students")
            return False
        finally:
            self._is_loading = False

    async def fetch_students_with_marks(self, course_id: str) -> bool:
        """Fetch students and course marks concurrently and join them.

        If the students call fails nothing is joined. If only the marks call
        fails every student is kept with no marks.
        """
        self._error = None
        self._is_loading = True
        try:
            students_task = asyncio.create_task(self._gateway.get_students_by_course(course_id))
            marks_task = asyncio.create_task(self._gateway.get_marks_by_course(course_id))
            students_response, marks_response = await asyncio.gather(students_task, marks_task)

            if not isinstance(students_response, ApiSuccess):
                self._remote_failure(students_response)
                return False

            if isinstance(marks_response, ApiSuccess):
                marks = marks_response.data
            else:
                logger.warning("Marks unavailable for course %s: %s", course_id, marks_response.message)
                marks = []

            self._students_with_marks = join_marks(students_response.data, marks)
            self._students = students_response.data
            self._last_course_id = course_id
            self._last_with_marks = True
            return True
        except Exception:
            self._unexpected("Failed to fetch students with marks")
            return False
        finally:
            self._is_loading = False

    async def fetch_student(self, student_id: str) -> Optional[Student]:
        """Fetch one student; failures are logged and give None."""
        try:
            response = await self._gateway.get_student(student_id)
            if isinstance(response, ApiSuccess):
                return response.data
            logger.warning("Failed to fetch student %s: %s", student_id, response.message)
            return None
        except Exception:
            logger.exception("Failed to fetch student %s", student_id)
            return None

    async def refresh(self) -> bool:
        """Repeat the last fetch, with or without marks as it was made."""
        if not self._last_course_id:
            return False

        self._is_refreshing = True
        try:
            if self._last_with_marks:
                return await self.fetch_students_with_marks(self._last_course_id)
            return await self.fetch_students(self._last_course_id)
        finally:
            self._is_refreshing = False
