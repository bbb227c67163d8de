"""
Remote access gateway for the examination system's REST backend.

Every operation returns an ApiSuccess or ApiFailure value; network problems,
HTTP errors and malformed payloads never escape as exceptions. Requests are
made with ``requests`` on a worker thread so callers can simply ``await``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..config import PortalConfig
from ..core.exceptions import ResponseFormatError
from ..core.models import (
    BulkMarksInput, ClassStatistics, Lecturer, LecturerRegistrationData, LoginCredentials,
    LoginResponse, MarksInput, MarksUpdate, Student, StudentMarks
)
from ..core.session import SessionContext


logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

NETWORK_ERROR = "NETWORK_ERROR"
INVALID_RESPONSE = "INVALID_RESPONSE"


@dataclass(frozen=True)
class ApiSuccess(Generic[T]):
    """Successful call carrying the parsed payload."""
    data: T
    message: Optional[str] = None
    success: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ApiFailure:
    """Failed call; ``message`` is meant for display."""
    error: str
    message: str
    status_code: Optional[int] = None
    success: bool = field(default=False, init=False)


ApiResponse = Union[ApiSuccess[T], ApiFailure]


class Endpoints:
    """Backend routes, relative to the configured base URL."""
    LOGIN = "/auth/login"
    REGISTER = "/auth/register"
    LOGOUT = "/auth/logout"
    LECTURER_PROFILE = "/lecturer/profile"
    MARKS = "/marks"
    BULK_MARKS = "/marks/bulk"

    @staticmethod
    def students_by_course(course_id: str) -> str:
        return f"/courses/{quote(course_id, safe='')}/students"

    @staticmethod
    def student(student_id: str) -> str:
        return f"/students/{quote(student_id, safe='')}"

    @staticmethod
    def marks_record(marks_id: str) -> str:
        return f"/marks/{quote(marks_id, safe='')}"

    @staticmethod
    def marks_by_student(student_id: str) -> str:
        return f"/marks/student/{quote(student_id, safe='')}"

    @staticmethod
    def marks_by_course(course_id: str) -> str:
        return f"/marks/course/{quote(course_id, safe='')}"

    @staticmethod
    def course_statistics(course_id: str) -> str:
        return f"/statistics/course/{quote(course_id, safe='')}"


def _model(model: Type[M]) -> Callable[[Any], M]:
    def parse(payload: Any) -> M:
        return model.model_validate(payload)
    return parse


def _model_list(model: Type[M]) -> Callable[[Any], List[M]]:
    def parse(payload: Any) -> List[M]:
        if not isinstance(payload, list):
            raise ResponseFormatError(f"Expected a list of {model.__name__}, got {type(payload).__name__}")
        return [model.model_validate(item) for item in payload]
    return parse


def _no_payload(payload: Any) -> None:
    return None


def _unwrap(body: Any) -> Tuple[Any, Optional[str]]:
    """Split a success body into payload and optional message.

    Bodies shaped ``{"data": ..., "message": ...}`` are unwrapped; anything
    else is the payload itself.
    """
    if isinstance(body, dict):
        message = body.get("message")
        if "data" in body:
            return body["data"], message
        return body, message
    return body, None


class RemoteGateway:
    """Asynchronous client for the lecturer endpoints of the backend."""

    def __init__(self, config: PortalConfig, session: SessionContext,
                 http: Optional[requests.Session] = None):
        self._config = config
        self._session = session
        self._http = http or requests.Session()

    @property
    def session(self) -> SessionContext:
        return self._session

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self._http.close()

    def __enter__(self) -> "RemoteGateway":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ============================================
    # Transport
    # ============================================

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._session.token:
            headers["Authorization"] = f"Bearer {self._session.token}"
        return headers

    def _send(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]]) -> requests.Response:
        return self._http.request(
            method,
            f"{self._config.api_base_url}{endpoint}",
            json=payload,
            headers=self._headers(),
            timeout=self._config.request_timeout,
        )

    async def _request(self, method: str, endpoint: str, parse: Callable[[Any], T],
                       payload: Optional[Dict[str, Any]] = None) -> ApiResponse[T]:
        logger.debug("%s %s", method, endpoint)
        try:
            response = await asyncio.to_thread(self._send, method, endpoint, payload)
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            return ApiFailure(NETWORK_ERROR, str(e) or "Network request failed")

        status = response.status_code
        body, parse_error = self._decode(response)

        if not 200 <= status < 300:
            details = body if isinstance(body, dict) else {}
            return ApiFailure(
                error=details.get("error") or "Request failed",
                message=details.get("message") or f"HTTP {status}",
                status_code=status,
            )

        if parse_error:
            return ApiFailure(INVALID_RESPONSE, parse_error, status)

        data, message = _unwrap(body)
        try:
            return ApiSuccess(parse(data), message)
        except (PydanticValidationError, ResponseFormatError, TypeError) as e:
            logger.warning("%s %s returned an unexpected payload: %s", method, endpoint, e)
            return ApiFailure(INVALID_RESPONSE, f"Unexpected response format from {endpoint}", status)

    @staticmethod
    def _decode(response: requests.Response) -> Tuple[Any, Optional[str]]:
        if not (response.content or b"").strip():
            return None, None
        try:
            return response.json(), None
        except ValueError as e:
            return None, f"Response is not valid JSON: {e}"

    # ============================================
    # Authentication
    # ============================================

    async def login(self, credentials: LoginCredentials) -> ApiResponse[LoginResponse]:
        """Log in and start the session on success."""
        response = await self._request("POST", Endpoints.LOGIN, _model(LoginResponse),
                                       credentials.to_payload())
        if isinstance(response, ApiSuccess):
            self._session.start(response.data.token, response.data.lecturer)
        return response

    async def register(self, data: LecturerRegistrationData) -> ApiResponse[Lecturer]:
        """Register a new lecturer account."""
        return await self._request("POST", Endpoints.REGISTER, _model(Lecturer), data.to_payload())

    async def logout(self) -> ApiResponse[None]:
        """Log out; the local session is cleared whatever the backend says."""
        try:
            return await self._request("POST", Endpoints.LOGOUT, _no_payload)
        finally:
            self._session.clear()

    async def get_profile(self) -> ApiResponse[Lecturer]:
        """Fetch the signed-in lecturer's profile."""
        return await self._request("GET", Endpoints.LECTURER_PROFILE, _model(Lecturer))

    # ============================================
    # Students
    # ============================================

    async def get_students_by_course(self, course_id: str) -> ApiResponse[List[Student]]:
        """Fetch every student registered for a course."""
        return await self._request("GET", Endpoints.students_by_course(course_id), _model_list(Student))

    async def get_student(self, student_id: str) -> ApiResponse[Student]:
        """Fetch a single student."""
        return await self._request("GET", Endpoints.student(student_id), _model(Student))

    # ============================================
    # Marks
    # ============================================

    async def create_marks(self, marks: MarksInput) -> ApiResponse[StudentMarks]:
        return await self._request("POST", Endpoints.MARKS, _model(StudentMarks), marks.to_payload())

    async def update_marks(self, marks_id: str, update: MarksUpdate) -> ApiResponse[StudentMarks]:
        return await self._request("PUT", Endpoints.marks_record(marks_id), _model(StudentMarks),
                                   update.to_payload())

    async def get_marks_by_student(self, student_id: str) -> ApiResponse[StudentMarks]:
        return await self._request("GET", Endpoints.marks_by_student(student_id), _model(StudentMarks))

    async def get_marks_by_course(self, course_id: str) -> ApiResponse[List[StudentMarks]]:
        return await self._request("GET", Endpoints.marks_by_course(course_id), _model_list(StudentMarks))

    async def bulk_create_marks(self, bulk: BulkMarksInput) -> ApiResponse[List[StudentMarks]]:
        return await self._request("POST", Endpoints.BULK_MARKS, _model_list(StudentMarks),
                                   bulk.to_payload())

    # ============================================
    # Statistics
    # ============================================

    async def get_course_statistics(self, course_id: str) -> ApiResponse[ClassStatistics]:
        """Fetch statistics computed by the backend."""
        return await self._request("GET", Endpoints.course_statistics(course_id), _model(ClassStatistics))
