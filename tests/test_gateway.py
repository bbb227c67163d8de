"""Tests for the remote gateway."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
import requests

from lecturer_portal.api import ApiFailure, ApiSuccess, Endpoints, RemoteGateway
from lecturer_portal.api.gateway import INVALID_RESPONSE, NETWORK_ERROR
from lecturer_portal.config import PortalConfig
from lecturer_portal.core import (
    BulkMarksInput, Lecturer, LoginCredentials, MarksInput, MarksUpdate, SessionContext
)


LECTURER = {
    "id": "lecturer-1", "firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.edu",
    "phone": "0712345678", "courseId": "course-1", "courseName": "Algorithms",
}

STUDENT = {
    "id": "s1", "firstName": "Brian", "lastName": "Otieno", "email": "brian@example.edu",
    "registrationNumber": "REG/001", "courseId": "course-1",
}

MARKS = {
    "id": "m1", "studentId": "s1", "courseId": "course-1", "lecturerId": "lecturer-1",
    "assignment": 8, "quiz": 12, "project": 20, "midsem": 18, "finalExam": 25,
}


def http_response(status_code: int, body=None, text: str = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    content = text if text is not None else ("" if body is None else json.dumps(body))
    response._content = content.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def gateway(http, session):
    return RemoteGateway(PortalConfig(api_base_url="http://api.test/api", request_timeout=5), session, http)


def sent(http, index: int = -1):
    """(method, url, kwargs) of a recorded request."""
    call = http.request.call_args_list[index]
    method, url = call.args
    return method, url, call.kwargs


class TestEndpoints:
    """Test route construction."""

    def test_ids_are_quoted(self):
        assert Endpoints.student("a/b c") == "/students/a%2Fb%20c"
        assert Endpoints.students_by_course("course-1") == "/courses/course-1/students"
        assert Endpoints.course_statistics("c1") == "/statistics/course/c1"


class TestTransport:
    """Test request construction and response mapping."""

    def test_request_without_token(self, gateway, http):
        http.request.return_value = http_response(200, LECTURER)
        asyncio.run(gateway.get_profile())

        method, url, kwargs = sent(http)
        assert method == "GET"
        assert url == "http://api.test/api/lecturer/profile"
        assert "Authorization" not in kwargs["headers"]
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] == 5

    def test_bearer_token_is_sent(self, gateway, http, session):
        session.start("tok-1")
        http.request.return_value = http_response(200, [STUDENT])
        asyncio.run(gateway.get_students_by_course("course-1"))

        _, url, kwargs = sent(http)
        assert url == "http://api.test/api/courses/course-1/students"
        assert kwargs["headers"]["Authorization"] == "Bearer tok-1"

    def test_wrapped_body_is_unwrapped(self, gateway, http):
        http.request.return_value = http_response(200, {"success": True, "data": [STUDENT], "message": "ok"})
        response = asyncio.run(gateway.get_students_by_course("course-1"))

        assert isinstance(response, ApiSuccess)
        assert response.success
        assert response.message == "ok"
        assert response.data[0].registration_number == "REG/001"

    def test_error_body_is_passed_through(self, gateway, http):
        http.request.return_value = http_response(
            401, {"error": "Unauthorized", "message": "Invalid email or password"})
        response = asyncio.run(gateway.get_profile())

        assert response == ApiFailure("Unauthorized", "Invalid email or password", 401)
        assert not response.success

    def test_error_without_body(self, gateway, http):
        http.request.return_value = http_response(500, text="<html>oops</html>")
        response = asyncio.run(gateway.get_profile())
        assert response == ApiFailure("Request failed", "HTTP 500", 500)

    def test_network_error(self, gateway, http):
        http.request.side_effect = requests.exceptions.ConnectionError("connection refused")
        response = asyncio.run(gateway.get_profile())

        assert isinstance(response, ApiFailure)
        assert response.error == NETWORK_ERROR
        assert response.message == "connection refused"
        assert response.status_code is None

    def test_invalid_json(self, gateway, http):
        http.request.return_value = http_response(200, text="{not json")
        response = asyncio.run(gateway.get_profile())
        assert response.error == INVALID_RESPONSE

    def test_body_is_decoded_by_requests(self, gateway, http):
        response = MagicMock(spec=requests.Response)
        response.status_code = 200
        response.content = b"{...}"
        response.json.return_value = LECTURER
        http.request.return_value = response

        result = asyncio.run(gateway.get_profile())
        assert isinstance(result, ApiSuccess)
        assert result.data.course_name == "Algorithms"
        response.json.assert_called_once_with()

    def test_unexpected_shape(self, gateway, http):
        http.request.return_value = http_response(200, {"data": {"not": "a list"}})
        response = asyncio.run(gateway.get_students_by_course("course-1"))
        assert response.error == INVALID_RESPONSE

    def test_backend_total_is_recomputed(self, gateway, http):
        http.request.return_value = http_response(200, dict(MARKS, totalScore=1, grade="F"))
        response = asyncio.run(gateway.get_marks_by_student("s1"))
        assert response.data.total_score == 83.0
        assert response.data.grade.value == "B"


class TestAuthentication:
    """Test session handling around login and logout."""

    def test_login_starts_session(self, gateway, http, session):
        http.request.return_value = http_response(200, {"data": {"token": "tok-9", "lecturer": LECTURER}})
        response = asyncio.run(gateway.login(LoginCredentials(email="ada@example.edu", password="Secret123")))

        assert isinstance(response, ApiSuccess)
        assert session.token == "tok-9"
        assert session.lecturer == Lecturer.model_validate(LECTURER)
        assert sent(http)[2]["json"] == {"email": "ada@example.edu", "password": "Secret123"}

    def test_failed_login_leaves_session_empty(self, gateway, http, session):
        http.request.return_value = http_response(401, {"error": "Unauthorized", "message": "Invalid email or password"})
        asyncio.run(gateway.login(LoginCredentials(email="ada@example.edu", password="wrong")))

        assert session.token is None
        assert session.lecturer is None

    def test_logout_clears_session(self, gateway, http, session):
        session.start("tok-1", Lecturer.model_validate(LECTURER))
        http.request.return_value = http_response(200, {"message": "Logged out"})
        response = asyncio.run(gateway.logout())

        assert isinstance(response, ApiSuccess)
        assert sent(http)[2]["headers"]["Authorization"] == "Bearer tok-1"
        assert not session.has_token

    def test_logout_clears_session_on_network_error(self, gateway, http, session):
        session.start("tok-1")
        http.request.side_effect = requests.exceptions.Timeout("timed out")
        response = asyncio.run(gateway.logout())

        assert response.error == NETWORK_ERROR
        assert session.token is None


class TestMarks:
    """Test marks payloads."""

    def test_create_marks_uses_wire_names(self, gateway, http):
        http.request.return_value = http_response(201, MARKS)
        marks = MarksInput(student_id="s1", assignment=8, quiz=12, project=20, midsem=18, final_exam=25)
        asyncio.run(gateway.create_marks(marks))

        method, url, kwargs = sent(http)
        assert (method, url) == ("POST", "http://api.test/api/marks")
        assert kwargs["json"]["studentId"] == "s1"
        assert kwargs["json"]["finalExam"] == 25

    def test_update_sends_only_present_fields(self, gateway, http):
        http.request.return_value = http_response(200, MARKS)
        asyncio.run(gateway.update_marks("m1", MarksUpdate(final_exam=29)))

        method, url, kwargs = sent(http)
        assert (method, url) == ("PUT", "http://api.test/api/marks/m1")
        assert kwargs["json"] == {"finalExam": 29.0}

    def test_bulk_create(self, gateway, http):
        http.request.return_value = http_response(201, [MARKS])
        bulk = BulkMarksInput(marks=[
            MarksInput(student_id="s1", assignment=8, quiz=12, project=20, midsem=18, final_exam=25)
        ])
        response = asyncio.run(gateway.bulk_create_marks(bulk))

        assert sent(http)[1] == "http://api.test/api/marks/bulk"
        assert sent(http)[2]["json"]["marks"][0]["studentId"] == "s1"
        assert len(response.data) == 1
