"""
Development backend for the lecturer portal using FastAPI.

Implements the routes the RemoteGateway talks to, over in-memory seed data,
so the client can be exercised locally without the real examination system.
Nothing is persisted.
"""

import hashlib
import logging
import secrets
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.models import (
    BulkMarksInput, Lecturer, LecturerRegistrationData, LoginCredentials, MarksInput,
    MarksUpdate, Student, StudentMarks, StudentWithMarks
)
from ..core.statistics import class_statistics
from ..core.validation import (
    ValidationResult, first_error, validate_bulk_marks, validate_lecturer_registration,
    validate_login_credentials, validate_marks, validate_marks_update
)


logger = logging.getLogger(__name__)

API_PREFIX = "/api"

DEMO_PASSWORD = "Password123"

SEED_COURSES: Dict[str, str] = {
    "course-cs301": "Data Structures & Algorithms",
    "course-cs205": "Database Systems",
}

SEED_LECTURER = {
    "id": "lecturer-001",
    "first_name": "Grace",
    "last_name": "Wanjiru",
    "email": "grace.wanjiru@example.edu",
    "phone": "+254712345678",
    "course_id": "course-cs301",
}

SEED_STUDENTS = [
    ("student-001", "Brian", "Otieno", "CS/2021/001"),
    ("student-002", "Faith", "Achieng", "CS/2021/002"),
    ("student-003", "Kevin", "Mutua", "CS/2021/003"),
    ("student-004", "Mercy", "Njeri", "CS/2021/004"),
    ("student-005", "Dennis", "O'Brien", "CS/2021/005"),
]

# student id -> (assignment, quiz, project, midsem, final_exam)
SEED_MARKS = {
    "student-001": (9, 13.5, 22, 18, 27),
    "student-002": (8, 12, 20, 18, 25),
    "student-003": (5, 7, 12, 10, 14),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _student_email(first_name: str, last_name: str) -> str:
    local = f"{first_name}.{last_name}".lower().replace("'", "")
    return f"{local}@students.example.edu"


def _fail(status_code: int, error: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": error, "message": message})


def _invalid(result: ValidationResult) -> HTTPException:
    return _fail(status.HTTP_400_BAD_REQUEST, "Validation failed", first_error(result) or "Invalid input")


def _ok(data: Any, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


class DevBackendAPI:
    """In-memory REST backend speaking the same contract as the real one."""

    def __init__(self, seed: bool = True):
        self._lock = threading.RLock()

        self._courses: Dict[str, str] = {}
        self._lecturers: Dict[str, Lecturer] = {}
        self._passwords: Dict[str, str] = {}
        self._students: Dict[str, Student] = {}
        self._marks: Dict[str, StudentMarks] = {}
        self._tokens: Dict[str, str] = {}

        if seed:
            self._seed()

        self.app = FastAPI(
            title="Lecturer Portal Development API",
            description="In-memory backend for local development of the lecturer portal",
            version=__version__,
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_error_handlers()
        self._setup_routes()

    # ============================================
    # Seed data
    # ============================================

    def _seed(self) -> None:
        created = _now()
        self._courses.update(SEED_COURSES)

        lecturer = Lecturer(course_name=SEED_COURSES[SEED_LECTURER["course_id"]],
                            created_at=created, **SEED_LECTURER)
        self._lecturers[lecturer.id] = lecturer
        self._passwords[lecturer.id] = _hash_password(DEMO_PASSWORD)

        for student_id, first_name, last_name, registration_number in SEED_STUDENTS:
            self._students[student_id] = Student(
                id=student_id,
                first_name=first_name,
                last_name=last_name,
                email=_student_email(first_name, last_name),
                registration_number=registration_number,
                course_id=lecturer.course_id,
                created_at=created,
            )

        for student_id, scores in SEED_MARKS.items():
            assignment, quiz, project, midsem, final_exam = scores
            self._store_marks(MarksInput(student_id=student_id, assignment=assignment, quiz=quiz,
                                         project=project, midsem=midsem, final_exam=final_exam),
                              lecturer)

    def _store_marks(self, marks: MarksInput, lecturer: Lecturer) -> StudentMarks:
        now = _now()
        record = StudentMarks(
            id=f"marks-{uuid.uuid4().hex[:12]}",
            student_id=marks.student_id,
            course_id=lecturer.course_id,
            lecturer_id=lecturer.id,
            assignment=marks.assignment,
            quiz=marks.quiz,
            project=marks.project,
            midsem=marks.midsem,
            final_exam=marks.final_exam,
            submitted_at=now,
            updated_at=now,
        )
        self._marks[record.id] = record
        return record

    # ============================================
    # Lookups
    # ============================================

    def _marks_for_student(self, student_id: str) -> Optional[StudentMarks]:
        for record in self._marks.values():
            if record.student_id == student_id:
                return record
        return None

    def _course_students(self, course_id: str) -> List[Student]:
        return [student for student in self._students.values() if student.course_id == course_id]

    def _require_course_student(self, student_id: str, lecturer: Lecturer) -> Student:
        student = self._students.get(student_id)
        if not student:
            raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Student {student_id} not found")
        if student.course_id != lecturer.course_id:
            raise _fail(status.HTTP_403_FORBIDDEN, "Forbidden", "Student is not registered for your course")
        return student

    def _current_lecturer(self, authorization: Optional[str] = Header(default=None)) -> Lecturer:
        """Resolve the bearer token to a lecturer."""
        if not authorization or not authorization.startswith("Bearer "):
            raise _fail(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Authentication required")
        token = authorization[len("Bearer "):]
        with self._lock:
            lecturer_id = self._tokens.get(token)
            if not lecturer_id:
                raise _fail(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Session expired, please log in again")
            return self._lecturers[lecturer_id]

    # ============================================
    # Error bodies
    # ============================================

    def _setup_error_handlers(self):
        """Render every error as ``{"error": ..., "message": ...}``."""

        @self.app.exception_handler(HTTPException)
        async def http_error(request: Request, exc: HTTPException):
            if isinstance(exc.detail, dict):
                content = exc.detail
            else:
                content = {"error": "Request failed", "message": str(exc.detail)}
            return JSONResponse(status_code=exc.status_code, content=content)

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_error(request: Request, exc: RequestValidationError):
            errors = exc.errors()
            message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
            return JSONResponse(
                status_code=422,
                content={"error": "Validation failed", "message": message},
            )

    # ============================================
    # Routes
    # ============================================

    def _setup_routes(self):
        """Setup API routes."""
        router = APIRouter(prefix=API_PREFIX)
        current_lecturer = self._current_lecturer

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            """Health check endpoint."""
            return {"status": "healthy", "timestamp": _now()}

        # Authentication endpoints
        @router.post("/auth/login")
        async def login(credentials: LoginCredentials):
            """Exchange email and password for a bearer token."""
            result = validate_login_credentials(credentials)
            if not result.is_valid:
                raise _invalid(result)
            with self._lock:
                for lecturer in self._lecturers.values():
                    if (lecturer.email.lower() == credentials.email.lower()
                            and self._passwords[lecturer.id] == _hash_password(credentials.password)):
                        token = secrets.token_urlsafe(32)
                        self._tokens[token] = lecturer.id
                        logger.info("Lecturer %s logged in", lecturer.id)
                        return _ok({"token": token, "lecturer": lecturer.to_payload()}, "Login successful")
            raise _fail(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Invalid email or password")

        @router.post("/auth/register", status_code=status.HTTP_201_CREATED)
        async def register(data: LecturerRegistrationData):
            """Create a lecturer account for an existing course."""
            result = validate_lecturer_registration(data)
            if not result.is_valid:
                raise _invalid(result)
            with self._lock:
                if any(existing.email.lower() == data.email.lower() for existing in self._lecturers.values()):
                    raise _fail(status.HTTP_409_CONFLICT, "Conflict", "Email is already registered")
                if data.course_id not in self._courses:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Course {data.course_id} not found")
                lecturer = Lecturer(
                    id=f"lecturer-{uuid.uuid4().hex[:8]}",
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    phone=data.phone,
                    course_id=data.course_id,
                    course_name=self._courses[data.course_id],
                    created_at=_now(),
                )
                self._lecturers[lecturer.id] = lecturer
                self._passwords[lecturer.id] = _hash_password(data.password)
                return _ok(lecturer.to_payload(), "Registration successful")

        @router.post("/auth/logout")
        async def logout(authorization: Optional[str] = Header(default=None)):
            """Revoke the presented token, if any."""
            if authorization and authorization.startswith("Bearer "):
                with self._lock:
                    self._tokens.pop(authorization[len("Bearer "):], None)
            return _ok(None, "Logged out")

        @router.get("/lecturer/profile")
        async def get_profile(lecturer: Lecturer = Depends(current_lecturer)):
            """Get the signed-in lecturer."""
            return _ok(lecturer.to_payload())

        # Student endpoints
        @router.get("/courses/{course_id}/students")
        async def get_students_by_course(course_id: str, lecturer: Lecturer = Depends(current_lecturer)):
            """List the students registered for a course."""
            with self._lock:
                if course_id not in self._courses:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Course {course_id} not found")
                return _ok([student.to_payload() for student in self._course_students(course_id)])

        @router.get("/students/{student_id}")
        async def get_student(student_id: str, lecturer: Lecturer = Depends(current_lecturer)):
            """Get a student by ID."""
            with self._lock:
                student = self._students.get(student_id)
                if not student:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Student {student_id} not found")
                return _ok(student.to_payload())

        # Marks endpoints
        @router.post("/marks", status_code=status.HTTP_201_CREATED)
        async def create_marks(marks: MarksInput, lecturer: Lecturer = Depends(current_lecturer)):
            """Record marks for one student."""
            result = validate_marks(marks)
            if not result.is_valid:
                raise _invalid(result)
            with self._lock:
                self._require_course_student(marks.student_id, lecturer)
                if self._marks_for_student(marks.student_id):
                    raise _fail(status.HTTP_409_CONFLICT, "Conflict", "Marks already exist for this student")
                record = self._store_marks(marks, lecturer)
                return _ok(record.to_payload(), "Marks submitted successfully")

        @router.post("/marks/bulk", status_code=status.HTTP_201_CREATED)
        async def bulk_create_marks(bulk: BulkMarksInput, lecturer: Lecturer = Depends(current_lecturer)):
            """Record marks for several students; nothing is stored if any entry is rejected."""
            result = validate_bulk_marks(bulk)
            if not result.is_valid:
                raise _invalid(result)
            with self._lock:
                for entry in bulk.marks:
                    self._require_course_student(entry.student_id, lecturer)
                    if self._marks_for_student(entry.student_id):
                        raise _fail(status.HTTP_409_CONFLICT, "Conflict",
                                    f"Marks already exist for student {entry.student_id}")
                records = [self._store_marks(entry, lecturer) for entry in bulk.marks]
                return _ok([record.to_payload() for record in records],
                           f"Marks submitted for {len(records)} students")

        @router.put("/marks/{marks_id}")
        async def update_marks(marks_id: str, update: MarksUpdate,
                               lecturer: Lecturer = Depends(current_lecturer)):
            """Apply a partial update to a marks record."""
            result = validate_marks_update(update)
            if not result.is_valid:
                raise _invalid(result)
            with self._lock:
                existing = self._marks.get(marks_id)
                if not existing:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Marks {marks_id} not found")
                if existing.lecturer_id != lecturer.id:
                    raise _fail(status.HTTP_403_FORBIDDEN, "Forbidden", "You can only update marks you submitted")
                changes = update.model_dump(exclude_none=True, exclude={"student_id"})
                merged = StudentMarks.model_validate({**existing.model_dump(), **changes, "updated_at": _now()})
                check = validate_marks(merged)
                if not check.is_valid:
                    raise _invalid(check)
                self._marks[marks_id] = merged
                return _ok(merged.to_payload(), "Marks updated successfully")

        @router.get("/marks/student/{student_id}")
        async def get_marks_by_student(student_id: str, lecturer: Lecturer = Depends(current_lecturer)):
            """Get the marks recorded for one student."""
            with self._lock:
                record = self._marks_for_student(student_id)
                if not record:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", "No marks found for this student")
                return _ok(record.to_payload())

        @router.get("/marks/course/{course_id}")
        async def get_marks_by_course(course_id: str, lecturer: Lecturer = Depends(current_lecturer)):
            """List every marks record for a course."""
            with self._lock:
                return _ok([record.to_payload() for record in self._marks.values()
                            if record.course_id == course_id])

        # Statistics endpoints
        @router.get("/statistics/course/{course_id}")
        async def get_course_statistics(course_id: str, lecturer: Lecturer = Depends(current_lecturer)):
            """Compute class statistics for a course."""
            with self._lock:
                if course_id not in self._courses:
                    raise _fail(status.HTTP_404_NOT_FOUND, "Not found", f"Course {course_id} not found")
                roster = [
                    StudentWithMarks(**student.model_dump(), marks=self._marks_for_student(student.id))
                    for student in self._course_students(course_id)
                ]
                statistics = class_statistics(roster, course_id, self._courses[course_id])
                return _ok(statistics.to_payload())

        self.app.include_router(router)


def create_app(seed: bool = True) -> FastAPI:
    """Build the development backend application."""
    return DevBackendAPI(seed=seed).app
