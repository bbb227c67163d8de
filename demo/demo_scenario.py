#!/usr/bin/env python3
"""
Demo scenario for the lecturer portal.

Starts the in-memory development backend on a background thread and walks
through a lecturer's session against it: login, roster, marks entry,
statistics and exports.
"""

import asyncio
import os
import sys
import tempfile
import threading
import time

import requests

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lecturer_portal.api import DevBackendAPI
from lecturer_portal.api.dev_server import DEMO_PASSWORD, SEED_LECTURER
from lecturer_portal.config import PortalConfig
from lecturer_portal.core import LoginCredentials, MarksInput, MarksUpdate
from lecturer_portal.main import LecturerPortal

HOST = "127.0.0.1"
PORT = 3055


def start_backend():
    """Run the development backend in a daemon thread and wait until it answers."""
    import uvicorn

    backend = DevBackendAPI()
    thread = threading.Thread(
        target=uvicorn.run,
        kwargs={"app": backend.app, "host": HOST, "port": PORT, "log_level": "warning"},
        daemon=True,
    )
    thread.start()

    for _ in range(50):
        try:
            requests.get(f"http://{HOST}:{PORT}/health", timeout=1)
            print(f"  ✓ Backend listening on http://{HOST}:{PORT}/api")
            return
        except requests.exceptions.ConnectionError:
            time.sleep(0.1)
    raise RuntimeError("Development backend did not start")


async def demonstrate_login(portal):
    print("  Rejected login keeps the backend's message...")
    await portal.auth.login(LoginCredentials(email=SEED_LECTURER["email"], password="wrong-password"))
    print(f"    error: {portal.auth.error}")

    await portal.auth.login(LoginCredentials(email=SEED_LECTURER["email"], password=DEMO_PASSWORD))
    lecturer = portal.auth.lecturer
    print(f"  ✓ Logged in as {lecturer.full_name} ({lecturer.course_name})")
    return lecturer


async def demonstrate_roster(portal, course_id):
    await portal.roster.fetch_students_with_marks(course_id)
    for student in portal.roster.students_with_marks:
        marks = student.marks
        summary = f"{marks.total_score:g} ({marks.grade.value})" if marks else "no marks yet"
        print(f"    {student.registration_number:<12} {student.full_name:<18} {summary}")


async def demonstrate_marks(portal, course_id):
    pending = [s for s in portal.roster.students_with_marks if s.marks is None]

    print("  Over-maximum assignment is rejected locally...")
    bad = MarksInput(student_id=pending[0].id, assignment=11, quiz=10, project=20, midsem=15, final_exam=25)
    await portal.marks.submit_marks(bad)
    print(f"    error: {portal.marks.error}")

    preview = portal.marks.preview(MarksInput(student_id=pending[0].id, assignment=8, quiz=12,
                                              project=20, midsem=18, final_exam=25))
    print(f"  Preview: total {preview.total_score:g}, grade {preview.grade.value}")

    batch = [
        MarksInput(student_id=pending[0].id, assignment=8, quiz=12, project=20, midsem=18, final_exam=25),
        MarksInput(student_id=pending[1].id, assignment=9.5, quiz=14, project=23.25, midsem=19, final_exam=28),
    ]
    await portal.marks.submit_bulk_marks(batch)
    print(f"  ✓ Bulk submission success: {portal.marks.success}")

    await portal.marks.fetch_marks(pending[0].id)
    current = portal.marks.current_marks
    await portal.marks.update_marks(current.id, MarksUpdate(final_exam=29))
    print(f"  ✓ Updated {pending[0].full_name}: {portal.marks.current_marks.total_score:g} "
          f"({portal.marks.current_marks.grade.value})")

    await portal.roster.refresh()


async def demonstrate_reporting(portal, lecturer):
    remote = await portal.reporting.fetch_statistics(lecturer.course_id)
    local = portal.reporting.calculate_statistics(portal.roster.students_with_marks,
                                                  lecturer.course_name, lecturer.course_id)
    print(f"    Backend: average {remote.average_score}, pass rate {remote.pass_rate}%")
    print(f"    Local:   average {local.average_score}, pass rate {local.pass_rate}%")

    students = portal.roster.students_with_marks
    print(f"  ✓ {portal.reporting.export_csv(students, lecturer.course_name)}")
    print(f"  ✓ {portal.reporting.export_statistics_csv(local)}")
    print(f"  ✓ {portal.reporting.export_html(students, lecturer.course_name, lecturer.full_name)}")


async def run_scenario(portal):
    print("\n2. Authentication...")
    lecturer = await demonstrate_login(portal)

    print("\n3. Course roster with marks...")
    await demonstrate_roster(portal, lecturer.course_id)

    print("\n4. Marks entry...")
    await demonstrate_marks(portal, lecturer.course_id)

    print("\n5. Statistics and exports...")
    await demonstrate_reporting(portal, lecturer)

    await portal.auth.logout()
    print(f"\n  ✓ Logged out, authenticated: {portal.auth.is_authenticated}")


def run_demo():
    """Run a walkthrough of the lecturer portal."""
    print("=" * 60)
    print("LECTURER PORTAL - DEMO")
    print("=" * 60)

    print("\n1. Starting development backend...")
    start_backend()

    export_dir = tempfile.mkdtemp(prefix="lecturer_portal_")
    config = PortalConfig(api_base_url=f"http://{HOST}:{PORT}/api", export_dir=export_dir)

    with LecturerPortal(config) as portal:
        asyncio.run(run_scenario(portal))

    print("\n" + "=" * 60)
    print("DEMO COMPLETED SUCCESSFULLY!")
    print("=" * 60)


if __name__ == "__main__":
    run_demo()
