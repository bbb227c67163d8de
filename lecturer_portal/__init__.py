"""
Lecturer Portal: client-side grading workflow for university lecturers.

Validates lecturer input, computes totals and letter grades, aggregates class
statistics and renders exportable marks reports, on top of a thin asynchronous
gateway to the examination system's REST backend.
"""

__version__ = "1.0.0"
__author__ = "Lecturer Module Team"
__description__ = "Grading, statistics and reporting layer for lecturers"
