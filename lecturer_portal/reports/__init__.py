"""
Report exports (CSV and printable HTML) and their delivery sinks.
"""

from .export import (
    ExportData, MARKS_CSV_HEADERS, build_filename, export_marks_csv, export_marks_html,
    export_statistics_csv, parse_csv, sanitize_name
)
from .sinks import BrowserPrintSink, DirectorySink, ExportSink

__all__ = [
    "ExportData",
    "MARKS_CSV_HEADERS",
    "build_filename",
    "export_marks_csv",
    "export_marks_html",
    "export_statistics_csv",
    "parse_csv",
    "sanitize_name",
    "ExportSink",
    "DirectorySink",
    "BrowserPrintSink",
]
