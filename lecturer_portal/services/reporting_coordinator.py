"""
Reporting workflow: class statistics and report exports.
"""

from typing import Callable, Optional, Sequence

from ..api.gateway import ApiSuccess, RemoteGateway
from ..core.models import ClassStatistics, StudentWithMarks
from ..core.statistics import class_statistics
from ..reports.export import ExportData, export_marks_csv, export_marks_html, export_statistics_csv
from ..reports.sinks import ExportSink
from .base import BaseCoordinator


class ReportingCoordinator(BaseCoordinator):
    """Produces statistics and hands rendered reports to export sinks.

    ``sink`` receives file exports; ``print_sink`` receives reports meant
    for printing and defaults to ``sink``.
    """

    def __init__(self, gateway: RemoteGateway, sink: ExportSink,
                 print_sink: Optional[ExportSink] = None):
        super().__init__(gateway)
        self._sink = sink
        self._print_sink = print_sink or sink
        self._statistics: Optional[ClassStatistics] = None
        self._is_loading_statistics = False
        self._is_exporting = False

    @property
    def statistics(self) -> Optional[ClassStatistics]:
        return self._statistics

    @property
    def is_loading_statistics(self) -> bool:
        return self._is_loading_statistics

    @property
    def is_exporting(self) -> bool:
        return self._is_exporting

    async def fetch_statistics(self, course_id: str) -> Optional[ClassStatistics]:
        """Fetch course statistics computed by the backend."""
        self._error = None
        self._is_loading_statistics = True
        try:
            response = await self._gateway.get_course_statistics(course_id)
            if isinstance(response, ApiSuccess):
                self._statistics = response.data
                return response.data
            self._remote_failure(response)
            return None
        except Exception:
            self._unexpected("Failed to fetch statistics")
            return None
        finally:
            self._is_loading_statistics = False

    def calculate_statistics(self, students: Sequence[StudentWithMarks], course_name: str,
                             course_id: str) -> ClassStatistics:
        """Compute statistics locally from an already fetched roster."""
        self._statistics = class_statistics(students, course_id, course_name)
        return self._statistics

    def _deliver(self, render: Callable[[], ExportData], sink: ExportSink,
                 failure_message: str) -> Optional[str]:
        self._error = None
        self._is_exporting = True
        try:
            return sink.deliver(render())
        except Exception:
            self._unexpected(failure_message)
            return None
        finally:
            self._is_exporting = False

    def export_csv(self, students: Sequence[StudentWithMarks], course_name: str) -> Optional[str]:
        """Export marks to CSV; returns where the file was delivered."""
        return self._deliver(lambda: export_marks_csv(students, course_name),
                             self._sink, "Failed to export CSV")

    def export_statistics_csv(self, statistics: ClassStatistics) -> Optional[str]:
        """Export statistics to CSV."""
        return self._deliver(lambda: export_statistics_csv(statistics),
                             self._sink, "Failed to export statistics CSV")

    def export_html(self, students: Sequence[StudentWithMarks], course_name: str,
                    lecturer_name: str) -> Optional[str]:
        """Export marks to a printable HTML file."""
        return self._deliver(lambda: export_marks_html(students, course_name, lecturer_name),
                             self._sink, "Failed to export HTML")

    def print_marks(self, students: Sequence[StudentWithMarks], course_name: str,
                    lecturer_name: str) -> Optional[str]:
        """Render the printable report and send it to the print sink."""
        return self._deliver(lambda: export_marks_html(students, course_name, lecturer_name),
                             self._print_sink, "Failed to print")
