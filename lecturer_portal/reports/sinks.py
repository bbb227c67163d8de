"""
Delivery targets for rendered exports.
"""

import logging
import os
import webbrowser
from abc import ABC, abstractmethod
from pathlib import Path

from ..core.exceptions import ExportError
from .export import ExportData


logger = logging.getLogger(__name__)


class ExportSink(ABC):
    """Somewhere an export can be delivered to."""

    @abstractmethod
    def deliver(self, export: ExportData) -> str:
        """Deliver the export and return where it ended up.

        Raises:
            ExportError: if the export could not be delivered.
        """
        pass


class DirectorySink(ExportSink):
    """Writes exports into a directory, creating it when needed."""

    def __init__(self, directory: str):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def deliver(self, export: ExportData) -> str:
        target = self._directory / export.filename
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8", newline="") as f:
                f.write(export.data)
        except OSError as e:
            raise ExportError(f"Failed to write {target}: {e}", error_code="EXPORT_WRITE") from e
        logger.info("Wrote %s (%s)", target, export.mime_type)
        return str(target)


class BrowserPrintSink(DirectorySink):
    """Writes an HTML report and opens it in the browser for printing."""

    def deliver(self, export: ExportData) -> str:
        if export.mime_type != "text/html":
            raise ExportError(f"Cannot print {export.mime_type} exports", error_code="EXPORT_FORMAT")
        path = super().deliver(export)
        opened = webbrowser.open(Path(os.path.abspath(path)).as_uri())
        if not opened:
            raise ExportError("Failed to open print window. Please allow popups.",
                              error_code="EXPORT_PRINT")
        return path
