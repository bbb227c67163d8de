"""
Custom exceptions for the lecturer portal.

Expected failures (bad input, remote errors) are reported as values; these
exceptions cover configuration problems, broken invariants and I/O faults.
"""

from typing import Optional, Any, Dict


class LecturerPortalError(Exception):
    """Base exception for all lecturer portal errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(LecturerPortalError):
    """Raised when configuration is invalid."""
    pass


class GradeBoundaryError(LecturerPortalError):
    """Raised when a score matches no grade boundary."""
    pass


class ResponseFormatError(LecturerPortalError):
    """Raised when a backend payload does not have the expected shape."""
    pass


class ExportError(LecturerPortalError):
    """Raised when an export cannot be delivered."""
    pass
