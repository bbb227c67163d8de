"""
Workflow coordinators sitting between a user interface and the gateway.
"""

from .base import BaseCoordinator
from .auth_coordinator import AuthCoordinator
from .roster_coordinator import RosterCoordinator, join_marks
from .marks_coordinator import MarksCoordinator
from .reporting_coordinator import ReportingCoordinator

__all__ = [
    "BaseCoordinator",
    "AuthCoordinator",
    "RosterCoordinator",
    "MarksCoordinator",
    "ReportingCoordinator",
    "join_marks",
]
