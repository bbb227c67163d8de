"""
Marks entry workflow: validate locally, then submit, update or fetch.

Invalid input never reaches the gateway.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from ..api.gateway import ApiSuccess, RemoteGateway
from ..core.models import AssessmentScores, BulkMarksInput, GradedRecord, MarksInput, MarksUpdate, StudentMarks
from ..core.statistics import grade_record
from ..core.validation import first_error, validate_bulk_marks, validate_marks, validate_marks_update
from .base import BaseCoordinator


logger = logging.getLogger(__name__)


class MarksCoordinator(BaseCoordinator):
    """Tracks the current marks record and submission status."""

    def __init__(self, gateway: RemoteGateway):
        super().__init__(gateway)
        self._current_marks: Optional[StudentMarks] = None
        self._is_submitting = False
        self._is_updating = False
        self._is_fetching = False
        self._success = False

    @property
    def current_marks(self) -> Optional[StudentMarks]:
        return self._current_marks

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def is_updating(self) -> bool:
        return self._is_updating

    @property
    def is_fetching(self) -> bool:
        return self._is_fetching

    @property
    def success(self) -> bool:
        return self._success

    def clear_status(self) -> None:
        """Clear success and error status."""
        self._error = None
        self._success = False

    async def submit_marks(self, marks: MarksInput) -> bool:
        """Submit new marks for one student."""
        self.clear_status()
        validation = validate_marks(marks)
        if not validation.is_valid:
            self._error = first_error(validation)
            return False

        self._is_submitting = True
        try:
            response = await self._gateway.create_marks(marks)
            if isinstance(response, ApiSuccess):
                self._current_marks = response.data
                self._success = True
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("An unexpected error occurred while submitting marks")
            return False
        finally:
            self._is_submitting = False

    async def update_marks(self, marks_id: str, update: MarksUpdate) -> bool:
        """Apply a partial update to an existing marks record.

        Components present in the update are checked on their own; the total
        is checked only when every component is present.
        """
        self.clear_status()
        validation = validate_marks_update(update)
        if not validation.is_valid:
            self._error = first_error(validation)
            return False

        self._is_updating = True
        try:
            response = await self._gateway.update_marks(marks_id, update)
            if isinstance(response, ApiSuccess):
                self._current_marks = response.data
                self._success = True
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("An unexpected error occurred while updating marks")
            return False
        finally:
            self._is_updating = False

    async def submit_bulk_marks(self,
                                bulk: Union[BulkMarksInput, List[Union[MarksInput, Mapping[str, Any]]]]) -> bool:
        """Submit marks for several students at once; the batch is validated as a whole.

        Entries may be ``MarksInput`` models or raw form mappings. Raw entries
        are only turned into models once the whole batch is valid.
        """
        self.clear_status()
        entries = bulk if isinstance(bulk, BulkMarksInput) else list(bulk)
        validation = validate_bulk_marks(entries)
        if not validation.is_valid:
            self._error = first_error(validation)
            return False

        self._is_submitting = True
        try:
            if not isinstance(bulk, BulkMarksInput):
                bulk = BulkMarksInput(marks=entries)
            response = await self._gateway.bulk_create_marks(bulk)
            if isinstance(response, ApiSuccess):
                logger.info("Submitted marks for %d students", len(bulk.marks))
                self._success = True
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("An unexpected error occurred while submitting bulk marks")
            return False
        finally:
            self._is_submitting = False

    async def fetch_marks(self, student_id: str) -> Optional[StudentMarks]:
        """Fetch the marks recorded for a student."""
        self._error = None
        self._is_fetching = True
        try:
            response = await self._gateway.get_marks_by_student(student_id)
            if isinstance(response, ApiSuccess):
                self._current_marks = response.data
                return response.data
            self._remote_failure(response)
            return None
        except Exception:
            self._unexpected("Failed to fetch marks")
            return None
        finally:
            self._is_fetching = False

    def validate_input(self, marks: MarksInput) -> bool:
        """Validate without submitting; the first problem is kept in ``error``."""
        validation = validate_marks(marks)
        self._error = first_error(validation)
        return validation.is_valid

    @staticmethod
    def preview(scores: AssessmentScores) -> GradedRecord:
        """Total and grade for a set of scores, computed locally."""
        return grade_record(scores)
