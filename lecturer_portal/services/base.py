"""
Shared state handling for the workflow coordinators.
"""

import logging
from typing import Optional

from ..api.gateway import ApiFailure, RemoteGateway


logger = logging.getLogger(__name__)


class BaseCoordinator:
    """Holds the gateway and the last user-facing error message.

    Coordinators never raise to their callers: remote failures and invalid
    input end up in ``error``, unexpected exceptions are logged and replaced
    by a generic message.
    """

    def __init__(self, gateway: RemoteGateway):
        self._gateway = gateway
        self._error: Optional[str] = None

    @property
    def error(self) -> Optional[str]:
        return self._error

    def clear_error(self) -> None:
        """Clear error message."""
        self._error = None

    def _remote_failure(self, response: ApiFailure) -> None:
        logger.warning("%s: remote call failed (%s): %s", type(self).__name__, response.error, response.message)
        self._error = response.message

    def _unexpected(self, message: str) -> None:
        # only valid inside an except block
        logger.exception("%s: %s", type(self).__name__, message)
        self._error = message
