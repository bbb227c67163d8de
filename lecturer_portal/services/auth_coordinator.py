"""
Authentication workflow: login, logout, registration and profile loading.
"""

import logging
from typing import Optional

from ..api.gateway import ApiSuccess, RemoteGateway
from ..core.models import Lecturer, LecturerRegistrationData, LoginCredentials
from ..core.session import SessionContext
from ..core.validation import first_error, validate_lecturer_registration, validate_login_credentials
from .base import BaseCoordinator


logger = logging.getLogger(__name__)


class AuthCoordinator(BaseCoordinator):
    """Keeps the signed-in lecturer in step with the shared session."""

    def __init__(self, gateway: RemoteGateway, session: SessionContext):
        super().__init__(gateway)
        self._session = session
        self._is_loading = False
        self._is_authenticating = False
        self._is_registering = False

    @property
    def lecturer(self) -> Optional[Lecturer]:
        return self._session.lecturer

    @property
    def is_authenticated(self) -> bool:
        return self._session.lecturer is not None

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_authenticating(self) -> bool:
        return self._is_authenticating

    @property
    def is_registering(self) -> bool:
        return self._is_registering

    async def initialize(self) -> bool:
        """Load the profile for a session that already holds a token.

        A token the backend no longer accepts is dropped.
        """
        if not self._session.has_token:
            return False

        self._is_loading = True
        try:
            response = await self._gateway.get_profile()
            if isinstance(response, ApiSuccess):
                self._session.set_lecturer(response.data)
                return True
            logger.info("Stored session rejected (%s), clearing it", response.error)
            self._session.clear()
            return False
        except Exception:
            logger.exception("Failed to load profile")
            return False
        finally:
            self._is_loading = False

    async def login(self, credentials: LoginCredentials) -> bool:
        """Log in; on failure the backend's message is kept in ``error``."""
        self._error = None
        validation = validate_login_credentials(credentials)
        if not validation.is_valid:
            self._error = first_error(validation)
            return False

        self._is_authenticating = True
        try:
            response = await self._gateway.login(credentials)
            if isinstance(response, ApiSuccess):
                logger.info("Lecturer %s logged in", response.data.lecturer.id)
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("An unexpected error occurred during login")
            return False
        finally:
            self._is_authenticating = False

    async def logout(self) -> None:
        """Log out; local state is cleared even if the backend call fails."""
        try:
            response = await self._gateway.logout()
            if not isinstance(response, ApiSuccess):
                logger.warning("Logout request failed: %s", response.message)
            self._error = None
        except Exception:
            logger.exception("Logout error")
        finally:
            self._session.clear()

    async def register(self, data: LecturerRegistrationData) -> bool:
        """Register a new lecturer account. Does not log in."""
        self._error = None
        validation = validate_lecturer_registration(data)
        if not validation.is_valid:
            self._error = first_error(validation)
            return False

        self._is_registering = True
        try:
            response = await self._gateway.register(data)
            if isinstance(response, ApiSuccess):
                return True
            self._remote_failure(response)
            return False
        except Exception:
            self._unexpected("An unexpected error occurred during registration")
            return False
        finally:
            self._is_registering = False

    async def refresh_profile(self) -> None:
        """Reload the lecturer profile; failures leave the current one in place."""
        if not self._session.has_token:
            return
        try:
            response = await self._gateway.get_profile()
            if isinstance(response, ApiSuccess):
                self._session.set_lecturer(response.data)
            else:
                logger.warning("Failed to refresh profile: %s", response.message)
        except Exception:
            logger.exception("Failed to refresh profile")
