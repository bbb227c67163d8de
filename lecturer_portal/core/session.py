"""
Session context holding the authentication token and signed-in lecturer.

One context is shared by the gateway (which reads the token for the
Authorization header) and the authentication coordinator (which starts and
clears it). Nothing is stored outside the process.
"""

from typing import Optional

from .models import Lecturer


class SessionContext:
    """Explicit replacement for ambient token storage."""

    def __init__(self, token: Optional[str] = None, lecturer: Optional[Lecturer] = None):
        self._token = token
        self._lecturer = lecturer

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def lecturer(self) -> Optional[Lecturer]:
        return self._lecturer

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    @property
    def is_authenticated(self) -> bool:
        return self.has_token and self._lecturer is not None

    def start(self, token: str, lecturer: Optional[Lecturer] = None) -> None:
        """Begin a session with a freshly issued token."""
        self._token = token
        self._lecturer = lecturer

    def set_lecturer(self, lecturer: Optional[Lecturer]) -> None:
        """Replace the cached lecturer profile."""
        self._lecturer = lecturer

    def clear(self) -> None:
        """Forget the token and lecturer."""
        self._token = None
        self._lecturer = None

    def __repr__(self) -> str:
        return f"SessionContext(authenticated={self.is_authenticated})"
