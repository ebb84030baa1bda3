"""
Authentication state for gemini-gateway.

The gateway is either authenticated (an OAuth client plus a resolved Code
Assist project) or not. Request handlers read the current state from an
``AuthContainer``; login, logout and startup replace it as a whole.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..core import AuthenticationError
from ..models import AuthMethod, AuthStatus
from .oauth import OAuthClient


class Unauthenticated(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["unauthenticated"] = "unauthenticated"
    method: AuthMethod = "none"

    @property
    def project_id(self) -> Optional[str]:
        return None


class Authenticated(BaseModel):
    """Usable credentials and the project they are billed against."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Literal["authenticated"] = "authenticated"
    method: AuthMethod = "gemini-cli-oauth"
    client: OAuthClient
    project_id: str


AuthState = Union[Authenticated, Unauthenticated]


class AuthContainer:
    """Holds the current AuthState; replacements are atomic."""

    def __init__(self, initial: Optional[AuthState] = None):
        self._current: AuthState = initial or Unauthenticated()

    @property
    def current(self) -> AuthState:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self._current, Authenticated)

    def replace(self, state: AuthState) -> AuthState:
        """Install a new state and return the previous one."""
        previous = self._current
        self._current = state
        return previous

    def require(self) -> Authenticated:
        """
        Return the authenticated state.

        Raises:
            AuthenticationError: If the gateway is not signed in
        """
        state = self._current
        if not isinstance(state, Authenticated):
            raise AuthenticationError(
                "Not authenticated. Visit /auth/start to sign in with Google.",
                error_code="not_authenticated",
            )
        return state

    def status(self) -> AuthStatus:
        state = self._current
        return AuthStatus(
            authenticated=isinstance(state, Authenticated),
            method=state.method,
            project_id=state.project_id,
        )
