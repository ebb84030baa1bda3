"""
Authentication lifecycle for gemini-gateway.

The manager owns the credential store and the ``AuthContainer``. It
resolves stored credentials at startup, completes the browser login flow,
persists refreshed tokens and signs out.
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict, Optional

import httpx
import keyring.errors

from ..core import (
    Settings,
    GatewayError,
    get_logger,
    get_settings,
    generate_state,
    log_auth_event,
    log_error,
    mask_sensitive_data,
)
from ..models import LoginResponse, OAuthCredentials
from .credential_store import CredentialStore
from .oauth import OAuthClient
from .project import load_project_id
from .state import AuthContainer, AuthState, Authenticated, Unauthenticated


class AuthManager:
    """Resolves, establishes and clears the gateway's Google credentials."""

    def __init__(
        self,
        store: CredentialStore,
        http_client: httpx.AsyncClient,
        settings: Optional[Settings] = None,
        container: Optional[AuthContainer] = None,
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self.store = store
        self.http_client = http_client
        self.container = container or AuthContainer()

        # Pending login states -> monotonic deadline
        self._pending_states: Dict[str, float] = {}

    def _new_oauth_client(self, credentials: Optional[OAuthCredentials] = None) -> OAuthClient:
        return OAuthClient(
            self.settings.auth,
            http_client=self.http_client,
            credentials=credentials,
            on_tokens=self._persist_tokens,
        )

    async def _persist_tokens(self, credentials: OAuthCredentials) -> None:
        await asyncio.to_thread(self.store.save, credentials)
        self.logger.debug("Persisted refreshed tokens", **mask_sensitive_data(credentials.model_dump()))

    async def _load_project_id(self, access_token: str) -> str:
        return await load_project_id(
            self.http_client,
            access_token,
            self.settings.gemini.code_assist_base_url,
            self.settings.gemini.project_id,
        )

    async def resolve_auth_optional(self) -> AuthState:
        """
        Resolve stored credentials into an AuthState.

        Never raises: any failure (no record, refresh rejected, project
        lookup failed, keyring unavailable) settles to Unauthenticated.
        The result is installed in the container.
        """
        try:
            state = await self._resolve()
        except Exception as e:
            log_error(self.logger, e, {"operation": "resolve_auth"})
            log_auth_event(self.logger, "resolve_failed", success=False, details={"error": str(e)})
            state = Unauthenticated()

        self.container.replace(state)
        return state

    async def _resolve(self) -> AuthState:
        credentials = await asyncio.to_thread(self.store.load)
        if credentials is None or not credentials.refresh_token:
            self.logger.info("No stored credentials; sign in via /auth/start")
            return Unauthenticated()

        client = self._new_oauth_client(credentials)
        access_token = await client.get_access_token()
        project_id = await self._load_project_id(access_token)

        log_auth_event(self.logger, "resolved", success=True, details={"project_id": project_id})
        return Authenticated(client=client, project_id=project_id)

    async def complete_oauth_flow(self, code: str, redirect_uri: str) -> Authenticated:
        """
        Exchange an authorization code and sign the gateway in.

        Credentials are persisted only after the project is resolved, so a
        failed login leaves the store and the current state untouched.

        Args:
            code: Authorization code from the callback
            redirect_uri: Redirect URI the code was issued for

        Returns:
            The new authenticated state

        Raises:
            AuthenticationError: If the exchange fails or yields no refresh token
            APIError: If loadCodeAssist fails
            ProjectResolutionError: If no project id is available
        """
        client = self._new_oauth_client()
        credentials = await client.exchange_code_for_tokens(code, redirect_uri)
        project_id = await self._load_project_id(credentials.access_token)

        await asyncio.to_thread(self.store.save, credentials)

        state = Authenticated(client=client, project_id=project_id)
        self.container.replace(state)
        log_auth_event(self.logger, "login", success=True, details={"project_id": project_id})
        return state

    async def logout(self) -> None:
        """
        Delete stored credentials and drop the current state.

        The state is reset even when the keyring refuses the delete.

        Raises:
            GatewayError: If the stored record could not be deleted
        """
        try:
            await asyncio.to_thread(self.store.clear)
        except keyring.errors.KeyringError as e:
            log_auth_event(self.logger, "logout", success=False, details={"error": str(e)})
            raise GatewayError(
                "Signed out, but the stored credentials could not be deleted from the keyring.",
                error_code="credential_delete_failed",
                details={"keyring_error": type(e).__name__},
            )
        finally:
            self.container.replace(Unauthenticated())

        log_auth_event(self.logger, "logout", success=True)

    def begin_login(self, redirect_uri: str) -> LoginResponse:
        """Register a single-use state and build the consent URL."""
        self._prune_states()
        state = generate_state()
        self._pending_states[state] = time.monotonic() + self.settings.auth.login_state_ttl

        auth_url = self._new_oauth_client().generate_auth_url(redirect_uri, state)
        log_auth_event(self.logger, "login_started", success=True)
        return LoginResponse(auth_url=auth_url, state=state)

    def consume_login_state(self, state: str) -> bool:
        """Return True once for a state issued by begin_login that has not expired."""
        self._prune_states()
        return self._pending_states.pop(state, None) is not None

    def _prune_states(self) -> None:
        now = time.monotonic()
        for state, deadline in list(self._pending_states.items()):
            if deadline <= now:
                del self._pending_states[state]
