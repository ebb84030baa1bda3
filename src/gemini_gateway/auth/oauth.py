"""
OAuth authentication implementation for gemini-gateway.

This module handles the Google OAuth 2.0 installed-app flow used by
gemini-cli: authorization URL generation, authorization code exchange and
access token refresh.
"""

from __future__ import annotations

import json
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

import httpx

from ..core import (
    AuthConfig,
    get_logger,
    get_settings,
    AuthenticationError,
    ConfigurationError,
    TokenError,
    TokenRefreshError,
    log_auth_event,
    log_upstream_error,
)
from ..models import OAuthCredentials

TokenListener = Callable[[OAuthCredentials], Awaitable[None]]


def load_oauth_client_config(config: AuthConfig) -> Tuple[str, str]:
    """
    Resolve the OAuth client id and secret.

    Environment values win; otherwise ``client_config_file`` is read
    (``{"clientId": ..., "clientSecret": ...}``).

    Raises:
        ConfigurationError: If neither source provides both values
    """
    if config.client_id and config.client_secret:
        return config.client_id, config.client_secret

    try:
        raw = json.loads(config.client_config_file.read_text(encoding="utf-8"))
        return raw["clientId"], raw["clientSecret"]
    except (OSError, ValueError, KeyError, TypeError):
        raise ConfigurationError(
            "Gemini CLI OAuth credentials not found. Either set GEMINI_CLI_CLIENT_ID and "
            "GEMINI_CLI_CLIENT_SECRET, or create oauth-client.json with clientId and "
            "clientSecret. The values are public and can be found in the gemini-cli source: "
            "https://github.com/google-gemini/gemini-cli",
            error_code="oauth_client_missing",
        )


class OAuthClient:
    """OAuth client holding one Google credential record."""

    auth_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        config: Optional[AuthConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        credentials: Optional[OAuthCredentials] = None,
        on_tokens: Optional[TokenListener] = None,
    ):
        self.settings = get_settings()
        self.logger = get_logger(__name__)
        self.auth_config = config or self.settings.auth
        self.client_id, self.client_secret = load_oauth_client_config(self.auth_config)

        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(30.0),
            headers={"User-Agent": f"{self.settings.app_name}/{self.settings.app_version}"}
        )
        self._credentials = credentials
        self._on_tokens = on_tokens

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @property
    def credentials(self) -> Optional[OAuthCredentials]:
        return self._credentials

    def generate_auth_url(self, redirect_uri: str, state: str) -> str:
        """
        Build the Google consent URL.

        ``access_type=offline`` and ``prompt=consent`` make Google return a
        refresh token on every exchange.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.auth_config.scopes),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def exchange_code_for_tokens(self, authorization_code: str, redirect_uri: str) -> OAuthCredentials:
        """
        Exchange authorization code for tokens.

        Args:
            authorization_code: Authorization code from callback
            redirect_uri: Redirect URI used when the code was issued

        Returns:
            Token record including a refresh token

        Raises:
            AuthenticationError: If the token endpoint rejects the code
            TokenError: If the response carries no refresh token
        """
        data = {
            "grant_type": "authorization_code",
            "code": authorization_code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": redirect_uri,
        }
        token_response = await self._post_token_request(
            data, AuthenticationError, "Token exchange failed", "token_exchange_failed"
        )

        credentials = self._credentials_from_response(token_response)
        if not credentials.refresh_token:
            log_auth_event(
                self.logger,
                "token_exchange_failed",
                success=False,
                details={"reason": "missing refresh_token"}
            )
            raise TokenError(
                "Token exchange did not return a refresh_token",
                error_code="missing_refresh_token"
            )

        self._credentials = credentials
        log_auth_event(self.logger, "token_exchange_success", success=True)
        return credentials

    async def refresh_tokens(self) -> OAuthCredentials:
        """
        Refresh the access token using the stored refresh token.

        Returns:
            New token record (the refresh token is carried over when Google
            does not rotate it)

        Raises:
            TokenRefreshError: If refresh fails
        """
        refresh_token = self._credentials.refresh_token if self._credentials else None
        if not refresh_token:
            raise TokenRefreshError("No refresh token available")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        token_response = await self._post_token_request(
            data, TokenRefreshError, "Token refresh failed", None
        )

        credentials = self._credentials_from_response(token_response, fallback=self._credentials)
        self._credentials = credentials
        log_auth_event(self.logger, "token_refresh_success", success=True)

        if self._on_tokens is not None:
            try:
                await self._on_tokens(credentials)
            except Exception as e:
                self.logger.error("Failed to persist refreshed tokens", error=str(e))

        return credentials

    async def get_access_token(self) -> str:
        """
        Return a valid access token, refreshing it when expired or about to expire.

        Raises:
            TokenError: If no credentials are loaded
            TokenRefreshError: If refresh fails
        """
        if self._credentials is None:
            raise TokenError("No OAuth credentials loaded", error_code="missing_credentials")

        if self._credentials.is_expired(self.auth_config.token_refresh_threshold):
            await self.refresh_tokens()

        access_token = self._credentials.access_token
        if not access_token:
            raise TokenError("Failed to obtain access token", error_code="missing_access_token")
        return access_token

    async def _post_token_request(
        self,
        data: Dict[str, str],
        error_cls: type,
        message: str,
        error_code: Optional[str],
    ) -> Dict[str, Any]:
        try:
            response = await self.client.post(
                self.token_url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"}
            )
        except httpx.RequestError as e:
            log_auth_event(
                self.logger,
                "token_request_failed",
                success=False,
                details={"grant_type": data["grant_type"], "error": str(e)}
            )
            raise error_cls(f"Network error during token request: {e}")

        if response.status_code != 200:
            log_auth_event(
                self.logger,
                "token_request_failed",
                success=False,
                details={"grant_type": data["grant_type"], "status_code": response.status_code}
            )
            log_upstream_error(self.logger, "token", response.status_code, response.text)
            if error_code is None:
                raise error_cls(f"{message}: {response.status_code}")
            raise error_cls(f"{message}: {response.status_code}", error_code=error_code)

        try:
            return response.json()
        except ValueError:
            raise error_cls(f"{message}: invalid token response")

    @staticmethod
    def _credentials_from_response(
        token_response: Dict[str, Any],
        fallback: Optional[OAuthCredentials] = None,
    ) -> OAuthCredentials:
        expires_in = token_response.get("expires_in")
        expiry_date = int((time.time() + float(expires_in)) * 1000) if expires_in is not None else None

        return OAuthCredentials(
            access_token=token_response.get("access_token"),
            refresh_token=token_response.get("refresh_token") or (fallback.refresh_token if fallback else None),
            expiry_date=expiry_date,
            scope=token_response.get("scope") or (fallback.scope if fallback else None),
            token_type=token_response.get("token_type", "Bearer"),
        )
