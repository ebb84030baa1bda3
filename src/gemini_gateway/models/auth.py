"""
Authentication related Pydantic models for gemini-gateway.

This module contains the persisted OAuth token record and the request and
response bodies of the login endpoints.
"""

from __future__ import annotations

import time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AuthMethod = Literal["gemini-cli-oauth", "none"]


class OAuthCredentials(BaseModel):
    """
    OAuth token record as persisted in the credential store.

    Same JSON layout as the gemini-cli ``oauth_creds.json`` file, so a
    record read from that file can be written to the secure store as is.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    access_token: Optional[str] = Field(None, description="Short-lived bearer token")
    refresh_token: Optional[str] = Field(None, description="Long-lived token used to mint access tokens")
    expiry_date: Optional[int] = Field(None, description="Access token expiry, epoch milliseconds")
    scope: Optional[str] = Field(None, description="Space separated granted scopes")
    token_type: Optional[str] = Field("Bearer", description="Token type")

    def is_expired(self, threshold_seconds: int = 0, now: Optional[float] = None) -> bool:
        """
        Check whether the access token is missing or expires within the threshold.

        Args:
            threshold_seconds: Treat the token as expired this many seconds early
            now: Current epoch time in seconds (defaults to time.time())

        Returns:
            True if a new access token must be fetched
        """
        if not self.access_token:
            return True
        if self.expiry_date is None:
            return False
        now = time.time() if now is None else now
        return self.expiry_date <= (now + threshold_seconds) * 1000


class AuthStatus(BaseModel):
    """
    Authentication status information for API responses.
    """

    authenticated: bool = Field(..., description="Whether the gateway holds valid credentials")
    method: AuthMethod = Field(..., description="How the gateway authenticated")
    project_id: Optional[str] = Field(None, description="Resolved Code Assist project")


class LoginResponse(BaseModel):
    """
    Response model for OAuth login initiation.
    """

    auth_url: str = Field(
        ..., description="OAuth authorization URL for user to visit", min_length=1
    )
    state: str = Field(..., description="Opaque state echoed back to the callback", min_length=1)


class LogoutResponse(BaseModel):
    success: bool = True
