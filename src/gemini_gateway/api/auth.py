"""
Authentication API endpoints for gemini-gateway.

This module implements the browser sign-in flow with Google: start,
callback, status and logout.
"""

from __future__ import annotations

import html
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..auth import AuthManager
from ..core import (
    Settings,
    get_logger,
    GatewayError,
    log_auth_event,
    log_error,
)
from ..models import AuthStatus, LoginResponse, LogoutResponse
from .deps import get_app_settings, get_auth_manager

# Create router
router = APIRouter(prefix="/auth", tags=["authentication"])
logger = get_logger(__name__)

PAGE_TEMPLATE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family: sans-serif; margin: 3em;">
<h1>{title}</h1>
<p>{message}</p>
</body>
</html>
"""


def _page(title: str, message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(
        content=PAGE_TEMPLATE.format(title=html.escape(title), message=html.escape(message)),
        status_code=status_code,
    )


def redirect_uri_for(settings: Settings) -> str:
    return f"http://127.0.0.1:{settings.server.port}/auth/callback"


@router.get(
    "/start",
    response_model=LoginResponse,
    summary="Initiate OAuth login",
    description="Return the Google consent URL for signing the gateway in.",
)
async def start_login(
    auth_manager: AuthManager = Depends(get_auth_manager),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    return auth_manager.begin_login(redirect_uri_for(settings))


@router.get(
    "/callback",
    response_class=HTMLResponse,
    summary="OAuth callback",
    description="Handle the redirect from Google and complete sign-in.",
)
async def oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    auth_manager: AuthManager = Depends(get_auth_manager),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    """
    Handle OAuth callback.

    Receives the authorization code from Google, checks the state issued
    by ``/auth/start`` and completes the code exchange.
    """
    if error:
        log_auth_event(logger, "oauth_callback_error", success=False, details={"error": error})
        return _page("Sign-in failed", f"Google returned an error: {error}", 400)

    if not code or not state:
        return _page("Sign-in failed", "Missing authorization code or state.", 400)

    if not auth_manager.consume_login_state(state):
        log_auth_event(logger, "oauth_callback_error", success=False, details={"error": "unknown_state"})
        return _page("Sign-in failed", "Unknown or expired login state. Start again from /auth/start.", 400)

    try:
        authenticated = await auth_manager.complete_oauth_flow(code, redirect_uri_for(settings))
    except Exception as e:
        log_error(logger, e, context={"operation": "oauth_callback"})
        message = e.message if isinstance(e, GatewayError) else "Sign-in could not be completed."
        return _page("Sign-in failed", message, 500)

    return _page(
        "Signed in",
        f"gemini-gateway is now using project {authenticated.project_id}. You can close this window.",
        200,
    )


@router.get(
    "/status",
    response_model=AuthStatus,
    summary="Get authentication status",
)
async def get_auth_status(auth_manager: AuthManager = Depends(get_auth_manager)) -> AuthStatus:
    return auth_manager.container.status()


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Logout",
    description="Delete stored credentials and sign the gateway out.",
)
async def logout(auth_manager: AuthManager = Depends(get_auth_manager)) -> LogoutResponse:
    await auth_manager.logout()
    return LogoutResponse(success=True)
