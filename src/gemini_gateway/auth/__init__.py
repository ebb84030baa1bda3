"""
Authentication modules for gemini-gateway.

This package contains the Google OAuth client, credential storage,
Code Assist project resolution and the authentication state machine.
"""

from __future__ import annotations

from .oauth import OAuthClient, load_oauth_client_config
from .credential_store import CredentialStore, FileCredentialStore, SecureCredentialStore
from .project import load_project_id
from .state import AuthContainer, AuthState, Authenticated, Unauthenticated
from .manager import AuthManager

__all__ = [
    # OAuth
    "OAuthClient",
    "load_oauth_client_config",
    # Credential storage
    "CredentialStore",
    "FileCredentialStore",
    "SecureCredentialStore",
    # Project resolution
    "load_project_id",
    # State
    "AuthContainer",
    "AuthState",
    "Authenticated",
    "Unauthenticated",
    # Lifecycle
    "AuthManager",
]
