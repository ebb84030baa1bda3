'''
Shared fixtures for gemini-gateway unit tests.
'''

from __future__ import annotations

import httpx
import keyring
import pytest

from gemini_gateway.auth import (
    AuthContainer,
    Authenticated,
    CredentialStore,
    FileCredentialStore,
    OAuthClient,
    SecureCredentialStore,
)
from gemini_gateway.core import AuthConfig, GeminiConfig, Settings

from support import MemoryKeyring, make_credentials, mock_client


@pytest.fixture
def memory_keyring():
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture
def settings(tmp_path, monkeypatch) -> Settings:
    for name in (
        "GOOGLE_CLOUD_PROJECT",
        "GOOGLE_CLOUD_PROJECT_ID",
        "GEMINI_PROJECT_ID",
        "GEMINI_CLI_CLIENT_ID",
        "GEMINI_CLI_CLIENT_SECRET",
    ):
        monkeypatch.delenv(name, raising=False)

    return Settings(
        auth=AuthConfig(
            client_id="test-client-id",
            client_secret="test-client-secret",
            legacy_credentials_path=tmp_path / "oauth_creds.json",
            keyring_service="gemini-gateway-test",
        ),
        gemini=GeminiConfig(
            code_assist_base_url="https://cloudcode.test/v1internal",
            retry_base_delay=0.0,
        ),
    )


@pytest.fixture
def credential_store(settings, memory_keyring) -> CredentialStore:
    return CredentialStore(
        SecureCredentialStore(settings.auth.keyring_service, settings.auth.keyring_username),
        FileCredentialStore(settings.auth.legacy_credentials_path),
    )


@pytest.fixture
def authenticated_container(settings) -> AuthContainer:
    oauth_client = OAuthClient(
        settings.auth,
        http_client=mock_client(lambda request: httpx.Response(500)),
        credentials=make_credentials(),
    )
    return AuthContainer(Authenticated(client=oauth_client, project_id="test-project"))
