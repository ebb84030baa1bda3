'''
Unit tests for configuration parsing.
'''

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from gemini_gateway.core import AuthConfig, GeminiConfig, LoggingConfig


class TestAuthConfig:
    def test_legacy_path_is_expanded(self) -> None:
        config = AuthConfig(legacy_credentials_path=Path('~/.gemini/oauth_creds.json'))

        assert config.legacy_credentials_path == Path.home() / '.gemini' / 'oauth_creds.json'

    def test_gemini_cli_client_env(self, monkeypatch) -> None:
        monkeypatch.setenv('GEMINI_CLI_CLIENT_ID', 'env-id')
        monkeypatch.setenv('GEMINI_CLI_CLIENT_SECRET', 'env-secret')

        config = AuthConfig()

        assert (config.client_id, config.client_secret) == ('env-id', 'env-secret')


class TestGeminiConfig:
    def test_project_hint_from_google_cloud_env(self, monkeypatch) -> None:
        monkeypatch.delenv('GEMINI_PROJECT_ID', raising=False)
        monkeypatch.delenv('GOOGLE_CLOUD_PROJECT_ID', raising=False)
        monkeypatch.setenv('GOOGLE_CLOUD_PROJECT', 'my-project')

        assert GeminiConfig().project_id == 'my-project'

    def test_retry_bounds(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            GeminiConfig(max_retries=-1)


class TestLoggingConfig:
    def test_level_and_format_are_normalized(self) -> None:
        config = LoggingConfig(level='debug', format='JSON')

        assert config.level == 'DEBUG'
        assert config.format == 'json'

    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            LoggingConfig(level='chatty')
