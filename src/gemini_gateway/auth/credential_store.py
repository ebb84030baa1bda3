"""
Credential storage for gemini-gateway.

OAuth tokens live in the platform keyring. Older setups keep them in the
plaintext ``~/.gemini/oauth_creds.json`` written by gemini-cli; a record
found there is copied into the keyring the first time it is read.

All methods are synchronous and may block on the keyring backend; async
callers run them through ``asyncio.to_thread``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import keyring
import keyring.errors
import pydantic

from ..core import get_logger
from ..models import OAuthCredentials

logger = get_logger(__name__)


class SecureCredentialStore:
    """Token record stored as JSON under one keyring entry."""

    def __init__(self, service: str, username: str):
        self.service = service
        self.username = username

    def read(self) -> Optional[OAuthCredentials]:
        try:
            raw = keyring.get_password(self.service, self.username)
        except keyring.errors.KeyringError as e:
            logger.warning("Keyring read failed", service=self.service, error=str(e))
            return None

        if not raw:
            return None

        try:
            return OAuthCredentials.model_validate_json(raw)
        except pydantic.ValidationError as e:
            logger.warning("Ignoring unreadable keyring entry", service=self.service, error=str(e))
            return None

    def write(self, credentials: OAuthCredentials) -> None:
        keyring.set_password(
            self.service,
            self.username,
            credentials.model_dump_json(exclude_none=True),
        )

    def delete(self) -> None:
        try:
            keyring.delete_password(self.service, self.username)
        except keyring.errors.PasswordDeleteError:
            # Nothing stored
            pass


class FileCredentialStore:
    """Read-only view of the gemini-cli credential file."""

    def __init__(self, path: Path):
        self.path = path

    def read(self) -> Optional[OAuthCredentials]:
        if not self.path.exists():
            return None

        try:
            return OAuthCredentials.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, pydantic.ValidationError) as e:
            logger.warning("Failed to read credentials file", path=str(self.path), error=str(e))
            return None


class CredentialStore:
    """Secure store first, legacy file second, with one-way migration."""

    def __init__(self, secure: SecureCredentialStore, legacy: FileCredentialStore):
        self.secure = secure
        self.legacy = legacy

    @classmethod
    def from_settings(cls, auth_config) -> "CredentialStore":
        return cls(
            SecureCredentialStore(auth_config.keyring_service, auth_config.keyring_username),
            FileCredentialStore(auth_config.legacy_credentials_path),
        )

    def load(self) -> Optional[OAuthCredentials]:
        """
        Load the stored token record.

        Returns:
            Credentials from the keyring, else from the legacy file (copied
            into the keyring on the way), else None
        """
        credentials = self.secure.read()
        if credentials is not None:
            logger.debug("Loaded credentials from keyring")
            return credentials

        credentials = self.legacy.read()
        if credentials is None:
            return None

        logger.info("Migrating credentials file to keyring", path=str(self.legacy.path))
        try:
            self.secure.write(credentials)
        except keyring.errors.KeyringError as e:
            logger.warning("Credential migration failed", error=str(e))
        return credentials

    def save(self, credentials: OAuthCredentials) -> None:
        self.secure.write(credentials)

    def clear(self) -> None:
        self.secure.delete()
