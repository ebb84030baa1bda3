'''
Test doubles shared by the unit tests.
'''

from __future__ import annotations

import json
import time
from typing import Callable, Dict, List, Optional

import httpx
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

from gemini_gateway.models import OAuthCredentials


class MemoryKeyring(KeyringBackend):
    '''
    In-process keyring backend.
    '''

    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.passwords: Dict[tuple, str] = {}

    def get_password(self, service: str, username: str) -> Optional[str]:
        return self.passwords.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.passwords[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


class RecordingHandler:
    '''
    httpx.MockTransport handler that answers from a queue of responses
    and records every request. The last response repeats once the queue
    is down to one entry.
    '''

    def __init__(self, responses: List[httpx.Response]) -> None:
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)

        template = self.responses[0]
        try:
            content = template.content
        except httpx.ResponseNotRead:
            # Streaming body, usable once
            return template
        return httpx.Response(template.status_code, headers=template.headers, content=content)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def make_credentials(
    access_token: str = "access-1",
    refresh_token: Optional[str] = "refresh-1",
    expires_in: float = 3600,
) -> OAuthCredentials:
    return OAuthCredentials(
        access_token=access_token,
        refresh_token=refresh_token,
        expiry_date=int((time.time() + expires_in) * 1000),
        scope="https://www.googleapis.com/auth/cloud-platform",
        token_type="Bearer",
    )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
