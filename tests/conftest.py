"""Pytest configuration - loads .env for integration tests and provides a stub transport."""

import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from accounts_client import AccountsClient
from accounts_client.core.client import PreparedRequest, Response

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BASE_URL = "https://accounts.test"
TOKEN = "test-token"
API_KEY = "test-api-key"


class StubTransport:
    """Records every request and answers from a queue of canned responses."""

    def __init__(self) -> None:
        self.requests: list[PreparedRequest] = []
        self.timeouts: list[float] = []
        self._responses: list[Response] = []

    def reply(self, status: int = 200, body: Any = b"") -> None:
        """Queue a response; non-bytes bodies are JSON encoded."""
        if not isinstance(body, bytes):
            body = json.dumps(body).encode("utf-8")
        self._responses.append(Response(status=status, headers={"Content-Type": "application/json"}, body=body))

    def send(self, request: PreparedRequest, timeout: float) -> Response:
        self.requests.append(request)
        self.timeouts.append(timeout)
        if not self._responses:
            return Response(status=200)
        return self._responses.pop(0)

    @property
    def last(self) -> PreparedRequest:
        return self.requests[-1]

    def last_json(self) -> Any:
        assert self.last.body is not None
        return json.loads(self.last.body)


@pytest.fixture
def transport() -> StubTransport:
    return StubTransport()


@pytest.fixture
def client(transport: StubTransport) -> AccountsClient:
    return AccountsClient(BASE_URL, TOKEN, API_KEY, transport=transport)
