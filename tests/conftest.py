"""Pytest configuration - loads .env for integration tests and provides fakes."""

import io
import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from dropbox_rpc.core.client import APIClient, ClientConfig, Request, Response

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

TEST_BASE_URL = "https://api.example.com/"


class FakeTransport:
    """
    In-memory transport.

    Queued items are consumed one per request: a Response is returned, an
    exception is raised, a callable is called with the request first.
    """

    def __init__(self) -> None:
        self.requests: list[Request] = []
        self.responses: list[Response] = []
        self._queue: list[Any] = []

    def add(self, item: Any) -> "FakeTransport":
        self._queue.append(item)
        return self

    def add_json(self, data: Any, status: int = 200, content_type: str = "application/json") -> "FakeTransport":
        return self.add(make_response(status, json.dumps(data).encode("utf-8"), content_type))

    def add_text(self, text: str, status: int = 400, content_type: str = "text/plain; charset=utf-8") -> "FakeTransport":
        return self.add(make_response(status, text.encode("utf-8"), content_type))

    def send(self, request: Request) -> Response:
        self.requests.append(request)
        if not self._queue:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            item = item(request)
        self.responses.append(item)
        return item


def make_response(status: int = 200, body: bytes = b"", content_type: str | None = "application/json") -> Response:
    """Build a Response with an in-memory body."""
    headers = {} if content_type is None else {"Content-Type": content_type}
    return Response(status, headers, io.BytesIO(body))


@pytest.fixture
def transport() -> FakeTransport:
    """A fresh fake transport for each test."""
    return FakeTransport()


@pytest.fixture
def api(transport: FakeTransport) -> APIClient:
    """A core client wired to the fake transport, independent of DROPBOX_* env vars."""
    return APIClient(transport=transport, config=ClientConfig(base_url=TEST_BASE_URL))


@pytest.fixture
def response_factory():
    """Factory for in-memory responses."""
    return make_response
