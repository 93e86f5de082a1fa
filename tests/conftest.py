"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable
from contextlib import ExitStack
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config
from core.protocols import RequestLogger


class UnreadStream(httpx.AsyncByteStream):
    """Response body that is still unread when the relay receives it."""

    def __init__(self, *chunks: bytes) -> None:
        self._chunks = chunks

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk


class FakeTarget:
    """Stands in for the target server behind an ``httpx.MockTransport``.

    Records every request it receives and answers with ``respond``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(200)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.respond(request)
        if response.is_stream_consumed:
            # httpx reads bytes bodies eagerly; a real transport leaves them unread
            response = httpx.Response(
                response.status_code,
                headers=response.headers,
                stream=UnreadStream(b"".join(response.stream)),
            )
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def target():
    """Fake target server."""
    return FakeTarget()


@pytest.fixture
def mock_logger():
    """Mock request logger."""
    return MagicMock(spec=RequestLogger)


@pytest.fixture
def config():
    """Default configuration."""
    return Config()


@pytest.fixture
def make_client(target, mock_logger):
    """Build a test client for the relay with the given configuration."""
    stack = ExitStack()

    def _make(config: Config) -> TestClient:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(target),
            follow_redirects=True,
        )
        app = create_app(config, mock_logger, http_client=http_client)
        return stack.enter_context(TestClient(app))

    with stack:
        yield _make


@pytest.fixture
def client(make_client, config):
    """Relay test client with default configuration."""
    return make_client(config)


@pytest.fixture(autouse=True)
def clean_proxy_env(monkeypatch):
    """Drop PROXY_* variables inherited from the outer environment."""
    for name in list(os.environ):
        if name.upper().startswith("PROXY_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def isolate_logs(tmp_path, monkeypatch):
    """Keep log files out of the working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("ui.log_utils.LOG_ROOT", tmp_path / "logs")
    monkeypatch.setattr("ui.log_utils.CLI_LOG_FILE", tmp_path / "logs" / "proxy.log")
