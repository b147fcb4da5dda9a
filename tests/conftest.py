from contextlib import ExitStack
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import CaptureSettings, Config


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self):
        self.proxied: list[tuple[str, str, str, str]] = []
        self.captured: list[tuple[str, Path]] = []
        self.warnings: list[str] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_proxy(self, service, method, path, target):
        self.proxied.append((service, method, path, target))

    def log_capture(self, service, file_path):
        self.captured.append((service, file_path))

    def log_warning(self, message):
        self.warnings.append(message)

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class UnreadStream(httpx.AsyncByteStream):
    """Body delivered lazily, the way a network transport hands it over."""

    def __init__(self, content: bytes):
        self._content = content

    async def __aiter__(self):
        if self._content:
            yield self._content


def upstream_response(status_code=200, content=b"", headers=None) -> httpx.Response:
    """Build a mock upstream response whose body has not been read yet."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return httpx.Response(status_code, headers=headers, stream=UnreadStream(content))


class UpstreamRecorder:
    """MockTransport handler remembering the requests it received."""

    def __init__(self, responder=None):
        self.requests: list[httpx.Request] = []
        self._responder = responder or (lambda request: upstream_response(200, "ok"))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._responder(request)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def capture_dir(tmp_path):
    return tmp_path / "responses"


@pytest.fixture
def make_config(capture_dir):
    def _make(mappings, *, capture=True, directory=None):
        return Config(
            mappings=mappings,
            capture=CaptureSettings(enabled=capture, directory=directory or capture_dir),
        )

    return _make


@pytest.fixture
def proxy_client(make_config, logger):
    """Factory returning a TestClient whose upstreams are served by a handler."""
    stack = ExitStack()

    def _create(mappings, handler, *, capture=True, directory=None):
        config = make_config(mappings, capture=capture, directory=directory)
        app = create_app(config, logger, transport=httpx.MockTransport(handler))
        return stack.enter_context(TestClient(app))

    yield _create
    stack.close()
