"""Tests for request preparation."""

import httpx
import pytest

from core.exceptions import InvalidPathError, InvalidTargetError, ServiceNotFoundError
from core.headers import HeaderBuilder
from core.router import InvalidPath, RouteDecider
from services.routing_service import RoutingService


def _service(mappings):
    return RoutingService(RouteDecider(mappings), HeaderBuilder())


def test_prepare_rewrites_url_and_host():
    service = _service({"api": "http://127.0.0.1:9001"})

    prepared = service.prepare(
        "POST",
        "/api/widgets",
        "page=2",
        [("host", "proxy.local"), ("content-type", "application/json")],
        b'{"name":"x"}',
    )

    assert prepared.service == "api"
    assert prepared.target == "http://127.0.0.1:9001"
    assert str(prepared.url) == "http://127.0.0.1:9001/widgets?page=2"
    assert prepared.method == "POST"
    assert prepared.body == b'{"name":"x"}'
    assert ("host", "127.0.0.1:9001") in prepared.headers
    assert ("content-type", "application/json") in prepared.headers


def test_prepare_service_root():
    prepared = _service({"api": "http://127.0.0.1:9001"}).prepare("GET", "/api", "", [])
    assert prepared.url.path == "/"


def test_unknown_service_raises_404():
    with pytest.raises(ServiceNotFoundError) as exc_info:
        _service({}).prepare("GET", "/unknownservice/x", "", [])

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "No mapping found for service: unknownservice"


def test_invalid_target_raises_500():
    with pytest.raises(InvalidTargetError) as exc_info:
        _service({"bad": "not-a-url"}).prepare("GET", "/bad/x", "", [])

    assert exc_info.value.status_code == 500
    assert exc_info.value.message.startswith("Invalid target URL: ")


def test_invalid_path_decision_raises_400():
    class NoSegments:
        def decide(self, path):
            return InvalidPath()

    service = RoutingService(NoSegments(), HeaderBuilder())

    with pytest.raises(InvalidPathError) as exc_info:
        service.prepare("GET", "", "", [])

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid path"


def test_unbuildable_upstream_url_raises_400(monkeypatch):
    def reject(*args):
        raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    monkeypatch.setattr("services.routing_service.build_upstream_url", reject)

    with pytest.raises(InvalidPathError) as exc_info:
        _service({"api": "http://127.0.0.1:9001"}).prepare("GET", "/api/x", "", [])

    assert exc_info.value.status_code == 400
    assert exc_info.value.service == "api"
    assert exc_info.value.message.startswith("Invalid path: ")


def test_control_characters_are_escaped():
    prepared = _service({"api": "http://127.0.0.1:9001"}).prepare(
        "GET", "/api/a\nb\x00c", "", []
    )

    assert prepared.url.raw_path == b"/a%0Ab%00c"


def test_invalid_target_carries_service():
    with pytest.raises(InvalidTargetError) as exc_info:
        _service({"bad": "not-a-url"}).prepare("GET", "/bad/x", "", [])

    assert exc_info.value.service == "bad"
