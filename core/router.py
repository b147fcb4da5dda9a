"""Request routing logic - maps the first path segment to an upstream."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from urllib.parse import quote

import httpx

from core.request_types import ParsedRequest


# RFC 3986 pchar plus "/"; "%" is always escaped
PATH_SAFE = "/:@!$&'()*+,;="


@dataclass(frozen=True)
class InvalidPath:
    """Path has no service segment."""


@dataclass(frozen=True)
class ServiceNotFound:
    """No upstream is mapped for the service name."""

    service: str


@dataclass(frozen=True)
class InvalidTarget:
    """The mapped upstream URL is unusable."""

    service: str
    target: str
    reason: str


@dataclass(frozen=True)
class Resolved:
    """Routing decision for a request with a usable upstream."""

    request: ParsedRequest
    target: str
    base_url: httpx.URL


RouteDecision = InvalidPath | ServiceNotFound | InvalidTarget | Resolved


def parse_path(path: str) -> ParsedRequest | None:
    """Split a request path into service name and remainder.

    Returns None when the path yields no segments at all.
    """
    trimmed = path[1:] if path.startswith("/") else path
    parts = trimmed.split("/", 1)
    # str.split always returns at least one element, even for ""
    if not parts:
        return None
    remainder = parts[1] if len(parts) > 1 else ""
    return ParsedRequest(service_name=parts[0], remainder_path=remainder, original_path=path)


def build_upstream_url(base: httpx.URL, path: str, query: str = "") -> httpx.URL:
    """Join the upstream base URL with the rewritten path and inbound query.

    Paths arrive percent-decoded and are re-encoded here, so control
    characters reach the upstream escaped.
    """
    joined = _join_paths(_encode_path(base.path), _encode_path(path))
    base_query = base.query.decode("ascii")
    if base_query and query:
        query = f"{base_query}&{query}"
    else:
        query = base_query or query

    url = f"{base.scheme}://{base.netloc.decode('ascii')}{joined}"
    if query:
        url += f"?{query}"
    return httpx.URL(url)


def _encode_path(path: str) -> str:
    return quote(path, safe=PATH_SAFE)


def _join_paths(a: str, b: str) -> str:
    a_slash = a.endswith("/")
    b_slash = b.startswith("/")
    if a_slash and b_slash:
        return a + b[1:]
    if not a_slash and not b_slash:
        return f"{a}/{b}"
    return a + b


class RouteDecider:
    """Decide which upstream a request path is routed to."""

    def __init__(self, mappings: Mapping[str, str]):
        self.mappings = MappingProxyType(dict(mappings))

    def decide(self, path: str) -> RouteDecision:
        """Return the routing decision for a request path."""
        parsed = parse_path(path)
        if parsed is None:
            return InvalidPath()

        service = parsed.service_name
        target = self.mappings.get(service)
        if target is None:
            return ServiceNotFound(service)

        try:
            base_url = httpx.URL(target)
        except httpx.InvalidURL as e:
            return InvalidTarget(service, target, str(e))
        if base_url.scheme not in ("http", "https") or not base_url.host:
            return InvalidTarget(
                service, target, f"{target!r} is not an absolute http(s) URL"
            )

        return Resolved(request=parsed, target=target, base_url=base_url)
