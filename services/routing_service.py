"""Routing orchestration for proxy requests."""

from collections.abc import Iterable

import httpx

from core.exceptions import InvalidPathError, InvalidTargetError, ServiceNotFoundError
from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from core.router import (
    InvalidPath,
    InvalidTarget,
    RouteDecider,
    ServiceNotFound,
    build_upstream_url,
)


class RoutingService:
    """Prepare inbound requests for forwarding to their upstream."""

    def __init__(self, decider: RouteDecider, header_builder: HeaderBuilder) -> None:
        self._decider = decider
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        path: str,
        query: str,
        headers: Iterable[tuple[str, str]],
        body: bytes = b"",
    ) -> PreparedRequest:
        """Resolve the upstream for a request and rewrite it.

        Raises:
            RoutingError: if the path cannot be routed.
        """
        decision = self._decider.decide(path)
        if isinstance(decision, InvalidPath):
            raise InvalidPathError()
        if isinstance(decision, ServiceNotFound):
            raise ServiceNotFoundError(decision.service)
        if isinstance(decision, InvalidTarget):
            raise InvalidTargetError(decision.service, decision.reason)

        parsed = decision.request
        try:
            url = build_upstream_url(decision.base_url, parsed.upstream_path, query)
        except httpx.InvalidURL as e:
            raise InvalidPathError(f"Invalid path: {e}", parsed.service_name) from e
        upstream_headers = self._headers.build_upstream_headers(
            headers, decision.base_url.netloc.decode("ascii")
        )
        return PreparedRequest(
            service=parsed.service_name,
            request=parsed,
            target=decision.target,
            url=url,
            method=method,
            headers=upstream_headers,
            body=body,
        )
