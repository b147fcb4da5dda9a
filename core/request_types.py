"""Shared request data types."""

from dataclasses import dataclass, field

import httpx


@dataclass(frozen=True)
class ParsedRequest:
    """Inbound path split into service name and remainder."""

    service_name: str
    remainder_path: str
    original_path: str

    @property
    def upstream_path(self) -> str:
        """Remainder path with exactly one leading slash."""
        return "/" + self.remainder_path.lstrip("/")

    @property
    def capture_path(self) -> str:
        """Path recorded in capture artifacts, empty for the upstream root."""
        return self.upstream_path if self.remainder_path else ""


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    service: str
    request: ParsedRequest
    target: str
    url: httpx.URL
    method: str
    headers: list[tuple[str, str]]
    body: bytes = b""


@dataclass(frozen=True)
class CapturedResponse:
    """Upstream response snapshot persisted for inspection."""

    service: str
    path: str
    timestamp: str
    status_code: int
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""

    def to_dict(self) -> dict[str, object]:
        """Serializable form, body decoded as text."""
        return {
            "service": self.service,
            "path": self.path,
            "timestamp": self.timestamp,
            "statusCode": self.status_code,
            "headers": self.headers,
            "body": self.body.decode("utf-8", errors="replace"),
        }
