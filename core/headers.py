"""Header handling for upstream requests and relayed responses."""

from collections.abc import Iterable

# Hop-by-hop headers are connection-scoped and never relayed (RFC 7230)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)


class HeaderBuilder:
    """Build relayed header lists in both directions."""

    def build_upstream_headers(
        self, headers: Iterable[tuple[str, str]], host: str
    ) -> list[tuple[str, str]]:
        """Pass client headers through, with Host pointing at the upstream."""
        upstream = [
            (key, value)
            for key, value in headers
            if not self._is_dropped(key) and key.lower() != "host"
        ]
        upstream.append(("host", host))
        return upstream

    def build_client_headers(
        self, headers: Iterable[tuple[str, str]], keep_length: bool = False
    ) -> list[tuple[str, str]]:
        """Pass upstream response headers back to the client.

        A HEAD response carries no body, so its content-length is kept.
        """
        return [
            (key, value)
            for key, value in headers
            if not self._is_dropped(key)
            or (keep_length and key.lower() == "content-length")
        ]

    @staticmethod
    def _is_dropped(key: str) -> bool:
        """Check if a header is regenerated by the transport."""
        key_lower = key.lower()
        return key_lower in HOP_BY_HOP_HEADERS or key_lower == "content-length"
