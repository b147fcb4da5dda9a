"""Custom exception hierarchy for the prefix proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class RoutingError(ProxyError):
    """Raised when a request path cannot be routed to an upstream.

    Attributes:
        message: Error message returned to the client
        status_code: HTTP status code returned to the client
        service: Service name the request resolved to, if any
    """

    status_code = 500

    def __init__(self, message: str, service: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.service = service


class InvalidPathError(RoutingError):
    """Request path has no service segment or cannot be rewritten."""

    status_code = 400

    def __init__(self, message: str = "Invalid path", service: str | None = None) -> None:
        super().__init__(message, service)


class ServiceNotFoundError(RoutingError):
    """No mapping exists for the requested service name."""

    status_code = 404

    def __init__(self, service: str) -> None:
        super().__init__(f"No mapping found for service: {service}")


class InvalidTargetError(RoutingError):
    """The upstream URL stored in the mapping cannot be used."""

    status_code = 500

    def __init__(self, service: str, reason: str) -> None:
        super().__init__(f"Invalid target URL: {reason}", service)


class UpstreamError(ProxyError):
    """Raised when an upstream service cannot be reached.

    Attributes:
        message: Error message
        status_code: HTTP status code returned to the client
        service: Service name the request was routed to
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.service = service


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__("Upstream timeout", status_code=504, service=service)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to or read from an upstream."""

    def __init__(self, message: str, service: str | None = None) -> None:
        super().__init__(
            f"Upstream connection error: {message}", status_code=502, service=service
        )


class CaptureError(ProxyError):
    """Captured response could not be persisted."""
