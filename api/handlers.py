"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from core.exceptions import RoutingError
from core.protocols import RequestLogger


async def handle_proxy(request: Request, logger: RequestLogger) -> Response:
    """Route a request by its first path segment and forward it upstream."""
    body = await request.body()
    routing_service = request.app.state.routing_service
    try:
        # Read from the scope: request.url drops control characters
        prepared = routing_service.prepare(
            request.method,
            request.scope["path"],
            request.scope["query_string"].decode("latin-1"),
            request.headers.items(),
            body,
        )
    except RoutingError as e:
        logger.log_error(e.service or "router", e.status_code, e.message)
        return PlainTextResponse(e.message, status_code=e.status_code)

    upstream = request.app.state.upstream_client
    return await upstream.forward(prepared)
