"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from starlette.convertors import Convertor, register_url_convertor

from api.handlers import handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.router import RouteDecider
from services.capture import ResponseCapture
from services.routing_service import RoutingService
from services.upstream import UpstreamClient


class AnyPathConvertor(Convertor):
    """Like the built-in 'path' convertor, but also matches newlines."""

    regex = r"[\s\S]*"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("anypath", AnyPathConvertor())


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.upstream.max_connections,
            max_keepalive_connections=config.upstream.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        capture = None
        if config.capture.enabled:
            capture = ResponseCapture(config.capture.directory, logger)
        app.state.upstream_client = UpstreamClient(client, logger, header_builder, capture)
        app.state.routing_service = RoutingService(
            decider=RouteDecider(config.mappings),
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await client.aclose()

    # Docs routes would shadow services named "docs" or "redoc"
    app = FastAPI(
        title="Prefix Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def proxy(request: Request):
        return await handle_proxy(request, logger)

    # No method list: TRACE and extension methods are forwarded too
    app.add_route("/{path:anypath}", proxy, methods=None)

    return app
