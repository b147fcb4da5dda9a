"""HTTP proxying utilities for upstream requests."""

import httpx
from fastapi import Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import UpstreamConnectionError, UpstreamError, UpstreamTimeoutError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest
from services.capture import ResponseCapture


class UpstreamClient:
    """Forward prepared requests upstream and relay the response.

    With a capture collaborator the response is buffered and persisted
    before it is released; without one it is streamed through.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: RequestLogger,
        header_builder: HeaderBuilder,
        capture: ResponseCapture | None = None,
    ) -> None:
        self._client = client
        self._logger = logger
        self._headers = header_builder
        self._capture = capture

    async def forward(self, prepared: PreparedRequest) -> Response:
        """Proxy a single request, mapping transport failures to 502/504."""
        self._logger.log_proxy(
            prepared.service,
            prepared.method,
            prepared.request.original_path.lstrip("/"),
            str(prepared.url),
        )
        try:
            return await self._send(prepared)
        except UpstreamError as e:
            self._logger.log_error(e.service or prepared.service, e.status_code, str(e))
            return PlainTextResponse(str(e), status_code=e.status_code)

    async def _send(self, prepared: PreparedRequest) -> Response:
        """Execute the upstream call."""
        # Built directly: client default headers and cookies must not leak in
        req = httpx.Request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            content=prepared.body or None,
            extensions={"timeout": self._client.timeout.as_dict()},
        )
        try:
            response = await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(prepared.service) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(str(e), prepared.service) from e

        if self._capture is None:
            return self._streaming_response(prepared, response)
        return await self._captured_response(prepared, response)

    def _streaming_response(
        self, prepared: PreparedRequest, response: httpx.Response
    ) -> StreamingResponse:
        """Relay the raw upstream body as it arrives."""
        streaming = StreamingResponse(
            response.aiter_raw(),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        self._copy_headers(prepared, response, streaming)
        return streaming

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()

    async def _captured_response(
        self,
        prepared: PreparedRequest,
        response: httpx.Response,
    ) -> Response:
        """Buffer the body, persist it, then hand the client a fresh copy."""
        try:
            body = b"".join([chunk async for chunk in response.aiter_raw()])
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(prepared.service) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"failed to read response body: {e}", prepared.service
            ) from e
        finally:
            await response.aclose()

        await self._capture.capture(prepared, response.status_code, response.headers, body)

        buffered = Response(content=body, status_code=response.status_code)
        if prepared.method == "HEAD":
            # the upstream length describes the omitted body, not b""
            del buffered.headers["content-length"]
        self._copy_headers(prepared, response, buffered)
        return buffered

    def _copy_headers(
        self, prepared: PreparedRequest, upstream: httpx.Response, response: Response
    ) -> None:
        """Append relayed upstream headers, keeping repeated names."""
        relayed = self._headers.build_client_headers(
            upstream.headers.multi_items(), keep_length=prepared.method == "HEAD"
        )
        for key, value in relayed:
            response.headers.append(key, value)
