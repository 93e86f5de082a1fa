"""HTTP relaying of outbound requests to the target."""

from collections.abc import AsyncIterator

import httpx
from fastapi import Response
from fastapi.responses import PlainTextResponse, StreamingResponse

from core.exceptions import UpstreamDispatchError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import OutboundRequest

BODYLESS_STATUSES = frozenset({204, 205, 304})


class UpstreamClient:
    """Send outbound requests and stream the target's response back."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._client = client
        self._headers = header_builder or HeaderBuilder()

    async def relay(
        self,
        outbound: OutboundRequest,
        logger: RequestLogger,
    ) -> Response:
        """Dispatch ``outbound`` and relay the result.

        Any failure before the target's status line and headers arrive
        becomes a plain 500 response; nothing from a half-received
        response leaks into it.
        """
        try:
            request = self._client.build_request(
                outbound.method,
                outbound.url,
                headers=outbound.headers,
                content=outbound.content,
            )
            response = await self._client.send(request, stream=True, follow_redirects=True)
        except Exception as e:  # noqa: BLE001
            error = UpstreamDispatchError.from_failure(e, target_url=outbound.url)
            logger.log_error(f"{outbound.method} {outbound.url}", error.status_code, error.message)
            return PlainTextResponse(str(error), status_code=error.status_code)

        logger.log_relay(
            outbound.method,
            outbound.url,
            response.status_code,
            headers=outbound.headers,
        )
        relayed_headers = self._headers.build_relayed_headers(response.headers)

        if not self._has_body(outbound.method, response):
            await response.aclose()
            relayed = Response(status_code=response.status_code)
        else:
            relayed = StreamingResponse(
                self._stream_body(response),
                status_code=response.status_code,
            )
        relayed.raw_headers = relayed_headers
        return relayed

    async def _stream_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the target's raw body, releasing the connection when done.

        Raw bytes: content-encoding is relayed as-is, so nothing is decoded.
        The ``finally`` also runs when the client disconnects mid-stream.
        """
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        finally:
            await response.aclose()

    @staticmethod
    def _has_body(method: str, response: httpx.Response) -> bool:
        if method.upper() == "HEAD":
            return False
        if response.status_code < 200 or response.status_code in BODYLESS_STATUSES:
            return False
        return response.headers.get("content-length", "").strip() != "0"
