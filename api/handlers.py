"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse

from core.config import Config
from core.exceptions import ClientInputError, InvalidJSON, MissingTargetUrl, RequestTooLarge
from core.headers import HeaderBuilder, sends_json_body
from core.protocols import RequestLogger


def _is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def _read_body(request: Request, max_size: int) -> bytes:
    """Read the inbound body, failing early once it exceeds ``max_size``."""
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_size:
        raise RequestTooLarge()

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_size:
            raise RequestTooLarge()
        chunks.append(chunk)
    return b"".join(chunks)


async def _parse_json_body(request: Request, max_size: int) -> Any:
    """Parse the inbound body as JSON.

    Bodies that are empty or not declared as JSON parse to an empty object.
    Only a top-level object or array is accepted.
    """
    if not _is_json_content_type(request.headers.get("content-type")):
        return {}

    raw_body = await _read_body(request, max_size)
    if not raw_body.strip():
        return {}

    try:
        body = json.loads(raw_body)
    except (JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJSON(str(e)) from e

    # Strict mode: bare scalars such as null or "x" are rejected
    if not isinstance(body, (dict, list)):
        raise InvalidJSON("top-level value must be an object or array")
    return body


def _client_error(error: ClientInputError) -> Response:
    return PlainTextResponse(str(error), status_code=error.status_code)


async def handle_proxy(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle /proxy: relay the request to the ``url`` query parameter."""
    target_url = request.query_params.get("url")
    if not target_url:
        return _client_error(MissingTargetUrl())

    if request.method == "OPTIONS":
        response = Response(status_code=204)
        response.raw_headers = HeaderBuilder.cors_headers()
        return response

    body: Any = None
    if sends_json_body(request.method):
        try:
            body = await _parse_json_body(request, config.limits.max_body_size)
        except ClientInputError as e:
            return _client_error(e)

    relay_service = request.app.state.relay_service
    outbound = relay_service.prepare(request.method, target_url, request.headers.raw, body)
    upstream = request.app.state.upstream_client

    return await upstream.relay(outbound, logger)
