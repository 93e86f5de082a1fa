"""Outbound request preparation for the relay."""

import json
from typing import Any

from core.headers import HeaderBuilder, sends_json_body
from core.request_types import OutboundRequest


class RelayService:
    """Turn an inbound request into the equivalent outbound one."""

    def __init__(self, header_builder: HeaderBuilder) -> None:
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        target_url: str,
        headers: list[tuple[bytes, bytes]],
        body: Any = None,
    ) -> OutboundRequest:
        """Prepare the outbound request.

        The target URL is used verbatim. ``body`` is the already parsed
        inbound JSON value and is only sent for POST, PUT and PATCH.
        """
        json_body = sends_json_body(method)
        upstream_headers = self._headers.build_outbound_headers(headers, json_body=json_body)
        content = serialize_json(body) if json_body else None
        return OutboundRequest(method, target_url, upstream_headers, content)


def serialize_json(value: Any) -> bytes:
    """Compact JSON text, e.g. ``{"foo":"bar"}``."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
