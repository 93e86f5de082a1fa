"""Shared request data types."""

from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class OutboundRequest:
    """Prepared data for the outbound leg of a relay."""

    method: str
    url: str
    headers: httpx.Headers
    content: bytes | None = None
