"""Shared protocol definitions."""

from typing import Protocol

import httpx


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_relay(
        self,
        method: str,
        url: str,
        status: int,
        *,
        headers: httpx.Headers | None = None,
    ) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
