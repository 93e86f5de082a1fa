"""Custom exception hierarchy for the CORS relay."""

UNKNOWN_PROXY_ERROR = "Unknown proxy error"


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ClientInputError(ProxyError):
    """Raised when the inbound request cannot be relayed as given.

    Attributes:
        status_code: HTTP status returned to the caller
    """

    status_code = 400


class MissingTargetUrl(ClientInputError):
    """The ``url`` query parameter is missing or empty."""

    def __init__(self) -> None:
        super().__init__("Missing url query parameter.")


class InvalidJSON(ClientInputError):
    """Request body is declared as JSON but does not decode."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid JSON body: {detail}")


class RequestTooLarge(ClientInputError):
    """Request body exceeds size limit."""

    status_code = 413

    def __init__(self) -> None:
        super().__init__("Request body too large")


class UpstreamDispatchError(ProxyError):
    """Raised when the outbound call to the target could not complete.

    Attributes:
        message: Description extracted from the underlying failure
        target_url: URL the relay was dispatching to
    """

    status_code = 500

    def __init__(self, message: str, target_url: str | None = None) -> None:
        super().__init__(f"Proxy error: {message}")
        self.message = message
        self.target_url = target_url

    @classmethod
    def from_failure(cls, failure: object, target_url: str | None = None) -> "UpstreamDispatchError":
        return cls(describe_failure(failure), target_url=target_url)


def describe_failure(failure: object) -> str:
    """Return the failure's own description, or a fixed fallback.

    Only exceptions carrying a non-empty message count as describable;
    anything else (None, bare exceptions, arbitrary objects) maps to
    ``Unknown proxy error``.
    """
    if isinstance(failure, BaseException):
        message = str(failure).strip()
        if message:
            return message
    return UNKNOWN_PROXY_ERROR
