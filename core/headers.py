"""Header rules for outbound requests and relayed responses."""

import httpx

CORS_HEADERS: tuple[tuple[str, str], ...] = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Headers", "*"),
    ("Access-Control-Allow-Methods", "*"),
)
CORS_HEADER_NAMES = frozenset(name.lower() for name, _ in CORS_HEADERS)

# Describe inbound framing only; the transport recomputes them
FRAMING_HEADERS = frozenset({"content-length", "transfer-encoding"})

JSON_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def sends_json_body(method: str) -> bool:
    """Return True if the relay sends a JSON body for this method."""
    return method.upper() in JSON_BODY_METHODS


class HeaderBuilder:
    """Build header sets for both legs of a relay.

    Header collections are ``httpx.Headers``: ordered, case-insensitive
    and able to hold repeated names.
    """

    def build_outbound_headers(
        self,
        inbound: list[tuple[bytes, bytes]],
        *,
        json_body: bool,
    ) -> httpx.Headers:
        """Copy inbound headers except ``Host``, keeping duplicates.

        When a JSON body is sent, ``content-type`` is forced to
        ``application/json`` regardless of the inbound value.
        """
        kept = [
            (raw_name, raw_value)
            for raw_name, raw_value in inbound
            if raw_name.lower() != b"host"
            and raw_name.lower().decode("latin-1") not in FRAMING_HEADERS
        ]
        outbound = httpx.Headers(kept)
        if json_body:
            outbound["content-type"] = "application/json"
        return outbound

    def build_relayed_headers(self, upstream: httpx.Headers) -> list[tuple[bytes, bytes]]:
        """CORS triad first, then target headers minus the same three names."""
        relayed = self.cors_headers()
        for raw_name, raw_value in upstream.raw:
            if raw_name.lower().decode("latin-1") in CORS_HEADER_NAMES:
                continue
            relayed.append((raw_name.lower(), raw_value))
        return relayed

    @staticmethod
    def cors_headers() -> list[tuple[bytes, bytes]]:
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in CORS_HEADERS
        ]
