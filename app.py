"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.relay_service import RelayService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``http_client`` replaces the outbound client built from configuration;
    a supplied client is left open on shutdown.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.upstream.timeout),
            follow_redirects=True,
            max_redirects=config.upstream.max_redirects,
        )
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(client, header_builder)
        app.state.relay_service = RelayService(header_builder)
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(title="CORS Relay", version="1.0.0", lifespan=lifespan)

    async def proxy(request: Request):
        return await handle_proxy(request, config, logger)

    # No method list: the relay accepts any HTTP method, including extension ones
    app.add_route("/proxy", proxy, methods=None, include_in_schema=False)

    return app
