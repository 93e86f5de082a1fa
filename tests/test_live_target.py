"""End-to-end relay tests against a target listening on a real socket."""

import http.server
import threading

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class TargetHandler(http.server.BaseHTTPRequestHandler):
    def do_GET(self):  # noqa: N802
        if self.path == "/old":
            self.send_response(302)
            self.send_header("Location", "/hello")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        body = b"hello"
        self.send_response(200)
        self.send_header("x-proxy-test", "42")
        self.send_header("Access-Control-Allow-Origin", "abc")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_POST(self):  # noqa: N802
        received = self.rfile.read(int(self.headers.get("Content-Length", "0")))
        self.send_response(201)
        self.send_header("Content-Type", self.headers.get("Content-Type", ""))
        self.send_header("Content-Length", str(len(received)))
        self.end_headers()
        self.wfile.write(received)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def live_target():
    """Base URL of a target server running in a background thread."""
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), TargetHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def live_client(mock_logger):
    """Relay test client using a real outbound HTTP client."""
    http_client = httpx.AsyncClient(follow_redirects=True, trust_env=False)
    app = create_app(Config(), mock_logger, http_client=http_client)
    with TestClient(app) as client:
        yield client


def test_get_is_relayed(live_client, live_target):
    response = live_client.get("/proxy", params={"url": f"{live_target}/hello"})

    assert response.status_code == 200
    assert response.text == "hello"
    assert response.headers["x-proxy-test"] == "42"
    assert response.headers.get_list("access-control-allow-origin") == ["*"]
    assert response.headers["access-control-allow-methods"] == "*"


def test_redirect_is_followed(live_client, live_target):
    response = live_client.get("/proxy", params={"url": f"{live_target}/old"})

    assert response.status_code == 200
    assert response.text == "hello"


def test_post_body_is_echoed(live_client, live_target):
    response = live_client.post(
        "/proxy",
        params={"url": f"{live_target}/echo"},
        json={"foo": "bar"},
    )

    assert response.status_code == 201
    assert response.content == b'{"foo":"bar"}'
    assert response.headers["content-type"] == "application/json"


def test_unreachable_target(live_client):
    response = live_client.get("/proxy", params={"url": "http://127.0.0.1:1/"})

    assert response.status_code == 500
    assert response.text.startswith("Proxy error: ")
