"""CLI entry point for cors-relay."""

import os
import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import PORT_ENV, load_config
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def apply_port_flag(argv: list[str]) -> None:
    """Copy the value following ``--port`` into the port environment variable."""
    if "--port" not in argv:
        return
    index = argv.index("--port")
    if index + 1 < len(argv) and argv[index + 1]:
        os.environ[PORT_ENV] = argv[index + 1]


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    argv = sys.argv[1:] if argv is None else argv

    if "--help" in argv or "-h" in argv:
        _print_help()
        return

    apply_port_flag(argv)
    config = load_config()

    if "--config" in argv:
        console.print_json(config.model_dump_json())
        return

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]CORS Relay[/bold cyan]

Relays any request to the URL given in the [bold]url[/bold] query parameter
and answers with permissive CORS headers.

[bold]Usage:[/bold]
    cors-relay                 Start with live dashboard
    cors-relay --port 9000     Listen on another port (sets PROXY_PORT)
    cors-relay --config        Show effective configuration
    cors-relay --help          Show this help

[bold]Example:[/bold]
    curl 'http://localhost:8080/proxy?url=https://api.example.com/data'

[bold]Environment:[/bold]
    PROXY_PORT, PROXY_HOST, PROXY_TIMEOUT, PROXY_MAX_REDIRECTS,
    PROXY_MAX_BODY_SIZE, PROXY_LOG_REQUESTS (also read from .env)
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
