"""Production runner backed by pounce.

Pounce owns the listening socket, worker processes, signal handling and
graceful shutdown; stiff only hands it the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stiff.app import FileServer


def run_server(
    app: FileServer,
    host: str = "0.0.0.0",
    port: int = 1717,
    workers: int = 1,
    *,
    log_level: str = "info",
    keep_alive_timeout: float = 5.0,
    request_timeout: float = 30.0,
) -> None:
    """Serve *app* with pounce until the process is asked to stop.

    Args:
        app: A fully built FileServer (file map already scanned).
        host: Bind address (default: 0.0.0.0 for all interfaces).
        port: Bind port (default: 1717).
        workers: Worker count (0 = auto-detect from CPU count).
        log_level: Pounce log level (debug, info, warning, error, critical).
        keep_alive_timeout: Keep-alive connection timeout (seconds).
        request_timeout: Individual request timeout (seconds).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
        keep_alive_timeout=keep_alive_timeout,
        request_timeout=request_timeout,
    )
    server = Server(config, app)
    server.run()
