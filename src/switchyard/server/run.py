"""Serve a router with pounce.

Pounce's ``run()`` takes an import string, but ``Router.listen`` has a
live router object, so ``pounce.Server`` is used directly with the ASGI
callable. Install with ``pip install switchyard[server]``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    log_level: str = "info",
    on_ready: Callable[[], Any] | None = None,
) -> None:
    """Start a single-worker pounce server for *app* (blocking).

    Args:
        app: ASGI callable (a frozen ``Router``).
        host: Bind host address.
        port: Bind port number.
        log_level: Log level (debug, info, warning, error, critical).
        on_ready: Called once the server is configured, before it
            starts accepting connections.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        log_level=log_level,
    )
    server = Server(config, app)
    if on_ready is not None:
        on_ready()
    server.run()
