"""Serve a perch App over HTTP with pounce.

Pounce owns the listening socket, HTTP parsing, keep-alive and the
read/write timeouts; perch only sees ASGI scopes. A failure to bind or
listen is logged and ends the process. Perch does not try to restart.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    request_timeout: float = 10.0,
    keep_alive_timeout: float = 5.0,
) -> None:
    """Start a pounce server for *app* and block until it stops.

    Pounce takes an import string in ``run()``, but perch has a live
    ``App`` object, so ``pounce.Server`` is used directly with the ASGI
    callable.

    Raises ``SystemExit(1)`` if the transport cannot bind or listen.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        request_timeout=request_timeout,
        keep_alive_timeout=keep_alive_timeout,
    )
    server = Server(config, app)

    app.log.info("application started: listening on %s:%d", host, port)
    try:
        server.run()
    except OSError as exc:
        app.log.error("transport failure on %s:%d: %s", host, port, exc)
        raise SystemExit(1) from exc
