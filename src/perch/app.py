"""Perch application class.

Mutable during setup (route registration). Frozen at runtime when
app.run() or __call__() is first invoked.
"""

import sys
import threading
from collections.abc import Callable

from perch._internal.types import Handler, Receive, Scope, Send
from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.log import Logger, parse_level
from perch.routing.router import Router
from perch.server.handler import Dispatcher


class App:
    """The perch application.

    Owns the config, the logger, and the route table. Routes are matched
    in registration order; the first match wins.

    Usage::

        app = App()

        @app.get(r"^/post/(\\d+)$")
        def show_post(ctx, args):
            ctx.ok(f"post:{args[0]}")

        app.run()

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the route table, even when several ASGI workers
        receive their first request at the same moment.
    """

    __slots__ = (
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_router",
        "config",
        "log",
    )

    def __init__(self, config: AppConfig | None = None, *, log: Logger | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.log: Logger = log or Logger(sys.stdout, parse_level(self.config.log_level))
        self._router = Router()
        self._dispatcher: Dispatcher | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    @property
    def router(self) -> Router:
        return self._router

    # -- Route registration --

    def register_route(self, pattern: str, method: str, handler: Handler) -> Handler:
        """Register *handler* for requests with *method* whose path matches *pattern*.

        A pattern that does not compile is fatal: it is logged at
        CRITICAL and ``CriticalError`` propagates out of registration, so
        the app never starts serving.
        """
        self._check_not_frozen()
        try:
            self._router.add(pattern, method, handler)
        except ConfigurationError as exc:
            self.log.critical("could not register route %s %r: %s", method, pattern, exc)
        return handler

    def route(self, pattern: str, *, method: str = "GET") -> Callable[[Handler], Handler]:
        """Register a route handler via decorator."""

        def decorator(func: Handler) -> Handler:
            return self.register_route(pattern, method, func)

        return decorator

    def get(self, pattern: str, handler: Handler | None = None) -> Handler:
        """Register a GET route (also serves HEAD). Direct call or decorator."""
        return self._register_or_decorate(pattern, "GET", handler)

    def post(self, pattern: str, handler: Handler | None = None) -> Handler:
        """Register a POST route. Direct call or decorator."""
        return self._register_or_decorate(pattern, "POST", handler)

    def put(self, pattern: str, handler: Handler | None = None) -> Handler:
        """Register a PUT route. Direct call or decorator."""
        return self._register_or_decorate(pattern, "PUT", handler)

    def delete(self, pattern: str, handler: Handler | None = None) -> Handler:
        """Register a DELETE route. Direct call or decorator."""
        return self._register_or_decorate(pattern, "DELETE", handler)

    def _register_or_decorate(self, pattern: str, method: str, handler: Handler | None) -> Handler:
        if handler is not None:
            return self.register_route(pattern, method, handler)
        return self.route(pattern, method=method)

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start serving over HTTP. Blocks until the server stops.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        self._ensure_frozen()

        from perch.server.serve import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            request_timeout=self.config.request_timeout,
            keep_alive_timeout=self.config.keep_alive_timeout,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the dispatcher.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        assert self._dispatcher is not None

        await self._dispatcher.handle(scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                self._ensure_frozen()
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self._router.compile()
        self._dispatcher = Dispatcher(self._router, self.log, log_hits=self.config.log_hits)
        self._frozen = True
        self.log.debug("route table frozen with %d routes", len(self._router))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes before calling app.run()."
            )
            raise RuntimeError(msg)
