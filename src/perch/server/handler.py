"""ASGI dispatcher — turns each inbound exchange into exactly one response.

The only component that sees every request. For each ASGI ``http``
scope it builds an ``Exchange`` and a ``RequestContext``, matches the
route table, runs the handler inside the failure boundary, falls back
to 404 or 500, logs the hit once, and sends the committed response.
"""

from perch._internal.types import Receive, Scope, Send
from perch.context import log_var
from perch.http.context import RequestContext
from perch.http.exchange import Exchange
from perch.log import Logger
from perch.routing.router import Router
from perch.server.boundary import protect
from perch.server.sender import send_response

NOT_FOUND_BODY = "<h1>Not found</h1>"
INTERNAL_ERROR_BODY = "Internal server error"


class Dispatcher:
    """Owns the route table and handles every exchange the transport delivers.

    The router must be compiled before the first exchange; after that it
    is only read, so any number of exchanges can be in flight at once.
    """

    __slots__ = ("log", "log_hits", "router")

    def __init__(self, router: Router, log: Logger, *, log_hits: bool = True) -> None:
        self.router = router
        self.log = log
        self.log_hits = log_hits

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process a single HTTP exchange through the full pipeline."""
        if scope["type"] != "http":
            return

        exchange = Exchange.from_asgi(scope, receive)
        token = log_var.set(self.log)
        try:
            ctx = await self.dispatch(exchange)
            if self.log_hits:
                ctx.log_hit()
        finally:
            log_var.reset(token)

        assert ctx.response is not None
        await send_response(ctx.response, send)

    async def dispatch(self, exchange: Exchange) -> RequestContext:
        """Match, run the handler, and return a context that has replied."""
        ctx = RequestContext(exchange, self.log)

        match = self.router.match(exchange.method, exchange.path)
        if match is None:
            ctx.not_found(NOT_FOUND_BODY)
            return ctx

        route = match.route
        self.log.debug("%s %s matched route %s %r", exchange.method, exchange.path, route.method, route.pattern)
        outcome = await protect(route.handler, ctx, match.args, log=self.log)

        if outcome.failed:
            # Whatever the handler committed before failing is dropped unsent
            ctx = RequestContext(exchange, self.log)
            ctx.reply(500, INTERNAL_ERROR_BODY)
        elif not ctx.replied:
            self.log.warn(
                "handler %s for %s %r returned without replying",
                getattr(route.handler, "__qualname__", repr(route.handler)),
                route.method,
                route.pattern,
            )
            ctx.reply(500, INTERNAL_ERROR_BODY)
        return ctx
