"""Per-exchange request context.

A ``RequestContext`` wraps exactly one exchange and is the only thing a
handler writes to. It collects headers, then ``reply()`` renders the
final response once. A second ``reply()`` is a handler bug that would
put two status lines on the wire, so it is logged at CRITICAL and
raises ``CriticalError`` instead of writing anything.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime
from typing import TYPE_CHECKING

from perch.http.exchange import Exchange
from perch.http.headers import Headers, ResponseHeaders
from perch.http.response import Response

if TYPE_CHECKING:
    from perch.log import Logger

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # 1xx, 204 and 304 responses never carry a message body
    return not (100 <= status < 200 or status in {204, 304})


def http_date(moment: datetime) -> str:
    """Format *moment* for HTTP headers (RFC 1123, literal ``GMT`` zone)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return format_datetime(moment.astimezone(UTC), usegmt=True)


class RequestContext:
    """State for one HTTP request/response cycle.

    Created by the dispatcher right before route matching and owned by
    the single task handling the exchange. Never shared.

    Attributes:
        status: Status of the reply (200 until ``reply()`` says otherwise).
        content_length: Byte length of the reply body.
        content_type: Sent with any non-empty body. Set it before replying
            to override the HTML default.
        timestamp: Creation time, used for the ``Date`` header.
        replied: True once ``reply()`` has committed a response.
        log: The app logger.
    """

    __slots__ = (
        "_exchange",
        "_headers",
        "_response",
        "content_length",
        "content_type",
        "log",
        "replied",
        "status",
        "timestamp",
    )

    def __init__(self, exchange: Exchange, log: Logger, *, now: datetime | None = None) -> None:
        self._exchange = exchange
        self._headers = ResponseHeaders()
        self._response: Response | None = None
        self.log = log
        self.status = 200
        self.content_length = 0
        self.content_type = DEFAULT_CONTENT_TYPE
        self.timestamp = now or datetime.now(UTC)
        self.replied = False

    def __repr__(self) -> str:
        return f"<RequestContext {self.method} {self.path} status={self.status} replied={self.replied}>"

    # -- Request access --

    @property
    def exchange(self) -> Exchange:
        return self._exchange

    @property
    def method(self) -> str:
        return self._exchange.method

    @property
    def path(self) -> str:
        return self._exchange.path

    @property
    def protocol(self) -> str:
        return self._exchange.protocol

    @property
    def remote_addr(self) -> str:
        return self._exchange.remote_addr

    @property
    def headers(self) -> Headers:
        """Request headers."""
        return self._exchange.headers

    @property
    def query_string(self) -> str:
        return self._exchange.query_string

    async def body(self) -> bytes:
        """Read the request body."""
        return await self._exchange.body()

    # -- Response headers --

    @property
    def response_headers(self) -> ResponseHeaders:
        return self._headers

    def set_header(self, name: str, value: str) -> None:
        """Set header *name*, replacing any value already set."""
        self._headers.set(name, value)

    def add_header(self, name: str, value: str) -> None:
        """Add another instance of header *name* (e.g. ``Set-Cookie``)."""
        self._headers.add(name, value)

    # -- Replying --

    @property
    def response(self) -> Response | None:
        """The committed response, or None before ``reply()``."""
        return self._response

    def ok(self, body: str | bytes = "") -> None:
        """Reply 200 OK with *body*. Use an empty body for none."""
        self.reply(200, body)

    def not_found(self, body: str | bytes = "") -> None:
        """Reply 404 Not Found with *body*. Use an empty body for none."""
        self.reply(404, body)

    def reply(self, status: int, body: str | bytes | bytearray | memoryview = "") -> None:
        """Commit the response: *status* plus *body*.

        Always sets ``Date``. A non-empty body also gets ``Content-Type``
        and ``Content-Length``; statuses of 400 and up get
        ``Connection: close``. HEAD exchanges and 1xx, 204 and 304 replies
        never carry body bytes.

        Raises ``CriticalError`` (after a CRITICAL log line) if this
        context has already replied; nothing is written in that case.
        Raises ``TypeError`` if *body* is neither text nor bytes.
        """
        if self.replied:
            self.log.critical("this context has already been replied to!")

        if isinstance(body, str):
            payload = body.encode("utf-8")
        elif isinstance(body, (bytes, bytearray, memoryview)):
            payload = bytes(body)
        else:
            msg = f"reply body must be str or bytes, not {type(body).__name__}"
            raise TypeError(msg)
        if self._exchange.method == "HEAD" or not _body_allowed(status):
            payload = b""

        self.status = status
        self.content_length = len(payload)
        self.set_header("Date", http_date(self.timestamp))
        if self.content_length > 0:
            self.set_header("Content-Type", self.content_type)
            self.set_header("Content-Length", str(self.content_length))
        if self.status >= 400:
            self.set_header("Connection", "close")

        self.replied = True
        self._response = Response(status=status, headers=self._headers.items(), body=payload)

    # -- Hit log --

    def log_hit(self) -> None:
        """Record the exchange and its outcome in the log at INFO."""
        sent = str(self.content_length) if self.content_length > 0 else "-"
        self.log.info(
            "hit: %s %s %s %s %d %s",
            self.remote_addr,
            self.method,
            self.path,
            self.protocol,
            self.status,
            sent,
        )
