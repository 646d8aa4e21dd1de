"""Immutable view of one inbound HTTP request.

Frozen metadata with async body access, built straight from the ASGI
scope. The transport owns parsing; the exchange just carries what it
delivered.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from perch._internal.types import Receive, Scope
from perch.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Exchange:
    """One inbound request, as delivered by the HTTP transport.

    ``protocol`` is the request-line form (``"HTTP/1.1"``).
    ``remote_addr`` is ``"host:port"``, or ``"-"`` when the transport
    does not report a client.
    """

    method: str
    path: str
    protocol: str
    remote_addr: str
    headers: Headers
    query_string: str

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: body cache (dict contents are mutable even though the field is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Exchange:
        """Build an exchange from an ASGI ``http`` scope."""
        client = scope.get("client")
        remote_addr = f"{client[0]}:{client[1]}" if client else "-"
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            protocol=f"HTTP/{scope.get('http_version', '1.1')}",
            remote_addr=remote_addr,
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            _receive=receive,
        )

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break
