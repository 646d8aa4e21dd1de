"""ASGI response sending — translates a committed Response to ASGI messages.

Headers are sent exactly as ``RequestContext.reply()`` left them; the
sender adds nothing, so an empty body really does go out without
``Content-Type`` or ``Content-Length``.
"""

from perch._internal.types import Send
from perch.http.response import Response


async def send_response(response: Response, send: Send) -> None:
    """Translate a perch Response into ASGI send() calls."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    ]

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": response.body,
        }
    )
