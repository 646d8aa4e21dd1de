"""Rendered HTTP response.

A ``Response`` is the frozen result of ``RequestContext.reply()``: the
status, the final header list, and the body bytes exactly as they go on
the wire. The sender turns it into ASGI messages; the test client hands
the same type back to tests.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Response:
    """A committed HTTP response. Immutable."""

    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value of header *name* (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    def header_list(self, name: str) -> list[str]:
        """Return every value of header *name* (case-insensitive)."""
        lowered = name.lower()
        return [value for key, value in self.headers if key.lower() == lowered]

    def has_header(self, name: str) -> bool:
        lowered = name.lower()
        return any(key.lower() == lowered for key, _ in self.headers)
