"""Type aliases shared by the routing, server, and testing layers.

ASGI messages are plain mappings; perch only reads the keys it needs
(``type``, ``method``, ``path``, ``client``, ``body``, ``more_body``).
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Message: TypeAlias = MutableMapping[str, Any]
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

# handler(ctx, args) replies through ctx and may be a coroutine function
Handler: TypeAlias = Callable[[Any, tuple[str, ...]], Any]
