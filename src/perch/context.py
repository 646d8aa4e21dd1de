"""Exchange-scoped logger context via ContextVar.

Provides ``log_var``: the ``Logger`` bound to the exchange being handled
on this task. The dispatcher sets it before matching and resets it after
the response is rendered, so ``perch.log.info(...)`` and friends reach
the app's logger without a process-wide singleton.

Accessing it outside an exchange raises ``LookupError``. Code that runs
outside an exchange (startup, scripts) can ``bind()`` a logger itself.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local across
    worker threads. No locks needed.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.log import Logger

log_var: ContextVar[Logger] = ContextVar("perch_log")
"""The logger for the current exchange. Set by the dispatcher."""


def get_logger() -> Logger:
    """Return the logger bound to the current context.

    Raises ``LookupError`` if no logger is bound.
    """
    return log_var.get()


def bind(logger: Logger) -> Token[Logger]:
    """Bind *logger* to the current context. Reset with ``log_var.reset(token)``."""
    return log_var.set(logger)
