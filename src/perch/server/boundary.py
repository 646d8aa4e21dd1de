"""Failure boundary around one handler invocation.

A handler has no error-return channel: it either replies or raises.
``protect()`` runs the handler and turns any exception into a normal
``Outcome`` value, after writing one ERROR entry that carries the fault
and its stack frames. Nothing escapes past dispatch, so one broken
handler never takes the process down and never leaves an exchange
without a response.

``BaseException`` subclasses that are not ``Exception`` (task
cancellation, ``KeyboardInterrupt``) are not faults and pass through.
"""

from __future__ import annotations

import inspect
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING

from perch._internal.types import Handler

if TYPE_CHECKING:
    from perch.http.context import RequestContext
    from perch.log import Logger

# Frames from this file belong to the boundary itself and are left out
_BOUNDARY_FILE = __file__


@dataclass(frozen=True, slots=True)
class Outcome:
    """How a protected handler call ended."""

    failed: bool = False
    error: Exception | None = None


def format_fault(exc: BaseException) -> str:
    """Describe *exc* plus one ``! file:line in func`` line per frame.

    Frames inside the boundary are skipped. The result is a single
    multi-line log message.
    """
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    lines = [f"handler crashed: {type(exc).__name__}: {exc}"]
    lines.extend(
        f"! {frame.filename}:{frame.lineno} in {frame.name}"
        for frame in frames
        if frame.filename != _BOUNDARY_FILE
    )
    return "\n".join(lines)


async def protect(
    handler: Handler,
    ctx: RequestContext,
    args: tuple[str, ...],
    *,
    log: Logger,
) -> Outcome:
    """Run ``handler(ctx, args)``; report a fault instead of raising it.

    Plain functions run inline; coroutine functions are awaited.
    """
    try:
        result = handler(ctx, args)
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        log.error(format_fault(exc))
        return Outcome(failed=True, error=exc)
    return Outcome()
