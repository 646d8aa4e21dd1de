"""Leveled, call-site-annotated logger.

Built on the stdlib ``logging`` package. Each ``Logger`` owns a private
``logging.Logger`` (never registered with the global manager, so two
instances never share level or handlers) and a single ``SinkHandler``.

Every line has the shape::

    I [2026-10-19T09:14:03+00:00 4242] (app.py:57) hit: 127.0.0.1:0 GET / HTTP/1.1 200 5

State machine per call:

1. **filtered** — severity below the minimum: return immediately. No
   formatting, no caller lookup, no I/O, deferred closures never run.
2. **formatting** — resolve the caller's file and line ``call_depth``
   frames above the public log method, render the message once. A
   template that does not fit its arguments is written with a
   ``%!(BADFORMAT ...)`` marker instead of raising.
3. **writing** — the handler lock is held while the line is formatted
   and written with a single ``write()`` call, so lines from concurrent
   exchanges never interleave.

``critical()`` raises ``CriticalError`` once the line is written.

Module-level ``trace()`` … ``critical()`` forward to the logger bound to
the current exchange (see ``perch.context``).
"""

import logging
import sys
from collections.abc import Callable
from datetime import datetime
from enum import IntEnum
from typing import Any, TextIO

from perch.context import get_logger
from perch.errors import CriticalError


class Level(IntEnum):
    """Priority level of a log message, lowest first."""

    TRACE = 5
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @property
    def letter(self) -> str:
        """Single-letter tag used at the start of each log line."""
        return self.name[0]


logging.addLevelName(Level.TRACE, "TRACE")

_LEVEL_VALUES = frozenset(Level)

_LEVEL_ALIASES: dict[str, Level] = {
    "warning": Level.WARN,
    "fatal": Level.CRITICAL,
}


def parse_level(value: Level | int | str) -> Level:
    """Coerce a level name or number into a ``Level``.

    Names are case-insensitive and accept the stdlib spellings
    (``"warning"``). Raises ``ValueError`` for anything else.
    """
    if isinstance(value, str):
        key = value.strip().lower()
        if key in _LEVEL_ALIASES:
            return _LEVEL_ALIASES[key]
        try:
            return Level[key.upper()]
        except KeyError:
            msg = f"Unknown log level {value!r}. Expected one of: {', '.join(lvl.name for lvl in Level)}"
            raise ValueError(msg) from None
    return Level(value)


def deferred(fmt: str, *args: Any) -> Callable[[], str]:
    """Build a closure that renders ``fmt % args`` only when called.

    Pass the result to any log method to skip the formatting cost when
    the message would be filtered::

        log.trace(deferred("cache state: %r", expensive_snapshot))
    """

    def render() -> str:
        return fmt % args if args else fmt

    return render


class LineFormatter(logging.Formatter):
    """``<L> [<RFC 3339 time> <pid>] (<file>:<line>) <message>``, newline-terminated."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="seconds")
        letter = Level(record.levelno).letter if record.levelno in _LEVEL_VALUES else "?"
        line = f"{letter} [{stamp} {record.process}] ({record.filename}:{record.lineno}) {record.getMessage()}"
        if not line.endswith("\n"):
            line += "\n"
        return line


class SinkHandler(logging.StreamHandler):
    """Stream handler whose formatter already supplies the newline.

    ``logging.Handler.handle()`` holds the handler lock around format and
    write, which is what serializes concurrent callers.
    """

    terminator = ""


class Logger:
    """Serialized, leveled output of log lines to a text sink.

    Safe to share between concurrent tasks and worker threads.

    Args:
        sink: Writable text stream. Defaults to ``sys.stdout``.
        level: Lowest level that is written.
        call_depth: Frames above the public log method to report as the
            call site. ``1`` reports the direct caller of ``log.info()``;
            helpers that forward to the logger pass ``2``.
        name: Name of the underlying ``logging.Logger``.
    """

    __slots__ = ("_call_depth", "_handler", "_logger")

    def __init__(
        self,
        sink: TextIO | None = None,
        level: Level | int | str = Level.TRACE,
        call_depth: int = 1,
        *,
        name: str = "perch",
    ) -> None:
        self._logger = logging.Logger(name, parse_level(level))
        self._logger.propagate = False
        self._handler = SinkHandler(sink if sink is not None else sys.stdout)
        self._handler.setFormatter(LineFormatter())
        self._logger.addHandler(self._handler)
        self._call_depth = call_depth

    def __repr__(self) -> str:
        return f"<Logger {self._logger.name!r} level={self.get_level().name}>"

    # -- Configuration --

    @property
    def level(self) -> Level:
        return self.get_level()

    @property
    def call_depth(self) -> int:
        return self._call_depth

    def get_level(self) -> Level:
        """Return the lowest level this logger writes."""
        return Level(self._logger.level)

    def set_level(self, level: Level | int | str) -> None:
        """Set the lowest level this logger writes.

        Numbers outside ``Level`` are ignored. Unknown names raise
        ``ValueError``.
        """
        if not isinstance(level, str) and level not in _LEVEL_VALUES:
            return
        self._logger.setLevel(parse_level(level))

    def set_sink(self, sink: TextIO) -> None:
        """Swap the output stream. Takes the handler lock."""
        self._handler.setStream(sink)

    # -- Log methods --

    def trace(self, msg: Any, *args: Any) -> None:
        """Log a TRACE message."""
        self._emit(Level.TRACE, msg, args, self._call_depth)

    def debug(self, msg: Any, *args: Any) -> None:
        """Log a DEBUG message."""
        self._emit(Level.DEBUG, msg, args, self._call_depth)

    def info(self, msg: Any, *args: Any) -> None:
        """Log an INFO message."""
        self._emit(Level.INFO, msg, args, self._call_depth)

    def warn(self, msg: Any, *args: Any) -> None:
        """Log a WARN message."""
        self._emit(Level.WARN, msg, args, self._call_depth)

    def error(self, msg: Any, *args: Any) -> None:
        """Log an ERROR message."""
        self._emit(Level.ERROR, msg, args, self._call_depth)

    def critical(self, msg: Any, *args: Any) -> None:
        """Log a CRITICAL message, then raise ``CriticalError`` with it."""
        message = self._emit(Level.CRITICAL, msg, args, self._call_depth)
        raise CriticalError(message)

    def _emit(self, level: Level, msg: Any, args: tuple[Any, ...], depth: int) -> str:
        """Filter, resolve the call site, and hand the record to the sink.

        Must be called directly from the public log method (or a
        module-level forwarder) so ``depth`` counts frames correctly.
        Returns the rendered message, or ``""`` when filtered.
        """
        if level < self._logger.level:
            return ""

        message = _render(msg, args)

        # stacklevel 1 is this frame, 2 the log method, 3 its caller
        pathname, lineno, func, _ = self._logger.findCaller(stacklevel=depth + 2)
        record = self._logger.makeRecord(
            self._logger.name, level, pathname, lineno, message, (), None, func
        )
        self._logger.handle(record)
        return message


def _render(msg: Any, args: tuple[Any, ...]) -> str:
    """Turn a log call's arguments into the final message text.

    A template that does not fit its arguments still produces a line,
    with a ``%!(BADFORMAT ...)`` marker in place of the rendered text.
    """
    if callable(msg):
        return str(msg())
    if not isinstance(msg, str):
        return " ".join(str(part) for part in (msg, *args))
    if not args:
        return msg
    try:
        return msg % args
    except (TypeError, ValueError):
        return f"{msg} %!(BADFORMAT {args!r})"


# -- Forwarding wrappers --
#
# Each calls ``_emit`` directly, so the frame layout (and therefore the
# reported call site) matches the bound methods above.


def trace(msg: Any, *args: Any) -> None:
    """Log a TRACE message to the logger of the current exchange."""
    log = get_logger()
    log._emit(Level.TRACE, msg, args, log.call_depth)


def debug(msg: Any, *args: Any) -> None:
    """Log a DEBUG message to the logger of the current exchange."""
    log = get_logger()
    log._emit(Level.DEBUG, msg, args, log.call_depth)


def info(msg: Any, *args: Any) -> None:
    """Log an INFO message to the logger of the current exchange."""
    log = get_logger()
    log._emit(Level.INFO, msg, args, log.call_depth)


def warn(msg: Any, *args: Any) -> None:
    """Log a WARN message to the logger of the current exchange."""
    log = get_logger()
    log._emit(Level.WARN, msg, args, log.call_depth)


def error(msg: Any, *args: Any) -> None:
    """Log an ERROR message to the logger of the current exchange."""
    log = get_logger()
    log._emit(Level.ERROR, msg, args, log.call_depth)


def critical(msg: Any, *args: Any) -> None:
    """Log a CRITICAL message to the current exchange's logger and raise."""
    log = get_logger()
    message = log._emit(Level.CRITICAL, msg, args, log.call_depth)
    raise CriticalError(message)
