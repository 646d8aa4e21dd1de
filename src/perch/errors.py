"""Perch exception hierarchy.

Shared across Router, App, RequestContext, and the logger so every
module raises and catches the same types.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app configuration is invalid.

    Typically raised by ``Router.add()`` for a route pattern that does not
    compile. The app turns it into a CRITICAL log line, so the process
    never starts serving with a broken route table.
    """


class CriticalError(PerchError):
    """Raised after a CRITICAL line has been written to the log.

    Signals an invariant violation the caller cannot safely continue
    past, such as replying twice to one exchange. The message is the
    rendered log message.
    """
