"""Perch — minimal regex-routed HTTP dispatch over ASGI.

Routes are matched in registration order, each handler runs inside a
failure boundary, and every exchange gets exactly one response. A
leveled, call-site-annotated logger is shared by the dispatcher and
application code.

Basic usage::

    from perch import App

    app = App()

    @app.get(r"^/post/(\\d+)$")
    def show_post(ctx, args):
        ctx.log.debug("showing post %s", args[0])
        ctx.ok(f"post:{args[0]}")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "CriticalError",
    "Level",
    "Logger",
    "PerchError",
    "RequestContext",
    "Response",
    "deferred",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "RequestContext":
        from perch.http.context import RequestContext

        return RequestContext

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in ("Level", "Logger", "deferred"):
        from perch import log as _log

        return getattr(_log, name)

    if name in ("ConfigurationError", "CriticalError", "PerchError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
