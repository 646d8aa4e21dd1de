"""Ordered route table with first-match lookup.

Routes are registered during setup and frozen when the app starts
serving. After ``compile()`` the table is read-only, so concurrent
lookups need no locking.
"""

import re

from perch._internal.types import Handler
from perch.errors import ConfigurationError
from perch.routing.route import METHODS, Route, RouteMatch


class Router:
    """Ordered route table. The first registered route that matches wins.

    Usage::

        router = Router()
        router.add(r"/post/(\\d+)", "GET", show_post)
        router.compile()
        match = router.match("GET", "/post/42")   # match.args == ("42",)
    """

    __slots__ = ("_compiled", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._compiled = False

    def __len__(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, in registration order."""
        return tuple(self._routes)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def add(self, pattern: str, method: str, handler: Handler) -> Route:
        """Compile *pattern* and append a route. Must be called before compile().

        Raises ``ConfigurationError`` if the pattern does not compile or
        the method is not one of GET, POST, PUT, DELETE.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        method = method.upper()
        if method not in METHODS:
            msg = f"Unsupported method {method!r} for route {pattern!r}. Expected one of: {', '.join(sorted(METHODS))}"
            raise ConfigurationError(msg)

        try:
            regex = re.compile(pattern)
        except re.error as exc:
            msg = f"Could not compile route pattern {pattern!r}: {exc}"
            raise ConfigurationError(msg) from exc

        route = Route(pattern=pattern, regex=regex, method=method, handler=handler)
        self._routes.append(route)
        return route

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Return the first route serving *method* whose pattern matches *path*.

        Patterns are searched, not anchored: ``^`` and ``$`` are up to the
        pattern author. Returns ``None`` when nothing matches.
        """
        for route in self._routes:
            if not route.accepts(method):
                continue
            found = route.regex.search(path)
            if found is None:
                continue
            return RouteMatch(route=route, args=found.groups(default=""))
        return None
