"""Route and RouteMatch frozen dataclasses."""

import re
from dataclasses import dataclass

from perch._internal.types import Handler

METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})
"""Methods a route can be registered for. HEAD is served by GET routes."""


@dataclass(frozen=True, slots=True)
class Route:
    """A compiled route definition.

    Created by ``Router.add()``. The pattern is compiled once, at
    registration, and never again.
    """

    pattern: str
    regex: re.Pattern[str]
    method: str
    handler: Handler

    def accepts(self, method: str) -> bool:
        """Whether this route serves *method* (GET routes also serve HEAD)."""
        return method == self.method or (method == "HEAD" and self.method == "GET")


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``args`` holds the capture groups in order, whole match excluded.
    Groups that did not take part in the match are ``""``.
    """

    route: Route
    args: tuple[str, ...]
