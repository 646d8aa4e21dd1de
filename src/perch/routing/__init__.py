"""Routing — ordered table of regular-expression routes.

Routes are registered during setup and frozen when the app starts
serving. Lookup scans in registration order; the first match wins.
"""

from perch.routing.route import METHODS, Route, RouteMatch
from perch.routing.router import Router

__all__ = ["METHODS", "Route", "RouteMatch", "Router"]
