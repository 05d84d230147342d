"""Routing — route table, path patterns, and dispatch.

Routes are registered during setup and snapshotted into an immutable
tuple when the router freezes. Matching is first-registered-wins.
"""

from switchyard.routing.pattern import PathSegment, RoutePattern, match
from switchyard.routing.route import Route
from switchyard.routing.router import Router

__all__ = [
    "PathSegment",
    "Route",
    "RoutePattern",
    "Router",
    "match",
]
