"""Routing — per-URL configuration resolved from ``stiff.json``.

Route rules are resolved once when the server is built and matched
with a linear, longest-pattern-first scan.
"""

from stiff.routing.route_config import DEFAULT_ROUTE_CONFIG, RouteConfig, resolve_route_config
from stiff.routing.route_map import RouteMap, RouteRule

__all__ = [
    "DEFAULT_ROUTE_CONFIG",
    "RouteConfig",
    "RouteMap",
    "RouteRule",
    "resolve_route_config",
]
