"""Resolved per-route configuration.

A RouteConfig is what a request actually sees: the server defaults with
the route's overrides layered on top. Resolution happens once, at build
time; the result is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from stiff._internal.paths import clean_path
from stiff.config import RouteOverrides, ServerConfig


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """Final settings for one route rule.

    ``headers`` is sorted by name so emission order is deterministic.
    ``serve`` is an absolute, cleaned path or empty for "serve the URL itself".
    """

    headers: tuple[tuple[str, str], ...] = ()
    etag: bool = True
    lastmod: bool = False
    serve: str = ""

    def header(self, name: str) -> str | None:
        """Return the value configured for *name*, if any."""
        for key, value in self.headers:
            if key == name:
                return value
        return None


DEFAULT_ROUTE_CONFIG = RouteConfig()


def resolve_route_config(
    server_config: ServerConfig | None,
    overrides: RouteOverrides | None = None,
    *,
    default: RouteConfig = DEFAULT_ROUTE_CONFIG,
) -> RouteConfig:
    """Merge *server_config* and then *overrides* on top of *default*.

    Server-level headers with an empty value are skipped. Route-level
    headers with an empty value delete whatever the server set::

        server:  {"Cache-Control": "max-age=60", "X-A": "1"}
        route:   {"Cache-Control": "", "X-B": "2"}
        result:  {"X-A": "1", "X-B": "2"}
    """
    if server_config is None:
        return default

    headers = dict(default.headers)
    headers.update((name, value) for name, value in server_config.headers.items() if value)

    config = default
    if server_config.etag is not None:
        config = replace(config, etag=server_config.etag)
    if server_config.lastmod is not None:
        config = replace(config, lastmod=server_config.lastmod)

    if overrides is not None:
        for name, value in overrides.headers.items():
            if value:
                headers[name] = value
            else:
                headers.pop(name, None)

        if overrides.etag is not None:
            config = replace(config, etag=overrides.etag)
        if overrides.lastmod is not None:
            config = replace(config, lastmod=overrides.lastmod)
        if overrides.serve:
            config = replace(config, serve=clean_path(overrides.serve))

    return replace(config, headers=tuple(sorted(headers.items())))
