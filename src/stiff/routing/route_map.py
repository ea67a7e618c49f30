"""Ordered route table.

Patterns are kept in descending lexicographic order so a linear scan
meets longer, more specific patterns first::

    /blog/2024/     (directory rule)
    /blog/          (directory rule)
    /about          (exact rule)
    /               (directory rule, implicit fallback)
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from stiff.config import ServerConfig
from stiff.errors import InvalidRoute
from stiff.routing.route_config import DEFAULT_ROUTE_CONFIG, RouteConfig, resolve_route_config


@dataclass(frozen=True, slots=True)
class RouteRule:
    """A URL pattern and the config it resolves to.

    Patterns ending in ``/`` match every URL with that prefix; all other
    patterns match only themselves.
    """

    pattern: str
    match_dir: bool
    config: RouteConfig

    def matches(self, url: str) -> bool:
        if self.match_dir:
            return url.startswith(self.pattern)
        return url == self.pattern


class RouteMap:
    """Immutable, ordered list of route rules.

    Usage::

        route_map = RouteMap.build(config)
        route_map.match("/blog/2024/hello").headers
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: tuple[RouteRule, ...] = ()) -> None:
        self._rules = rules

    @classmethod
    def build(cls, server_config: ServerConfig | None) -> RouteMap:
        """Resolve every configured route against *server_config*.

        Raises:
            InvalidRoute: If a pattern does not start with ``/``.
        """
        routes = server_config.routes if server_config is not None else {}

        for pattern in routes:
            if not pattern.startswith("/"):
                raise InvalidRoute(pattern)

        rules = [
            RouteRule(
                pattern=pattern,
                match_dir=pattern.endswith("/"),
                config=resolve_route_config(server_config, routes[pattern]),
            )
            for pattern in sorted(routes, reverse=True)
        ]

        if "/" not in routes:
            rules.append(
                RouteRule(
                    pattern="/",
                    match_dir=True,
                    config=resolve_route_config(server_config),
                )
            )

        return cls(tuple(rules))

    def match(self, url: str) -> RouteConfig:
        """Return the config of the first rule matching *url*."""
        for rule in self._rules:
            if rule.matches(url):
                return rule.config
        return DEFAULT_ROUTE_CONFIG

    def __iter__(self) -> Iterator[RouteRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        patterns = ", ".join(rule.pattern for rule in self._rules)
        return f"RouteMap([{patterns}])"
