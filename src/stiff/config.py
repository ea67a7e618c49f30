"""Server configuration.

ServerConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. It mirrors the shape of ``stiff.json``::

    {
        "headers": {"Cache-Control": "public, max-age=600"},
        "etag": true,
        "lastmod": false,
        "routes": {
            "/assets/": {"headers": {"Cache-Control": "public, max-age=31536000, immutable"}},
            "/app/": {"serve": "/app.html"},
            "/drafts/": {"headers": {"Cache-Control": ""}, "etag": false}
        },
        "mimetypes": {".wasm": "application/wasm"}
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from stiff.errors import ConfigurationError

CONFIG_FILENAME = "stiff.json"


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class RouteOverrides:
    """Per-route overrides as written in the ``routes`` table.

    ``None`` flags and an empty ``serve`` mean "inherit".
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    etag: bool | None = None
    lastmod: bool | None = None
    serve: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _frozen(self.headers))


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Top-level server configuration. Immutable after creation.

    All fields are optional. Override what you need::

        config = ServerConfig(headers={"X-Frame-Options": "DENY"}, lastmod=True)
    """

    headers: Mapping[str, str] = field(default_factory=dict)
    etag: bool | None = None
    lastmod: bool | None = None
    routes: Mapping[str, RouteOverrides] = field(default_factory=dict)
    mimetypes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _frozen(self.headers))
        object.__setattr__(self, "routes", _frozen(self.routes))
        object.__setattr__(self, "mimetypes", _frozen(self.mimetypes))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServerConfig:
        """Build a config from parsed JSON.

        Raises:
            ConfigurationError: If a key holds a value of the wrong shape.
        """
        if not isinstance(data, Mapping):
            msg = f"{CONFIG_FILENAME}: expected an object at the top level"
            raise ConfigurationError(msg)

        routes: dict[str, RouteOverrides] = {}
        for pattern, raw in _mapping(data, "routes").items():
            where = f"routes[{pattern!r}]"
            if not isinstance(raw, Mapping):
                msg = f"{CONFIG_FILENAME}: {where} must be an object"
                raise ConfigurationError(msg)
            serve = raw.get("serve", "")
            if not isinstance(serve, str):
                msg = f"{CONFIG_FILENAME}: {where}.serve must be a string"
                raise ConfigurationError(msg)
            routes[pattern] = RouteOverrides(
                headers=_string_map(raw, "headers", where),
                etag=_flag(raw, "etag", where),
                lastmod=_flag(raw, "lastmod", where),
                serve=serve,
            )

        return cls(
            headers=_string_map(data, "headers"),
            etag=_flag(data, "etag"),
            lastmod=_flag(data, "lastmod"),
            routes=routes,
            mimetypes=_string_map(data, "mimetypes"),
        )


def load_config(path: str | Path = CONFIG_FILENAME) -> ServerConfig | None:
    """Read and parse a ``stiff.json`` file.

    Returns ``None`` when the file does not exist — every setting then
    falls back to its default.

    Raises:
        ConfigurationError: If the file is not valid JSON or has the wrong shape.
    """
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        msg = f"{CONFIG_FILENAME}: {exc}"
        raise ConfigurationError(msg) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"{CONFIG_FILENAME}: {exc}"
        raise ConfigurationError(msg) from exc

    return ServerConfig.from_mapping(data)


# -- Shape helpers --


def _mapping(data: Mapping[str, Any], key: str, where: str = "") -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        msg = f"{CONFIG_FILENAME}: {where + '.' if where else ''}{key} must be an object"
        raise ConfigurationError(msg)
    return value


def _string_map(data: Mapping[str, Any], key: str, where: str = "") -> dict[str, str]:
    result: dict[str, str] = {}
    for name, value in _mapping(data, key, where).items():
        if not isinstance(value, str):
            msg = f"{CONFIG_FILENAME}: {where + '.' if where else ''}{key}[{name!r}] must be a string"
            raise ConfigurationError(msg)
        result[name] = value
    return result


def _flag(data: Mapping[str, Any], key: str, where: str = "") -> bool | None:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return value
    msg = f"{CONFIG_FILENAME}: {where + '.' if where else ''}{key} must be true or false"
    raise ConfigurationError(msg)
