"""Immutable HTTP request.

Only what the file server needs: method, path, query string and
headers. Static files have no request body, so ``receive`` is never read.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _header_map(raw: Any) -> Mapping[str, str]:
    """Lower-cased header names; repeated headers are joined with ``", "``."""
    merged: dict[str, str] = {}
    for name, value in raw:
        key = name.decode("latin-1").lower()
        text = value.decode("latin-1")
        merged[key] = f"{merged[key]}, {text}" if key in merged else text
    return MappingProxyType(merged)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is the percent-decoded path from the ASGI scope, exactly as
    the client sent it — canonicalization is the handler's job.
    """

    method: str
    path: str
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @property
    def range(self) -> str | None:
        """The ``Range`` header, or ``None`` if the client asked for the whole body."""
        return self.header("range") or None

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        return cls(
            method=scope["method"],
            path=scope["path"],
            query_string=scope.get("query_string", b"").decode("latin-1"),
            headers=_header_map(scope.get("headers", ())),
        )
