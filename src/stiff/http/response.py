"""HTTP responses with a chainable .with_*() transformation API.

Each transformation returns a new response. Immutable by convention,
built incrementally by design: the handler layers route headers,
variant headers and file metadata on top of each other, and the error
path strips the caching headers it must not inherit.
"""

from __future__ import annotations

import html
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Self, TypeAlias

from anyio import AsyncFile

HeaderPairs: TypeAlias = tuple[tuple[str, str], ...]


def _pairs(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> HeaderPairs:
    if isinstance(headers, Mapping):
        return tuple(headers.items())
    return tuple(headers)


class _HeaderMethods:
    """Header transformations shared by both response types.

    Header names compare case-insensitively; stored names keep the
    casing they were set with.
    """

    __slots__ = ()

    headers: HeaderPairs

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first value for *name*, or *default* if missing."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return default

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    def with_status(self, status: int) -> Self:
        """Return a copy with a different status code."""
        return replace(self, status=status)  # type: ignore[type-var]

    def with_header(self, name: str, value: str) -> Self:
        """Return a copy with *name* set to *value*, replacing earlier values."""
        wanted = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != wanted)
        return replace(self, headers=(*kept, (name, value)))  # type: ignore[type-var]

    def with_headers(self, headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> Self:
        """Return a copy with every header in *headers* set."""
        response = self
        for name, value in _pairs(headers):
            response = response.with_header(name, value)
        return response

    def with_added_header(self, name: str, value: str) -> Self:
        """Return a copy with an additional value for *name* (e.g. ``Vary``)."""
        return replace(self, headers=(*self.headers, (name, value)))  # type: ignore[type-var]

    def without_headers(self, *names: str) -> Self:
        """Return a copy with every value of *names* removed."""
        dropped = {name.lower() for name in names}
        kept = tuple((k, v) for k, v in self.headers if k.lower() not in dropped)
        return replace(self, headers=kept)  # type: ignore[type-var]

    @property
    def content_type(self) -> str | None:
        return self.header("Content-Type")


@dataclass(frozen=True, slots=True)
class Response(_HeaderMethods):
    """An in-memory HTTP response: redirects, inline errors, test results."""

    body: str | bytes = ""
    status: int = 200
    headers: HeaderPairs = ()

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class FileResponse(_HeaderMethods):
    """A response whose body is an already-open file.

    The response owns ``file``: whoever sends it must close it, on every
    exit path. ``size`` is the on-disk size of the selected representation.
    ``last_modified`` is ``None`` when the route disables Last-Modified,
    which also disables If-Modified-Since handling.
    """

    file: AsyncFile[bytes]
    size: int
    status: int = 200
    headers: HeaderPairs = ()
    last_modified: datetime | None = None
    conditional: bool = True

    async def aclose(self) -> None:
        await self.file.aclose()


def redirect(url: str, status: int = 301, headers: Iterable[tuple[str, str]] = ()) -> Response:
    """A redirect with a small HTML body pointing at *url*."""
    body = f'<a href="{html.escape(url, quote=True)}">Moved Permanently</a>.\n'
    return Response(body=body, status=status, headers=tuple(headers)).with_headers(
        {"Location": url, "Content-Type": "text/html; charset=utf-8"}
    )


def text_response(body: str, status: int) -> Response:
    """A plain-text response, used when no error page is available."""
    return Response(body=body + "\n", status=status).with_headers(
        {
            "Content-Type": "text/plain; charset=utf-8",
            "X-Content-Type-Options": "nosniff",
        }
    )
