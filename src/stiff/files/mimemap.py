"""Extension to content-type lookup.

Seeded with types that must carry an explicit charset for text assets;
anything else falls back to the stdlib ``mimetypes`` registry.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Mapping
from types import MappingProxyType

from stiff.errors import InvalidMimeType

FALLBACK_TYPE = "application/octet-stream"

DEFAULT_MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        ".css": "text/css; charset=utf-8",
        ".htm": "text/html; charset=utf-8",
        ".html": "text/html; charset=utf-8",
        ".js": "text/javascript; charset=utf-8",
        ".mjs": "text/javascript; charset=utf-8",
        ".txt": "text/plain; charset=utf-8",
        ".gif": "image/gif",
        ".jpeg": "image/jpeg",
        ".jpg": "image/jpeg",
        ".png": "image/png",
        ".svg": "image/svg+xml",
        ".webp": "image/webp",
        ".woff": "font/woff",
        ".woff2": "font/woff2",
        ".json": "application/json",
        ".pdf": "application/pdf",
        ".xml": "application/xml",
        ".zip": "application/zip",
    }
)


class MimeMap:
    """Immutable extension -> content-type table.

    Usage::

        mime_map = MimeMap().with_overrides({".wasm": "application/wasm"})
        mime_map.find_type(".css")  # "text/css; charset=utf-8"
    """

    __slots__ = ("_types",)

    def __init__(self, types: Mapping[str, str] = DEFAULT_MIME_TYPES) -> None:
        self._types: Mapping[str, str] = MappingProxyType(dict(types))

    def with_overrides(self, overrides: Mapping[str, str]) -> MimeMap:
        """Return a new map with *overrides* applied on top of this one.

        Raises:
            InvalidMimeType: If an extension does not start with ``.``.
        """
        for ext in overrides:
            if not ext.startswith("."):
                raise InvalidMimeType(ext)
        return MimeMap({**self._types, **overrides})

    def find_type(self, ext: str) -> str:
        """Content type for *ext* (including the dot, e.g. ``".css"``)."""
        content_type = self._types.get(ext)
        if content_type is not None:
            return content_type
        guessed, _ = mimetypes.guess_type("file" + ext, strict=False)
        return guessed or FALLBACK_TYPE

    def __contains__(self, ext: object) -> bool:
        return ext in self._types

    def __len__(self) -> int:
        return len(self._types)
