"""File map — the index of everything the server can answer with.

Built once at startup by walking the public directory. Every regular file
becomes an entry keyed by its *logical path* (``/css/site.css``). Files
ending in ``.br`` / ``.gz`` are never entries of their own: they set the
matching variant flag on their base file instead.

The two error pages are split into their own table so normal routing
can never reach them.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType

from stiff.errors import BuildError
from stiff.files.mimemap import MimeMap
from stiff.routing.route_map import RouteMap

logger = logging.getLogger("stiff.files")

HASH_LENGTH = 16
NOT_FOUND_PAGE = "/404.html"
SERVER_ERROR_PAGE = "/500.html"
ERROR_PAGES = frozenset({NOT_FOUND_PAGE, SERVER_ERROR_PAGE})

_VARIANT_FLAGS = {".br": "has_brotli", ".gz": "has_gzip"}
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class FileDetails:
    """Metadata for one logical path.

    ``etag`` is empty when the route disables ETags.
    """

    content_type: str
    etag: str = ""
    has_brotli: bool = False
    has_gzip: bool = False

    @property
    def has_variants(self) -> bool:
        return self.has_brotli or self.has_gzip


@dataclass(frozen=True, slots=True)
class FileMap:
    """Read-only lookup tables produced by :func:`build_file_map`."""

    root: Path
    files: Mapping[str, FileDetails] = field(default_factory=dict)
    error_pages: Mapping[str, FileDetails] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))
        object.__setattr__(self, "error_pages", MappingProxyType(dict(self.error_pages)))

    def get(self, logical_path: str) -> FileDetails | None:
        return self.files.get(logical_path)

    def error_page(self, logical_path: str) -> FileDetails | None:
        return self.error_pages.get(logical_path)

    def filesystem_path(self, logical_path: str) -> Path:
        """Where *logical_path* lives on disk."""
        return self.root.joinpath(*logical_path.lstrip("/").split("/"))

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, logical_path: object) -> bool:
        return logical_path in self.files


def compute_etag(path: str | Path, content_type: str) -> str:
    """Weak entity tag over *content_type* followed by the file's bytes.

    Weak so that a file and its ``.br`` / ``.gz`` siblings, which carry the
    same representation, share one tag.

    Raises:
        OSError: If the file cannot be read.
    """
    digest = hashlib.new("sha512_256")
    digest.update(content_type.encode("utf-8"))
    with open(path, "rb") as fh:
        while chunk := fh.read(_CHUNK_SIZE):
            digest.update(chunk)

    checksum = base64.urlsafe_b64encode(digest.digest()).decode("ascii")
    return f'W/"{checksum[:HASH_LENGTH]}"'


def build_file_map(root: str | Path, route_map: RouteMap, mime_map: MimeMap) -> FileMap:
    """Scan *root* and index every servable file.

    Two passes so the result does not depend on directory walk order:
    base files first, then ``.br`` / ``.gz`` variants are folded into them.

    Raises:
        BuildError: If the directory, or any file in it, cannot be read.
    """
    root_path = Path(root)
    started = time.perf_counter()

    if not root_path.is_dir():
        raise BuildError(root_path, "public directory not found")

    bases: list[tuple[str, Path]] = []
    variants: list[tuple[str, str]] = []
    for logical_path, disk_path in _walk(root_path):
        suffix = os.path.splitext(logical_path)[1]
        if suffix in _VARIANT_FLAGS:
            variants.append((logical_path.removesuffix(suffix), _VARIANT_FLAGS[suffix]))
        else:
            bases.append((logical_path, disk_path))

    entries: dict[str, FileDetails] = {}
    for logical_path, disk_path in bases:
        content_type = mime_map.find_type(os.path.splitext(logical_path)[1])
        etag = ""
        if route_map.match(logical_path.removesuffix(".html")).etag:
            try:
                etag = compute_etag(disk_path, content_type)
            except OSError as exc:
                raise BuildError(disk_path, exc.strerror or str(exc)) from exc
        entries[logical_path] = FileDetails(content_type=content_type, etag=etag)

    for base_path, flag in variants:
        details = entries.get(base_path)
        if details is None:
            logger.debug("Ignoring compressed variant without a base file: %s", base_path)
            continue
        entries[base_path] = replace(details, **{flag: True})

    files = {path: details for path, details in entries.items() if path not in ERROR_PAGES}
    error_pages = {path: details for path, details in entries.items() if path in ERROR_PAGES}

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("File map built: %d files from %s in %.0f ms", len(files), root_path, elapsed_ms)

    return FileMap(root=root_path, files=files, error_pages=error_pages)


def _walk(root: Path) -> list[tuple[str, Path]]:
    """Every regular file under *root* as ``(logical_path, disk_path)``, sorted."""

    def on_error(exc: OSError) -> None:
        raise BuildError(exc.filename or root, exc.strerror or str(exc)) from exc

    found: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error, followlinks=True):
        dirnames.sort()
        for name in sorted(filenames):
            disk_path = Path(dirpath, name)
            if not disk_path.is_file():
                continue
            logical_path = "/" + disk_path.relative_to(root).as_posix()
            found.append((logical_path, disk_path))
    return found
