"""Request handler — resolves a request to the response that answers it.

The pipeline, in order:

1. canonicalize the path, redirecting non-canonical URLs
2. apply the route's configured headers
3. pick the target file (``serve`` override, index, or the URL itself)
4. look it up in the file map, trying ``<path>.html`` for clean URLs
5. redirect direct hits on the index file to ``/``
6. pick a precompressed variant from ``Accept-Encoding``
7. open and stat the selected file
8. attach content type, length, ETag and Last-Modified

``handle_request`` wraps the whole pipeline, and the send, in one fault
boundary: anything that escapes becomes a 500 for this request only.
"""

import logging
import os
import stat as stat_module
from collections.abc import MutableMapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import quote

import anyio
from anyio import AsyncFile

from stiff._internal.asgi import Send
from stiff._internal.paths import clean_path
from stiff.errors import HTTPError, MethodNotAllowed, NotFound, ServerFault
from stiff.files.filemap import FileMap
from stiff.http.encoding import parse_accept_encoding
from stiff.http.request import Request
from stiff.http.response import FileResponse, HeaderPairs, Response, redirect, text_response
from stiff.routing.route_map import RouteMap
from stiff.server.content import send_file_response
from stiff.server.errors import error_page
from stiff.server.sender import send_response

logger = logging.getLogger("stiff.server")

INDEX_PATH = "/index.html"
ALLOWED_METHODS = frozenset({"GET", "HEAD"})

# (Content-Encoding value, file suffix), in preference order.
_BROTLI = ("br", ".br")
_GZIP = ("gzip", ".gz")


def _with_query(url: str, query_string: str) -> str:
    return f"{url}?{query_string}" if query_string else url


class FileHandler:
    """Resolves requests against a route map and a file map.

    Holds only read-only state, so one instance serves every concurrent
    request without locking.
    """

    __slots__ = ("file_map", "route_map")

    def __init__(self, route_map: RouteMap, file_map: FileMap) -> None:
        self.route_map = route_map
        self.file_map = file_map

    async def resolve(self, request: Request) -> Response | FileResponse:
        """Answer *request*, turning expected HTTP errors into error pages."""
        try:
            return await self._resolve(request)
        except HTTPError as exc:
            if exc.status in (404, 500):
                return await error_page(exc.status, self.file_map, exc.headers)
            return text_response(exc.detail or str(exc.status), exc.status).with_headers(exc.headers)

    def route_headers(self, path: str) -> HeaderPairs:
        """Configured headers for *path*, used when the pipeline itself failed."""
        return self.route_map.match(clean_path(path)).headers

    async def _resolve(self, request: Request) -> Response | FileResponse:
        if request.method not in ALLOWED_METHODS:
            raise MethodNotAllowed(ALLOWED_METHODS)

        # 1. Canonical URLs never expose ".html" and never end in "/".
        url = clean_path(request.path)
        if url != request.path or url.endswith(".html"):
            location = quote(url.removesuffix(".html") or "/", safe="/%")
            return redirect(_with_query(location, request.query_string))

        # 2. Route headers apply to everything below, including redirects.
        route = self.route_map.match(url)
        response = Response(headers=route.headers)

        # 3-4. Target file.
        if route.serve:
            target = route.serve
        elif url == "/":
            target = INDEX_PATH
        else:
            target = url

        details = self.file_map.get(target)
        if details is None:
            target += ".html"
            details = self.file_map.get(target)
        if details is None:
            raise NotFound(f"No file for {url}", headers=response.headers)

        # 5. The index is only ever served as "/".
        if target == INDEX_PATH and url != "/":
            return redirect(_with_query("/", request.query_string), headers=response.headers)

        # 6. Variant selection; ranges are only served from the original.
        disk_path = self.file_map.filesystem_path(target)
        if details.has_variants:
            response = response.with_added_header("Vary", "Accept-Encoding")
            if request.range is None:
                accept = parse_accept_encoding(request.header("accept-encoding"))
                variant = None
                if accept.brotli and details.has_brotli:
                    variant = _BROTLI
                elif accept.gzip and details.has_gzip:
                    variant = _GZIP
                if variant is not None:
                    encoding, suffix = variant
                    response = response.with_header("Content-Encoding", encoding)
                    disk_path = disk_path.with_name(disk_path.name + suffix)

        # 7. Open and stat.
        file, stat = await self._open(disk_path, response.headers)

        # 8. Headers from metadata and stat.
        try:
            headers = response.with_header("Content-Type", details.content_type)
            if not headers.has_header("Content-Encoding"):
                headers = headers.with_header("Content-Length", str(stat.st_size))
            if details.etag:
                headers = headers.with_header("ETag", details.etag)

            last_modified = None
            if route.lastmod:
                last_modified = datetime.fromtimestamp(stat.st_mtime, UTC).replace(microsecond=0)

            return FileResponse(
                file=file,
                size=stat.st_size,
                headers=headers.headers,
                last_modified=last_modified,
            )
        except BaseException:
            await file.aclose()
            raise

    async def _open(
        self, disk_path: Path, headers: HeaderPairs
    ) -> tuple[AsyncFile[bytes], os.stat_result]:
        try:
            file = await anyio.open_file(disk_path, "rb")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFound(f"{disk_path} is gone", headers=headers) from exc
        except OSError as exc:
            logger.error("Cannot open %s: %s", disk_path, exc)
            raise ServerFault(str(exc), headers=headers) from exc

        try:
            stat = await anyio.to_thread.run_sync(os.fstat, file.wrapped.fileno())
        except OSError as exc:
            await file.aclose()
            logger.error("Cannot stat %s: %s", disk_path, exc)
            raise ServerFault(str(exc), headers=headers) from exc

        if stat_module.S_ISDIR(stat.st_mode):
            await file.aclose()
            raise NotFound(f"{disk_path} is a directory", headers=headers)

        return file, stat


async def handle_request(
    scope: MutableMapping[str, Any],
    send: Send,
    *,
    handler: FileHandler,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    request = Request.from_asgi(scope)
    started = False

    async def tracked_send(message: MutableMapping[str, Any]) -> None:
        nonlocal started
        if message["type"] == "http.response.start":
            started = True
        await send(message)

    try:
        response = await handler.resolve(request)
        await _dispatch(response, request, tracked_send)
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        if started:
            # Status line is already on the wire; nothing left to correct.
            return
        fallback = await error_page(500, handler.file_map, handler.route_headers(request.path))
        await _dispatch(fallback, request, send)


async def _dispatch(response: Response | FileResponse, request: Request, send: Send) -> None:
    if isinstance(response, FileResponse):
        await send_file_response(response, request, send)
    else:
        await send_response(response, send, method=request.method)
