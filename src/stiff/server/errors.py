"""Error pages for 404 and 500 responses.

Maps a failed request to the deployment's own ``404.html`` / ``500.html``,
or to a minimal plain-text body when the page is missing or unreadable.
"""

import logging
import os

import anyio

from stiff.files.filemap import NOT_FOUND_PAGE, SERVER_ERROR_PAGE, FileMap
from stiff.http.response import FileResponse, HeaderPairs, Response, text_response

logger = logging.getLogger("stiff.server")

# Caching semantics of the requested resource must not leak onto an error page.
STRIPPED_HEADERS = (
    "Content-Encoding",
    "Cache-Control",
    "ETag",
    "Last-Modified",
    "Content-Length",
    "Content-Type",
)

_PAGES = {
    404: (NOT_FOUND_PAGE, "404 page not found"),
    500: (SERVER_ERROR_PAGE, "500 Internal Server Error"),
}


async def error_page(
    status: int,
    file_map: FileMap,
    headers: HeaderPairs = (),
) -> Response | FileResponse:
    """Build the error response for *status* (404 or 500).

    *headers* are the headers already decided for the request (route
    headers, ``Vary``); the caching ones are dropped before the page is used.
    """
    page_path, fallback_text = _PAGES[status]
    kept = Response(headers=headers).without_headers(*STRIPPED_HEADERS).headers

    details = file_map.error_page(page_path)
    if details is None:
        return text_response(fallback_text, status).with_headers(kept)

    disk_path = file_map.filesystem_path(page_path)
    try:
        file = await anyio.open_file(disk_path, "rb")
    except OSError as exc:
        logger.warning("Error page %s unavailable (%s); using plain text", disk_path, exc)
        return text_response(fallback_text, status).with_headers(kept)

    try:
        stat = await anyio.to_thread.run_sync(os.fstat, file.wrapped.fileno())
    except OSError as exc:
        await file.aclose()
        logger.warning("Error page %s unavailable (%s); using plain text", disk_path, exc)
        return text_response(fallback_text, status).with_headers(kept)

    return FileResponse(
        file=file,
        size=stat.st_size,
        status=status,
        headers=kept,
        conditional=False,
    ).with_headers(
        {
            "Content-Type": details.content_type,
            "Content-Length": str(stat.st_size),
        }
    )
