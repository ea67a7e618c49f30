"""File body serving with HTTP conditional and byte-range semantics.

Given a :class:`FileResponse` whose headers are already decided (content
type, ETag, encoding), this module answers the request's preconditions
and sends either the whole file, a single byte range, or no body at all:

    If-Match / If-Unmodified-Since  -> 412 when they fail
    If-None-Match / If-Modified-Since -> 304 for GET and HEAD
    Range (+ If-Range)               -> 206, or 416 when unsatisfiable

Only a single range is honored; a multi-range request gets the full body,
which RFC 9110 permits.
"""

from __future__ import annotations

import email.utils
from dataclasses import dataclass
from datetime import UTC, datetime

from stiff._internal.asgi import Send
from stiff.errors import StiffError
from stiff.http.request import Request
from stiff.http.response import FileResponse, Response, text_response
from stiff.server.errors import STRIPPED_HEADERS
from stiff.server.sender import body_allowed, send_response, send_start

CHUNK_SIZE = 64 * 1024

# Headers that describe a body a 304 does not have.
_NOT_MODIFIED_DROP = ("Content-Type", "Content-Length", "Content-Encoding")


@dataclass(frozen=True, slots=True)
class ByteRange:
    """An inclusive byte range within a representation of ``size`` bytes."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


class RangeNotSatisfiable(StiffError):  # noqa: N818 — mirrors the 416 status name
    """The Range header is well-formed but selects no bytes of the file."""


def parse_range(header_value: str | None, size: int) -> ByteRange | None:
    """Parse a single-range ``Range`` header against a file of *size* bytes.

    Returns ``None`` when the header is absent, malformed, not in bytes, or
    asks for several ranges — all cases where the full body is served.

    Raises:
        RangeNotSatisfiable: If the one requested range lies outside the file.
    """
    if not header_value:
        return None
    unit, _, spec = header_value.partition("=")
    if unit.strip().lower() != "bytes" or "," in spec:
        return None

    first, dash, last = spec.strip().partition("-")
    if not dash:
        return None
    first, last = first.strip(), last.strip()

    try:
        if not first:
            # Suffix form: "bytes=-500" is the last 500 bytes.
            suffix = int(last)
            if suffix <= 0 or size == 0:
                raise RangeNotSatisfiable(header_value)
            return ByteRange(max(0, size - suffix), size - 1)

        start = int(first)
        end = int(last) if last else size - 1
    except ValueError:
        return None

    if start < 0 or (last and end < start):
        return None
    if start >= size:
        raise RangeNotSatisfiable(header_value)
    return ByteRange(start, min(end, size - 1))


def _etag_list(header_value: str) -> list[str]:
    return [tag.strip() for tag in header_value.split(",") if tag.strip()]


def _opaque(tag: str) -> str:
    return tag.removeprefix("W/")


def etag_matches_weak(header_value: str, etag: str | None) -> bool:
    """Weak comparison, as used by If-None-Match."""
    tags = _etag_list(header_value)
    if "*" in tags:
        return True
    return bool(etag) and any(_opaque(tag) == _opaque(etag) for tag in tags)


def etag_matches_strong(header_value: str, etag: str | None) -> bool:
    """Strong comparison, as used by If-Match and If-Range: weak tags never match."""
    tags = _etag_list(header_value)
    if "*" in tags:
        return bool(etag)
    if not etag or etag.startswith("W/"):
        return False
    return etag in tags


def _parse_http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = email.utils.parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    # "-0000" parses as naive; HTTP dates are always UTC.
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)


def _whole_seconds(moment: datetime) -> datetime:
    return moment.replace(microsecond=0)


def _precondition_failed(request: Request, response: FileResponse) -> bool:
    """Evaluate If-Match, then If-Unmodified-Since when If-Match is absent."""
    etag = response.header("ETag")
    if_match = request.header("if-match")
    if if_match is not None:
        return not etag_matches_strong(if_match, etag)

    since = _parse_http_date(request.header("if-unmodified-since"))
    if since is None or response.last_modified is None:
        return False
    return _whole_seconds(response.last_modified) > since


def _not_modified(request: Request, response: FileResponse) -> bool:
    """Evaluate If-None-Match, then If-Modified-Since when If-None-Match is absent."""
    if request.method not in ("GET", "HEAD"):
        return False

    if_none_match = request.header("if-none-match")
    if if_none_match is not None:
        return etag_matches_weak(if_none_match, response.header("ETag"))

    since = _parse_http_date(request.header("if-modified-since"))
    if since is None or response.last_modified is None:
        return False
    return _whole_seconds(response.last_modified) <= since


def _range_allowed(request: Request, response: FileResponse) -> bool:
    """If-Range: a stale validator downgrades a range request to the full body."""
    if_range = request.header("if-range")
    if if_range is None:
        return True
    if if_range.startswith(('"', "W/")):
        return etag_matches_strong(if_range, response.header("ETag"))
    since = _parse_http_date(if_range)
    if since is None or response.last_modified is None:
        return False
    return _whole_seconds(response.last_modified) == since


def _plain_error(response: FileResponse, text: str, status: int) -> Response:
    """A plain-text error that keeps the headers already decided for the file."""
    plain = text_response(text, status)
    kept = response.without_headers(*STRIPPED_HEADERS).headers
    return Response(body=plain.body, status=status, headers=kept).with_headers(plain.headers)


async def send_file_response(response: FileResponse, request: Request, send: Send) -> None:
    """Send *response* as the answer to *request*, closing its file afterwards."""
    try:
        await _send_file(response, request, send)
    finally:
        await response.aclose()


async def _send_file(response: FileResponse, request: Request, send: Send) -> None:
    if response.last_modified is not None:
        response = response.with_header(
            "Last-Modified", email.utils.format_datetime(response.last_modified, usegmt=True)
        )

    if not response.conditional:
        await _stream(response, request, send, ByteRange(0, response.size - 1))
        return

    response = response.with_header("Accept-Ranges", "bytes")

    if _precondition_failed(request, response):
        failed = _plain_error(response, "412 Precondition Failed", 412)
        await send_response(failed, send, method=request.method)
        return

    if _not_modified(request, response):
        not_modified = response.without_headers(*_NOT_MODIFIED_DROP)
        if not_modified.has_header("ETag"):
            not_modified = not_modified.without_headers("Last-Modified")
        await send_start(304, not_modified.headers, send)
        await send({"type": "http.response.body", "body": b""})
        return

    byte_range: ByteRange | None = None
    if request.range is not None and _range_allowed(request, response):
        try:
            byte_range = parse_range(request.range, response.size)
        except RangeNotSatisfiable:
            unsatisfiable = _plain_error(
                response, "416 Requested Range Not Satisfiable", 416
            ).with_header("Content-Range", f"bytes */{response.size}")
            await send_response(unsatisfiable, send, method=request.method)
            return

    if byte_range is not None and byte_range.length < response.size:
        partial = response.with_status(206).with_headers(
            {
                "Content-Range": byte_range.content_range(response.size),
                "Content-Length": str(byte_range.length),
            }
        )
        await _stream(partial, request, send, byte_range)
        return

    await _stream(response, request, send, ByteRange(0, response.size - 1))


async def _stream(response: FileResponse, request: Request, send: Send, byte_range: ByteRange) -> None:
    """Send headers, then the bytes of *byte_range* in CHUNK_SIZE pieces."""
    await send_start(response.status, response.headers, send)

    if not body_allowed(response.status, request.method) or byte_range.length <= 0:
        await send({"type": "http.response.body", "body": b""})
        return

    await response.file.seek(byte_range.start)
    remaining = byte_range.length
    while remaining > 0:
        chunk = await response.file.read(min(CHUNK_SIZE, remaining))
        if not chunk:
            break
        remaining -= len(chunk)
        await send({"type": "http.response.body", "body": chunk, "more_body": remaining > 0})

    if remaining > 0:
        # File shrank underneath us; close the body instead of hanging.
        await send({"type": "http.response.body", "body": b""})
