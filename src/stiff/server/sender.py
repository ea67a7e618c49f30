"""ASGI response sending — translates in-memory Responses to ASGI messages.

File bodies go through :mod:`stiff.server.content` instead, which adds
conditional-request and byte-range handling on top of the same helpers.
"""

from stiff._internal.asgi import Send
from stiff.http.response import HeaderPairs, Response


def body_allowed(status: int, method: str = "GET") -> bool:
    """Whether a response may carry a message body."""
    # RFC: 1xx, 204 and 304 responses never include a body; HEAD never does.
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


def raw_headers(headers: HeaderPairs) -> list[tuple[bytes, bytes]]:
    """Encode header pairs for ``http.response.start``."""
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers]


async def send_start(status: int, headers: HeaderPairs, send: Send) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": raw_headers(headers),
        }
    )


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Translate a stiff Response into ASGI send() calls.

    ``Content-Length`` always reflects the full body, even for HEAD,
    where the body itself is dropped.
    """
    body = response.body_bytes
    headers = response.with_header("Content-Length", str(len(body))).headers
    if 100 <= response.status < 200 or response.status in {204, 304}:
        headers = response.without_headers("Content-Length").headers

    await send_start(response.status, headers, send)
    await send(
        {
            "type": "http.response.body",
            "body": body if body_allowed(response.status, method) else b"",
        }
    )
