"""HTTP primitives — request, response and encoding negotiation."""

from stiff.http.encoding import AcceptEncoding, parse_accept_encoding
from stiff.http.request import Request
from stiff.http.response import FileResponse, Response, redirect, text_response

__all__ = [
    "AcceptEncoding",
    "FileResponse",
    "Request",
    "Response",
    "parse_accept_encoding",
    "redirect",
    "text_response",
]
