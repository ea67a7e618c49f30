"""Tests for stiff.http.request — building requests from ASGI scopes."""

from stiff.http.request import Request


def _scope(**overrides):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/about",
        "query_string": b"",
        "headers": [],
    }
    scope.update(overrides)
    return scope


class TestFromAsgi:
    def test_basic(self) -> None:
        request = Request.from_asgi(_scope(query_string=b"a=1"))
        assert request.method == "GET"
        assert request.path == "/about"
        assert request.query_string == "a=1"

    def test_headers_lowercased(self) -> None:
        request = Request.from_asgi(_scope(headers=[(b"Accept-Encoding", b"br")]))
        assert request.header("accept-encoding") == "br"
        assert request.header("ACCEPT-ENCODING") == "br"

    def test_repeated_headers_joined(self) -> None:
        request = Request.from_asgi(
            _scope(headers=[(b"accept-encoding", b"gzip"), (b"accept-encoding", b"br")])
        )
        assert request.header("accept-encoding") == "gzip, br"

    def test_missing_optional_keys(self) -> None:
        request = Request.from_asgi({"type": "http", "method": "HEAD", "path": "/"})
        assert request.query_string == ""
        assert request.method == "HEAD"
        assert request.header("range") is None


class TestRange:
    def test_absent(self) -> None:
        assert Request("GET", "/").range is None

    def test_empty_counts_as_absent(self) -> None:
        assert Request("GET", "/", headers={"range": ""}).range is None

    def test_present(self) -> None:
        assert Request("GET", "/", headers={"range": "bytes=0-9"}).range == "bytes=0-9"
