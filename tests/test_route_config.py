"""Tests for stiff.routing.route_config — layering of server and route settings."""

from stiff.config import RouteOverrides, ServerConfig
from stiff.routing.route_config import DEFAULT_ROUTE_CONFIG, RouteConfig, resolve_route_config


class TestDefaults:
    def test_default_route_config(self) -> None:
        assert DEFAULT_ROUTE_CONFIG == RouteConfig(headers=(), etag=True, lastmod=False, serve="")

    def test_no_server_config(self) -> None:
        assert resolve_route_config(None) is DEFAULT_ROUTE_CONFIG

    def test_no_server_config_ignores_overrides(self) -> None:
        overrides = RouteOverrides(etag=False)
        assert resolve_route_config(None, overrides) is DEFAULT_ROUTE_CONFIG


class TestServerLevel:
    def test_headers_and_flags(self) -> None:
        server = ServerConfig(headers={"X-B": "2", "X-A": "1"}, etag=False, lastmod=True)
        config = resolve_route_config(server)
        assert config.headers == (("X-A", "1"), ("X-B", "2"))
        assert config.etag is False
        assert config.lastmod is True

    def test_empty_server_header_skipped(self) -> None:
        server = ServerConfig(headers={"X-A": "", "X-B": "2"})
        assert resolve_route_config(server).headers == (("X-B", "2"),)

    def test_unset_flags_keep_defaults(self) -> None:
        config = resolve_route_config(ServerConfig())
        assert config.etag is True
        assert config.lastmod is False


class TestRouteLevel:
    def test_route_overrides_server(self) -> None:
        server = ServerConfig(headers={"Cache-Control": "max-age=60", "X-A": "1"}, etag=True)
        overrides = RouteOverrides(headers={"Cache-Control": "", "X-B": "2"}, etag=False)
        config = resolve_route_config(server, overrides)
        assert config.headers == (("X-A", "1"), ("X-B", "2"))
        assert config.etag is False

    def test_route_replaces_value(self) -> None:
        server = ServerConfig(headers={"Cache-Control": "max-age=60"})
        overrides = RouteOverrides(headers={"Cache-Control": "immutable"})
        assert resolve_route_config(server, overrides).header("Cache-Control") == "immutable"

    def test_deleting_absent_header_is_noop(self) -> None:
        overrides = RouteOverrides(headers={"X-Missing": ""})
        assert resolve_route_config(ServerConfig(), overrides).headers == ()

    def test_inherits_server_flags(self) -> None:
        server = ServerConfig(lastmod=True)
        config = resolve_route_config(server, RouteOverrides())
        assert config.lastmod is True

    def test_serve_is_cleaned(self) -> None:
        overrides = RouteOverrides(serve="app//shell.html")
        assert resolve_route_config(ServerConfig(), overrides).serve == "/app/shell.html"

    def test_empty_serve(self) -> None:
        assert resolve_route_config(ServerConfig(), RouteOverrides()).serve == ""


class TestHeaderLookup:
    def test_header(self) -> None:
        config = RouteConfig(headers=(("X-A", "1"),))
        assert config.header("X-A") == "1"
        assert config.header("X-B") is None


class TestMergeProperties:
    def test_idempotent(self) -> None:
        server = ServerConfig(headers={"Cache-Control": "max-age=60", "X-A": "1"})
        overrides = RouteOverrides(headers={"Cache-Control": "", "X-B": "2"})
        once = resolve_route_config(server, overrides)
        twice = resolve_route_config(server, overrides, default=once)
        assert once == twice

    def test_insertion_order_irrelevant(self) -> None:
        a = ServerConfig(headers={"X-A": "1", "X-B": "2"})
        b = ServerConfig(headers={"X-B": "2", "X-A": "1"})
        assert resolve_route_config(a) == resolve_route_config(b)
