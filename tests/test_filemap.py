"""Tests for stiff.files.filemap — scanning the public directory."""

import base64
import hashlib
import os
from pathlib import Path

import pytest

from stiff.config import RouteOverrides, ServerConfig
from stiff.errors import BuildError
from stiff.files.filemap import FileDetails, FileMap, build_file_map, compute_etag
from stiff.files.mimemap import MimeMap
from stiff.routing.route_map import RouteMap


def _build(root: Path, config: ServerConfig | None = None) -> FileMap:
    return build_file_map(root, RouteMap.build(config), MimeMap())


class TestComputeEtag:
    def test_format(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("hello")
        etag = compute_etag(path, "text/plain; charset=utf-8")
        assert etag.startswith('W/"')
        assert etag.endswith('"')
        assert len(etag) == len('W/""') + 16

    def test_matches_sha512_256(self, tmp_path: Path) -> None:
        digest = hashlib.new("sha512_256")
        path = tmp_path / "a.txt"
        path.write_bytes(b"hello")
        digest.update(b"text/plain")
        digest.update(b"hello")
        expected = base64.urlsafe_b64encode(digest.digest()).decode()[:16]
        assert compute_etag(path, "text/plain") == f'W/"{expected}"'

    def test_known_digest(self, tmp_path: Path) -> None:
        # SHA-512/256 of the empty message, not a truncated SHA-512.
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert compute_etag(path, "") == 'W/"xnK40e9W7Sirh8Ni"'

    def test_deterministic(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("same")
        assert compute_etag(path, "text/plain") == compute_etag(path, "text/plain")

    def test_content_type_is_part_of_tag(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_text("same")
        assert compute_etag(path, "text/plain") != compute_etag(path, "text/html")

    def test_content_changes_tag(self, tmp_path: Path) -> None:
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_text("one")
        b.write_text("two")
        assert compute_etag(a, "text/plain") != compute_etag(b, "text/plain")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert compute_etag(path, "application/octet-stream").startswith('W/"')


class TestBuildFileMap:
    def test_entries(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        assert set(file_map.files) == {
            "/index.html",
            "/about.html",
            "/robots.txt",
            "/app.js",
            "/style.css",
            "/blog/hello.html",
            "/blog/data.json",
        }
        assert len(file_map) == 7
        assert "/blog/hello.html" in file_map

    def test_content_types(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        assert file_map.get("/about.html").content_type == "text/html; charset=utf-8"
        assert file_map.get("/blog/data.json").content_type == "application/json"

    def test_variant_flags(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        app_js = file_map.get("/app.js")
        assert app_js.has_brotli is True
        assert app_js.has_gzip is True
        assert app_js.has_variants is True

        style = file_map.get("/style.css")
        assert style.has_brotli is False
        assert style.has_gzip is True

        assert file_map.get("/about.html").has_variants is False

    def test_variants_are_not_entries(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        assert file_map.get("/app.js.br") is None
        assert file_map.get("/app.js.gz") is None

    def test_orphan_variant_ignored(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        assert file_map.get("/orphan.txt") is None
        assert file_map.get("/orphan.txt.br") is None

    def test_error_pages_separated(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        assert file_map.get("/404.html") is None
        assert file_map.get("/500.html") is None
        assert file_map.error_page("/404.html") is not None
        assert file_map.error_page("/500.html") is not None

    def test_nested_error_pages_are_ordinary(self, public_dir: Path) -> None:
        (public_dir / "blog" / "404.html").write_text("nested")
        file_map = _build(public_dir)
        assert file_map.get("/blog/404.html") is not None

    def test_etags_by_default(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        details = file_map.get("/app.js")
        assert details.etag == compute_etag(public_dir / "app.js", details.content_type)

    def test_etag_disabled_globally(self, public_dir: Path) -> None:
        file_map = _build(public_dir, ServerConfig(etag=False))
        assert all(details.etag == "" for details in file_map.files.values())

    def test_etag_route_uses_clean_url(self, public_dir: Path) -> None:
        config = ServerConfig(routes={"/about": RouteOverrides(etag=False)})
        file_map = _build(public_dir, config)
        assert file_map.get("/about.html").etag == ""
        assert file_map.get("/index.html").etag != ""

    def test_etag_directory_route(self, public_dir: Path) -> None:
        config = ServerConfig(etag=False, routes={"/blog/": RouteOverrides(etag=True)})
        file_map = _build(public_dir, config)
        assert file_map.get("/blog/hello.html").etag != ""
        assert file_map.get("/about.html").etag == ""

    def test_mime_override(self, public_dir: Path) -> None:
        (public_dir / "module.wasm").write_bytes(b"\x00asm")
        mime_map = MimeMap().with_overrides({".wasm": "application/wasm"})
        file_map = build_file_map(public_dir, RouteMap.build(None), mime_map)
        assert file_map.get("/module.wasm").content_type == "application/wasm"

    def test_empty_directory(self, tmp_path: Path) -> None:
        file_map = _build(tmp_path)
        assert len(file_map) == 0
        assert file_map.error_page("/404.html") is None

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(BuildError) as exc_info:
            _build(tmp_path / "missing")
        assert exc_info.value.path == tmp_path / "missing"

    def test_file_instead_of_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "file"
        path.write_text("x")
        with pytest.raises(BuildError):
            _build(path)

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root can read unreadable files",
    )
    def test_unreadable_file(self, public_dir: Path) -> None:
        secret = public_dir / "secret.txt"
        secret.write_text("x")
        secret.chmod(0)
        try:
            with pytest.raises(BuildError):
                _build(public_dir)
        finally:
            secret.chmod(0o644)

    def test_read_only_tables(self, public_dir: Path) -> None:
        file_map = _build(public_dir)
        with pytest.raises(TypeError):
            file_map.files["/x"] = FileDetails("text/plain")  # type: ignore[index]


class TestFilesystemPath:
    def test_maps_under_root(self, tmp_path: Path) -> None:
        file_map = FileMap(root=tmp_path)
        assert file_map.filesystem_path("/blog/hello.html") == tmp_path / "blog" / "hello.html"


class TestWalkOrder:
    def test_variants_found_regardless_of_order(
        self, public_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from stiff.files import filemap

        in_order = filemap._walk(public_dir)
        expected = _build(public_dir)

        monkeypatch.setattr(filemap, "_walk", lambda root: list(reversed(in_order)))
        reversed_map = _build(public_dir)

        assert dict(reversed_map.files) == dict(expected.files)
        assert reversed_map.get("/app.js").has_brotli is True
