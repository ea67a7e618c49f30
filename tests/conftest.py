"""Shared fixtures: a small pre-built site on disk."""

from pathlib import Path

import pytest


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """A public directory with clean-URL pages, variants and error pages."""
    public = tmp_path / "public"
    public.mkdir()

    (public / "index.html").write_text("<h1>Home</h1>")
    (public / "about.html").write_text("<h1>About</h1>")
    (public / "404.html").write_text("<h1>Not Found</h1>")
    (public / "500.html").write_text("<h1>Server Error</h1>")
    (public / "robots.txt").write_text("User-agent: *\n")

    # Both variants
    (public / "app.js").write_text("console.log('hello');")
    (public / "app.js.br").write_bytes(b"BROTLI-app.js")
    (public / "app.js.gz").write_bytes(b"GZIP-app.js")

    # gzip only
    (public / "style.css").write_text("body { color: red; }")
    (public / "style.css.gz").write_bytes(b"GZIP-style.css")

    # Orphan variant: no base file
    (public / "orphan.txt.br").write_bytes(b"BROTLI-orphan")

    blog = public / "blog"
    blog.mkdir()
    (blog / "hello.html").write_text("<h1>Hello</h1>")
    (blog / "data.json").write_text('{"ok": true}')

    return public
