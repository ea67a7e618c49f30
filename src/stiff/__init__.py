"""Stiff — a static-asset server for pre-built sites.

Serves a directory of files with the right content type, caching headers
and precompressed variant, applying per-route overrides from ``stiff.json``
and canonicalizing URLs (no ``.html``, no trailing slash).

Basic usage::

    from stiff import FileServer, load_config

    app = FileServer("public", load_config("stiff.json"))
    app.run(port=1717)

``app`` is a plain ASGI callable, so any ASGI server can host it.
"""

__version__ = "0.1.0"
__all__ = [
    "BuildError",
    "ConfigurationError",
    "FileServer",
    "RouteOverrides",
    "ServerConfig",
    "StiffError",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import stiff`` fast while providing a clean top-level API.
    """
    if name == "FileServer":
        from stiff.app import FileServer

        return FileServer

    if name in ("RouteOverrides", "ServerConfig", "load_config"):
        from stiff import config as _config

        return getattr(_config, name)

    if name in ("BuildError", "ConfigurationError", "StiffError"):
        from stiff import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
