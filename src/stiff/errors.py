"""Stiff exception hierarchy.

Shared across config loading, the route map, the file map builder and
the request handler so every module raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path


class StiffError(Exception):
    """Base for all stiff-specific errors."""


class ConfigurationError(StiffError):
    """Raised when the server configuration is invalid.

    Always fatal: raised while building the ``FileServer``, before any
    request is accepted.
    """


class InvalidRoute(ConfigurationError):  # noqa: N818 — mirrors the config key it rejects
    """A route pattern in ``routes`` is missing its leading slash."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        super().__init__(f"stiff.json: invalid route {pattern!r}, missing leading slash")


class InvalidMimeType(ConfigurationError):  # noqa: N818 — mirrors the config key it rejects
    """An extension in ``mimetypes`` is missing its leading dot."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"stiff.json: invalid extension {extension!r}, missing dot")


class BuildError(StiffError):
    """The public directory could not be scanned into a file map."""

    def __init__(self, path: str | Path, detail: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {detail}")


@dataclass(frozen=True, slots=True)
class HTTPError(StiffError):
    """An error that maps directly to an HTTP status code.

    Raised inside the request handler. The ASGI entry point catches
    these and answers with the matching error page.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no file answers the request path.

    *headers* are the response headers decided before the lookup failed;
    the error page keeps the ones that are not about caching.
    """

    def __init__(self, detail: str = "Not Found", headers: tuple[tuple[str, str], ...] = ()) -> None:
        super().__init__(status=404, detail=detail, headers=headers)


class ServerFault(HTTPError):
    """500 — the file exists in the file map but could not be served."""

    def __init__(
        self, detail: str = "Internal Server Error", headers: tuple[tuple[str, str], ...] = ()
    ) -> None:
        super().__init__(status=500, detail=detail, headers=headers)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — only GET and HEAD are served.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
