"""URL path helpers shared by route resolution and the request handler."""

import posixpath


def clean_path(path: str) -> str:
    """Return the shortest absolute form of a URL path.

    Collapses ``.`` and ``..`` segments and duplicate slashes, drops any
    trailing slash and guarantees a single leading slash::

        clean_path("")            -> "/"
        clean_path("about/")      -> "/about"
        clean_path("/a//b/../c")  -> "/a/c"
        clean_path("/../etc")     -> "/etc"
    """
    cleaned = posixpath.normpath("/" + path)
    # POSIX keeps a leading "//" intact; URLs must not.
    return "/" + cleaned.lstrip("/")
