"""Files — the startup scan of the public directory.

The file map and mime map are built once, before the first request,
and shared read-only afterwards.
"""

from stiff.files.filemap import ERROR_PAGES, FileDetails, FileMap, build_file_map, compute_etag
from stiff.files.mimemap import DEFAULT_MIME_TYPES, MimeMap

__all__ = [
    "DEFAULT_MIME_TYPES",
    "ERROR_PAGES",
    "FileDetails",
    "FileMap",
    "MimeMap",
    "build_file_map",
    "compute_etag",
]
