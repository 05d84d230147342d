"""Fixed extension -> content type table for file responses.

A closed table, independent of the host's mime database.
"""

from pathlib import PurePath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    ".html": "text/html",
    ".htm": "text/html",
    ".js": "application/javascript",
    ".mjs": "application/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".pdf": "application/pdf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}


def content_type_for(path: str | PurePath) -> str:
    """Return the content type for *path* based on its extension.

    The lookup is case-sensitive, like the static mapping itself;
    unknown or missing extensions give ``application/octet-stream``.
    """
    return CONTENT_TYPES.get(PurePath(path).suffix, DEFAULT_CONTENT_TYPE)
