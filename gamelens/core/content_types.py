"""Single source of truth for static-file content types."""

from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"

_TEXT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".md": "text/markdown; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
}

_IMAGE_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}

CONTENT_TYPES = {**_TEXT_TYPES, **_IMAGE_TYPES}

# Image types the CLI accepts when encoding local files as data URIs
IMAGE_MIME_TYPES = {ext: mime for ext, mime in _IMAGE_TYPES.items() if ext != ".ico"}


def content_type_for(path: Path | str) -> str:
    """Content type by (case-insensitive) extension; unknown extensions are opaque binary."""
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)
