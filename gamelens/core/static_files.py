"""Resolve request paths to files under the static root, rejecting traversal."""

from pathlib import Path

INDEX_FILE = "index.html"


class ForbiddenPath(Exception):
    """Requested path resolves outside the static root."""


def resolve_static_path(root: Path | str, url_path: str) -> Path | None:
    """
    Map a URL path to a file under root.

    "/" (or empty) maps to index.html. Raises ForbiddenPath when the resolved path
    escapes root; returns None when the target is missing or is a directory.
    """
    root_resolved = Path(root).resolve()
    rel = url_path.lstrip("/") or INDEX_FILE
    try:
        candidate = (root_resolved / rel).resolve()
    except (OSError, ValueError):
        return None
    if candidate != root_resolved and root_resolved not in candidate.parents:
        raise ForbiddenPath(url_path)
    try:
        if not candidate.is_file():
            return None
    except OSError:
        return None
    return candidate
