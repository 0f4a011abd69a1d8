"""Logging setup: one console handler on the root logger, level from config."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
SILENT = "silent"


def resolve_level(level: str) -> int | None:
    """Map a config level name to a logging level; None means silent. Unknown names fall back to INFO."""
    name = (level or "").strip().upper()
    if name == SILENT.upper():
        return None
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO") -> None:
    """
    Configure application logging.

    Invariants:
    - Existing root handlers are removed so repeated calls do not duplicate output.
    - "silent" installs a NullHandler and disables every record below CRITICAL+1.
    """
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)

    resolved = resolve_level(level)
    if resolved is None:
        root.addHandler(logging.NullHandler())
        root.setLevel(logging.CRITICAL + 1)
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(resolved)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    root.setLevel(resolved)
    root.addHandler(console)
