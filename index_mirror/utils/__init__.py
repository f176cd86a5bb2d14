"""
Utility modules for the index mirror.

Contains logging, URL/path handling, error types, and constants.
"""

from .log import setup_logger, get_logger
from .paths import listing_key, resolve_href, is_within, entry_name, ensure_dir, write_bytes
from .errors import MirrorError, FetchError, MirrorWriteError, ManifestError
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_CONCURRENCY,
    DEFAULT_INDEX_BASE,
    DEFAULT_RELEASE,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "listing_key",
    "resolve_href",
    "is_within",
    "entry_name",
    "ensure_dir",
    "write_bytes",
    "MirrorError",
    "FetchError",
    "MirrorWriteError",
    "ManifestError",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_CONCURRENCY",
    "DEFAULT_INDEX_BASE",
    "DEFAULT_RELEASE",
]
