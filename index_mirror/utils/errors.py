"""
Exception types raised by the index mirror.

Every failure that aborts a crawl or a mirror derives from MirrorError so
callers can catch the whole family in one place.
"""

from typing import Optional


class MirrorError(Exception):
    """Base class for all index mirror errors."""


class FetchError(MirrorError):
    """A listing or file request failed, returned a non-2xx status, or timed out."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status = status
        super().__init__(f"Failed to fetch {url}: {reason}")


class MirrorWriteError(MirrorError):
    """A local directory or file could not be created."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class ManifestError(MirrorError):
    """The project manifest exists but cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")
