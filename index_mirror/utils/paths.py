"""
Path and URL utilities for the index mirror.

Provides listing URL resolution, crawl scoping, entry naming and the local
filesystem writes the mirror is built from.
"""

import os
from urllib.parse import urlparse, urljoin, urldefrag, unquote

from .constants import PARENT_LINKS, SKIPPED_SCHEMES
from .errors import MirrorWriteError


def listing_key(url: str) -> str:
    """
    Key used to decide whether two listing URLs are the same directory.

    Args:
        url: Listing URL

    Returns:
        URL without fragment and trailing slashes
    """
    return urldefrag(url)[0].rstrip('/')


def is_skipped_href(href: str) -> bool:
    """
    Check whether an anchor href can never name a child entry.

    Parent links, empty and fragment-only anchors, sort/query links and
    non-HTTP schemes are skipped.

    Args:
        href: Raw href attribute value

    Returns:
        True if the href should be ignored
    """
    if not href or href in PARENT_LINKS:
        return True
    if href.startswith(('#', '?')):
        return True
    return href.lower().startswith(SKIPPED_SCHEMES)


def resolve_href(listing_url: str, href: str) -> str:
    """
    Resolve an anchor href against the listing it appeared in.

    Relative hrefs are appended to the listing URL (trailing slash trimmed)
    after a single "/"; root-absolute and absolute hrefs resolve normally.

    Args:
        listing_url: URL of the directory listing
        href: Anchor href

    Returns:
        Absolute child URL without fragment
    """
    resolved = urljoin(listing_url.rstrip('/') + '/', href)
    return urldefrag(resolved)[0]


def is_within(url: str, root_url: str) -> bool:
    """
    Check if a URL lies inside the tree rooted at root_url.

    Args:
        url: URL to check
        root_url: Root listing URL of the crawl

    Returns:
        True if url is root_url itself or one of its descendants
    """
    parsed = urlparse(url)
    root = urlparse(root_url)

    if (parsed.scheme.lower(), parsed.netloc.lower()) != (root.scheme.lower(), root.netloc.lower()):
        return False

    root_path = root.path.rstrip('/')
    path = parsed.path.rstrip('/')
    return path == root_path or path.startswith(root_path + '/')


def entry_name(url: str) -> str:
    """
    Get the entry name for a URL: its last path segment, percent-decoded.

    Args:
        url: File or listing URL

    Returns:
        Last path segment ("" for a bare host)
    """
    path = urlparse(url).path.rstrip('/')
    return unquote(path.rsplit('/', 1)[-1])


def is_safe_name(name: str) -> bool:
    """
    Check that an entry name can be used as a single local path component.

    Args:
        name: Decoded entry name

    Returns:
        False for empty names, dot names and names containing separators
    """
    if name in ('', '.', '..'):
        return False
    return '/' not in name and '\\' not in name and '\x00' not in name


def join_local(base_path: str, name: str) -> str:
    """
    Join an entry name onto a local base path.

    An empty name (the crawl root) maps onto base_path itself.

    Args:
        base_path: Local directory path
        name: Entry name

    Returns:
        Local path for the entry
    """
    if not name:
        return base_path
    return base_path.rstrip('/') + '/' + name


def ensure_dir(path: str) -> bool:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path to ensure exists

    Returns:
        True if the directory was created, False if it already existed

    Raises:
        MirrorWriteError: If the directory cannot be created
    """
    if os.path.isdir(path):
        return False
    try:
        os.makedirs(path, mode=0o777, exist_ok=True)
    except OSError as e:
        raise MirrorWriteError(path, e.strerror or str(e)) from e
    return True


def write_bytes(path: str, content: bytes) -> int:
    """
    Write content verbatim to path, overwriting any existing file.

    Args:
        path: Destination file path
        content: Bytes to write

    Returns:
        Number of bytes written

    Raises:
        MirrorWriteError: If the file cannot be written
    """
    try:
        with open(path, 'wb') as f:
            f.write(content)
    except OSError as e:
        raise MirrorWriteError(path, e.strerror or str(e)) from e
    return len(content)
