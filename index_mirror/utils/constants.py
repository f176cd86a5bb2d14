"""
Shared constants for the index mirror.

Contains common configuration values used across multiple modules.
"""

from .. import __version__

# Identifying user agent sent with every listing and file request
DEFAULT_USER_AGENT = f"index-mirror/{__version__}"

# Default request timeout in seconds (per request, not per subtree)
DEFAULT_TIMEOUT = 30

# Default number of requests allowed in flight at once
DEFAULT_CONCURRENCY = 10

# Base of the SVN autoindex that release trees are mirrored from
DEFAULT_INDEX_BASE = "https://core.svn.wordpress.org/tags"

# Release mirrored when no version is given and the manifest has none
DEFAULT_RELEASE = "6.9"

# Default filter policy: the two core subsystems plus PHP sources and the license
DEFAULT_ALLOWED_DIRS = ("wp-admin", "wp-includes")
DEFAULT_FILE_SUFFIXES = (".php",)
DEFAULT_FILE_NAMES = ("license.txt",)

# Parent and current-directory hrefs that never name a child entry
PARENT_LINKS = ("../", "..", "./", ".")
SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:", "ftp:")
