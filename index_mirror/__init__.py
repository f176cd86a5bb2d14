"""
Index Mirror - mirror selected parts of an HTML directory index to disk.

This package crawls Apache/SVN style autoindex pages into a tree, prunes the
tree to an allow-list of directories and files, and recreates what is left
under a local directory.
"""

__version__ = "1.0.0"
__author__ = "Index Mirror Team"

from .crawler import (
    DirectoryEntry,
    FileEntry,
    FilterPolicy,
    crawl,
    filter_tree,
    download,
    mirror_index,
)

__all__ = [
    "DirectoryEntry",
    "FileEntry",
    "FilterPolicy",
    "crawl",
    "filter_tree",
    "download",
    "mirror_index",
]
