"""
Crawler module for index mirroring.

Contains components for crawling, filtering, and downloading index trees.
"""

from .tree import DirectoryEntry, FileEntry, EntryKind
from .fetcher import HttpFetcher
from .crawler import IndexCrawler, crawl
from .filter import FilterPolicy, TreeFilter, filter_tree
from .downloader import TreeDownloader, MirrorResult, download
from .pipeline import MirrorPipeline, PipelineResult, mirror_index

__all__ = [
    "DirectoryEntry",
    "FileEntry",
    "EntryKind",
    "HttpFetcher",
    "IndexCrawler",
    "crawl",
    "FilterPolicy",
    "TreeFilter",
    "filter_tree",
    "TreeDownloader",
    "MirrorResult",
    "download",
    "MirrorPipeline",
    "PipelineResult",
    "mirror_index",
]
