"""
Mirror pipeline: crawl, filter, then download.

Runs the three stages sequentially over one shared HTTP fetcher.
"""

import asyncio
import os
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from .crawler import IndexCrawler
from .downloader import MirrorResult, TreeDownloader
from .fetcher import HttpFetcher
from .filter import FilterPolicy, TreeFilter
from .tree import DirectoryEntry
from ..utils.constants import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger


@dataclass
class PipelineResult:
    """Results of a pipeline run."""

    root_url: str
    crawled: DirectoryEntry
    kept: DirectoryEntry
    listings_fetched: int = 0
    mirror: Optional[MirrorResult] = None
    duration_seconds: float = 0.0

    @property
    def crawled_counts(self) -> Tuple[int, int]:
        return self.crawled.count()

    @property
    def kept_counts(self) -> Tuple[int, int]:
        return self.kept.count()


class MirrorPipeline:
    """
    Mirrors the filtered part of a remote index into a local directory.

    Coordinates the crawler, the filter and the downloader.
    """

    def __init__(
        self,
        root_url: str,
        output_dir: str,
        policy: FilterPolicy,
        timeout: float = DEFAULT_TIMEOUT,
        concurrency: int = DEFAULT_CONCURRENCY,
        user_agent: str = DEFAULT_USER_AGENT,
        max_depth: Optional[int] = None,
        show_progress: bool = False
    ):
        """
        Initialize the pipeline.

        Args:
            root_url: Root listing URL
            output_dir: Local directory the root is mirrored into
            policy: Filter policy applied between crawl and download
            timeout: Per-request timeout in seconds
            concurrency: Maximum requests in flight
            user_agent: User agent string for requests
            max_depth: Deepest directory level to crawl; None for unlimited
            show_progress: Display a progress bar while downloading
        """
        self.root_url = root_url
        self.output_dir = os.path.abspath(output_dir)
        self.policy = policy
        self.timeout = timeout
        self.concurrency = concurrency
        self.user_agent = user_agent
        self.max_depth = max_depth
        self.show_progress = show_progress
        self.logger = get_logger("pipeline")

    async def run(self, dry_run: bool = False) -> PipelineResult:
        """
        Run crawl, filter and (unless dry_run) download.

        Args:
            dry_run: Stop after filtering; nothing is written

        Returns:
            PipelineResult with both trees and the mirror statistics
        """
        start_time = time.time()

        async with HttpFetcher(
            timeout=self.timeout,
            concurrency=self.concurrency,
            user_agent=self.user_agent
        ) as fetcher:
            crawler = IndexCrawler(fetcher, max_depth=self.max_depth)
            crawled = await crawler.crawl(self.root_url)

            kept = TreeFilter(self.policy).filter(crawled)

            result = PipelineResult(
                root_url=self.root_url,
                crawled=crawled,
                kept=kept,
                listings_fetched=crawler.listings_fetched
            )

            if not dry_run:
                downloader = TreeDownloader(fetcher, show_progress=self.show_progress)
                result.mirror = await downloader.download(kept, self.output_dir)

        result.duration_seconds = time.time() - start_time
        return result


def mirror_index(
    root_url: str,
    output_dir: str,
    policy: FilterPolicy,
    **options
) -> PipelineResult:
    """
    Crawl, filter and mirror an index, blocking until done.

    Args:
        root_url: Root listing URL
        output_dir: Local directory to mirror into
        policy: Filter policy
        **options: Any other MirrorPipeline argument

    Returns:
        PipelineResult
    """
    return asyncio.run(MirrorPipeline(root_url, output_dir, policy, **options).run())
