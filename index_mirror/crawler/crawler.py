"""
Directory index crawler.

Walks an HTML autoindex (Apache/SVN style) from a root listing URL and
builds a DirectoryEntry tree of everything reachable below it.
"""

import asyncio
import time
from typing import List, Optional, Set, Tuple

from bs4 import BeautifulSoup, FeatureNotFound

from .fetcher import HttpFetcher, gather_in_order
from .tree import DirectoryEntry, FileEntry
from ..utils.constants import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger
from ..utils.paths import (
    entry_name,
    is_safe_name,
    is_skipped_href,
    is_within,
    listing_key,
    resolve_href,
)


def extract_hrefs(html: str) -> List[str]:
    """
    Extract anchor hrefs from a listing page in document order.

    Args:
        html: Listing HTML

    Returns:
        Stripped href values of every <a href> element
    """
    try:
        soup = BeautifulSoup(html, 'lxml')
    except FeatureNotFound:
        soup = BeautifulSoup(html, 'html.parser')

    return [anchor.get('href', '').strip() for anchor in soup.find_all('a', href=True)]


class IndexCrawler:
    """
    Crawls a directory index into a tree of entries.

    Listings are fetched level by level from an explicit work-list. Every
    listing URL is claimed in the visited set before its level is
    dispatched, so a back-link or repeated link becomes an empty directory
    instead of being fetched again, and children always keep the order of
    the anchors they came from.
    """

    def __init__(self, fetcher: HttpFetcher, max_depth: Optional[int] = None):
        """
        Initialize the crawler.

        Args:
            fetcher: Open HttpFetcher used for listing requests
            max_depth: Deepest directory level to fetch (root is 0); None for unlimited
        """
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must not be negative")

        self.fetcher = fetcher
        self.max_depth = max_depth
        self.logger = get_logger("crawler")
        self.listings_fetched = 0

    async def crawl(self, url: str, name: str = "") -> DirectoryEntry:
        """
        Crawl the index rooted at url.

        Args:
            url: Root listing URL
            name: Name given to the root entry ("" maps the root onto the output path)

        Returns:
            Root DirectoryEntry

        Raises:
            FetchError: If any listing cannot be fetched; the crawl is aborted
        """
        start_time = time.time()
        visited: Set[str] = set()
        self.listings_fetched = 0
        root = DirectoryEntry(name)

        self.logger.info(f"Crawling index at {url}")

        level: List[Tuple[str, DirectoryEntry]] = [(url, root)]
        depth = 0

        while level:
            pending = self._claim(level, visited)

            if self.max_depth is not None and depth > self.max_depth:
                self.logger.debug(f"Depth limit reached, {len(pending)} listings left unfetched")
                break

            pages = await gather_in_order(
                self.fetcher.fetch_text(listing_url) for listing_url, _ in pending
            )
            self.listings_fetched += len(pending)

            next_level: List[Tuple[str, DirectoryEntry]] = []
            for (listing_url, node), html in zip(pending, pages):
                next_level.extend(self._populate(node, listing_url, html, url))

            level = next_level
            depth += 1

        directories, files = root.count()
        self.logger.info(
            f"Crawled {self.listings_fetched} listings: "
            f"{directories} directories, {files} files "
            f"in {time.time() - start_time:.1f}s"
        )
        return root

    def _claim(
        self,
        level: List[Tuple[str, DirectoryEntry]],
        visited: Set[str]
    ) -> List[Tuple[str, DirectoryEntry]]:
        """Mark a level's listings visited, dropping those already seen."""
        pending = []
        for listing_url, node in level:
            key = listing_key(listing_url)
            if key in visited:
                self.logger.debug(f"Already visited, leaving empty: {listing_url}")
                continue
            visited.add(key)
            pending.append((listing_url, node))
        return pending

    def _populate(
        self,
        node: DirectoryEntry,
        listing_url: str,
        html: str,
        root_url: str
    ) -> List[Tuple[str, DirectoryEntry]]:
        """
        Add the children found in one listing to its directory entry.

        Returns:
            (url, entry) pairs for the subdirectories still to be crawled
        """
        subdirectories = []

        for href in extract_hrefs(html):
            if is_skipped_href(href):
                continue

            child_url = resolve_href(listing_url, href)
            if not is_within(child_url, root_url):
                self.logger.debug(f"Skipping link outside the index: {href}")
                continue
            if listing_key(child_url) == listing_key(listing_url):
                self.logger.debug(f"Skipping link to the listing itself: {href}")
                continue

            name = entry_name(child_url)
            if not is_safe_name(name):
                self.logger.warning(f"Skipping entry with unusable name: {href!r} in {listing_url}")
                continue

            if href.endswith('/'):
                child = DirectoryEntry(name)
                node.add_child(child)
                subdirectories.append((child_url, child))
            else:
                node.add_child(FileEntry(name, child_url))

        self.logger.debug(f"Listed {listing_url}: {len(node.children)} entries")
        return subdirectories


async def crawl_async(
    url: str,
    name: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    concurrency: int = DEFAULT_CONCURRENCY,
    user_agent: str = DEFAULT_USER_AGENT,
    max_depth: Optional[int] = None
) -> DirectoryEntry:
    """Crawl an index with a fetcher of its own."""
    async with HttpFetcher(timeout=timeout, concurrency=concurrency, user_agent=user_agent) as fetcher:
        return await IndexCrawler(fetcher, max_depth=max_depth).crawl(url, name)


def crawl(url: str, name: str = "", **options) -> DirectoryEntry:
    """
    Crawl an index, blocking until the whole tree is discovered.

    Args:
        url: Root listing URL
        name: Root entry name
        **options: timeout, concurrency, user_agent, max_depth

    Returns:
        Root DirectoryEntry
    """
    return asyncio.run(crawl_async(url, name, **options))
