"""
Tree downloader for materializing an entry tree on local disk.

Creates the directory hierarchy, then fetches file bodies in parallel with
aiohttp and writes them verbatim.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .fetcher import HttpFetcher, gather_in_order
from .tree import DirectoryEntry, EntryKind
from ..utils.constants import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import create_progress, get_logger
from ..utils.paths import ensure_dir, join_local, write_bytes


@dataclass
class MirrorResult:
    """Results of a mirror operation."""

    output_dir: str
    directories_created: int = 0
    files_written: int = 0
    bytes_written: int = 0
    duration_seconds: float = 0.0


class TreeDownloader:
    """
    Reproduces a DirectoryEntry tree under a local base path.

    Directories are created while walking the tree in order; file bodies
    are then downloaded concurrently. Existing files are overwritten. The
    first fetch or write failure cancels the remaining downloads and is
    raised to the caller.
    """

    def __init__(self, fetcher: HttpFetcher, show_progress: bool = False):
        """
        Initialize the tree downloader.

        Args:
            fetcher: Open HttpFetcher used for file requests
            show_progress: Display a rich progress bar while downloading
        """
        self.fetcher = fetcher
        self.show_progress = show_progress
        self.logger = get_logger("downloader")

    async def download(self, node: DirectoryEntry, base_path: str) -> MirrorResult:
        """
        Mirror a tree under base_path.

        The root entry maps to base_path joined with its name, or to
        base_path itself when the name is empty.

        Args:
            node: Root of the tree to mirror
            base_path: Local directory to mirror into

        Returns:
            MirrorResult with counts and timing

        Raises:
            FetchError: If a file body cannot be fetched
            MirrorWriteError: If a directory or file cannot be written
        """
        start_time = time.time()
        result = MirrorResult(output_dir=join_local(base_path, node.name))

        # destination path -> source URL; a later duplicate replaces an earlier one
        jobs: Dict[str, str] = {}
        self._prepare(node, base_path, jobs, result)

        self.logger.info(
            f"Created {result.directories_created} directories, "
            f"downloading {len(jobs)} files into {result.output_dir}"
        )

        if self.show_progress and jobs:
            with create_progress() as progress:
                task = progress.add_task("Downloading", total=len(jobs))
                await self._download_all(jobs, result, lambda: progress.advance(task))
        else:
            await self._download_all(jobs, result)

        result.duration_seconds = time.time() - start_time
        self.logger.info(
            f"Wrote {result.files_written} files ({result.bytes_written} bytes) "
            f"in {result.duration_seconds:.1f}s"
        )
        return result

    def _prepare(
        self,
        node: DirectoryEntry,
        base_path: str,
        jobs: Dict[str, str],
        result: MirrorResult
    ) -> None:
        """Create the directories of a subtree and queue its files."""
        path = join_local(base_path, node.name)
        if ensure_dir(path):
            result.directories_created += 1

        for child in node.children:
            if child.kind is EntryKind.DIRECTORY:
                self._prepare(child, path, jobs, result)
            elif child.kind is EntryKind.FILE:
                file_path = join_local(path, child.name)
                if jobs.pop(file_path, None) is not None:
                    self.logger.debug(f"Duplicate entry, later one wins: {file_path}")
                jobs[file_path] = child.source_url

    async def _download_all(
        self,
        jobs: Dict[str, str],
        result: MirrorResult,
        on_done: Optional[Callable[[], None]] = None
    ) -> None:
        await gather_in_order(
            self._download_file(url, path, result, on_done)
            for path, url in jobs.items()
        )

    async def _download_file(
        self,
        url: str,
        path: str,
        result: MirrorResult,
        on_done: Optional[Callable[[], None]]
    ) -> None:
        content = await self.fetcher.fetch_bytes(url)
        result.bytes_written += write_bytes(path, content)
        result.files_written += 1
        self.logger.debug(f"Downloaded: {url} -> {path}")
        if on_done:
            on_done()


async def download_async(
    node: DirectoryEntry,
    base_path: str,
    timeout: float = DEFAULT_TIMEOUT,
    concurrency: int = DEFAULT_CONCURRENCY,
    user_agent: str = DEFAULT_USER_AGENT
) -> MirrorResult:
    """Mirror a tree with a fetcher of its own."""
    async with HttpFetcher(timeout=timeout, concurrency=concurrency, user_agent=user_agent) as fetcher:
        return await TreeDownloader(fetcher).download(node, base_path)


def download(node: DirectoryEntry, base_path: str, **options) -> MirrorResult:
    """
    Mirror a tree, blocking until every file is written.

    Args:
        node: Root of the tree to mirror
        base_path: Local directory to mirror into
        **options: timeout, concurrency, user_agent

    Returns:
        MirrorResult with counts and timing
    """
    return asyncio.run(download_async(node, base_path, **options))
