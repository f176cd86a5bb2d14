"""
HTTP fetcher shared by the crawler and the downloader.

Uses aiohttp with a semaphore bounding the number of requests in flight.
"""

import asyncio
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..utils.constants import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.errors import FetchError
from ..utils.log import get_logger


class HttpFetcher:
    """
    Fetches listing pages and file bodies over HTTP.

    Use as an async context manager; the underlying session is opened on
    enter and closed on exit. Requests are never retried: a network error,
    a non-2xx status or a timeout raises FetchError carrying the URL.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        concurrency: int = DEFAULT_CONCURRENCY,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Per-request timeout in seconds
            concurrency: Maximum requests in flight
            user_agent: User agent string for requests
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.timeout = ClientTimeout(total=timeout)
        self.concurrency = concurrency
        self.user_agent = user_agent
        self.logger = get_logger("fetcher")

        self._session: Optional[aiohttp.ClientSession] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self.requests_made = 0

    async def __aenter__(self) -> "HttpFetcher":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            # Created here so both are bound to the running loop
            self._semaphore = asyncio.Semaphore(self.concurrency)
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch_text(self, url: str) -> str:
        """
        Fetch a directory listing as text.

        Args:
            url: Listing URL

        Returns:
            Decoded response body
        """
        body = await self._get(url, headers={"Accept": "text/html"})
        return body.decode("utf-8", errors="replace")

    async def fetch_bytes(self, url: str) -> bytes:
        """
        Fetch a file body verbatim.

        Args:
            url: File URL

        Returns:
            Raw response body
        """
        return await self._get(url)

    async def _get(self, url: str, headers: Optional[dict] = None) -> bytes:
        if self._session is None:
            raise RuntimeError("HttpFetcher used outside of its context")

        async with self._semaphore:
            self.requests_made += 1
            self.logger.debug(f"GET {url}")
            try:
                async with self._session.get(url, headers=headers, allow_redirects=True) as response:
                    if not 200 <= response.status < 300:
                        raise FetchError(url, f"HTTP {response.status}", status=response.status)
                    return await response.read()
            except asyncio.TimeoutError as e:
                raise FetchError(url, "request timed out") from e
            except ClientError as e:
                raise FetchError(url, str(e) or type(e).__name__) from e


async def gather_in_order(aws) -> list:
    """
    Run awaitables concurrently and return their results in input order.

    If any of them fails, the others are cancelled before the error is
    re-raised, so no request outlives the operation that issued it.

    Args:
        aws: Iterable of awaitables

    Returns:
        Results, positionally matching the input
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
