"""
Helpers for serving fake directory indexes from an in-process aiohttp server.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Optional, Union

from aiohttp import web
from aiohttp.test_utils import TestServer


def listing(*hrefs: str) -> str:
    """Render an Apache-style autoindex page linking to hrefs in order."""
    rows = "\n".join(f'<tr><td><a href="{href}">{href}</a></td></tr>' for href in hrefs)
    return (
        "<html><head><title>Index of /</title></head><body>\n"
        "<h1>Index of /</h1>\n"
        f"<table>\n{rows}\n</table>\n"
        "</body></html>"
    )


class IndexSite:
    """
    Serves fixed pages by path and records every request.

    Attributes:
        pages: path -> str (served as HTML) or bytes (served as a file)
        delays: path -> seconds to sleep before answering
        requests: (path, headers) of every request received
    """

    def __init__(
        self,
        pages: Dict[str, Union[str, bytes]],
        delays: Optional[Dict[str, float]] = None
    ):
        self.pages = pages
        self.delays = delays or {}
        self.requests = []
        self.base_url = ""

    def url(self, path: str) -> str:
        return self.base_url.rstrip('/') + path

    def requested_paths(self):
        return [path for path, _ in self.requests]

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append((request.path, dict(request.headers)))

        delay = self.delays.get(request.path)
        if delay:
            await asyncio.sleep(delay)

        if request.path not in self.pages:
            raise web.HTTPNotFound()

        body = self.pages[request.path]
        if isinstance(body, bytes):
            return web.Response(body=body, content_type='application/octet-stream')
        return web.Response(text=body, content_type='text/html')


@asynccontextmanager
async def serve(pages, delays=None):
    """Run an IndexSite for the duration of the block."""
    site = IndexSite(pages, delays)
    app = web.Application()
    app.router.add_get('/{tail:.*}', site.handle)

    server = TestServer(app)
    await server.start_server()
    site.base_url = str(server.make_url('/'))
    try:
        yield site
    finally:
        await server.close()


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)
