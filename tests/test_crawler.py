"""
Tests for the index crawler against an in-process listing server.
"""

import pytest

from index_mirror.crawler.crawler import IndexCrawler, extract_hrefs
from index_mirror.crawler.fetcher import HttpFetcher
from index_mirror.crawler.tree import DirectoryEntry, EntryKind, FileEntry
from index_mirror.utils.constants import DEFAULT_USER_AGENT
from index_mirror.utils.errors import FetchError

from .support import listing, run, serve


async def _crawl(site, path="/", name="", timeout=5, max_depth=None, concurrency=4):
    async with HttpFetcher(timeout=timeout, concurrency=concurrency) as fetcher:
        return await IndexCrawler(fetcher, max_depth=max_depth).crawl(site.url(path), name)


def _names(node):
    return [child.name for child in node.children]


# -----------------------------------------------------------------------------
# 1. Anchor extraction
# -----------------------------------------------------------------------------
def test_extract_hrefs_in_document_order():
    html = '<A HREF="b/">b</A> <p><a href="a.php">a</a></p> <a name="x">no href</a> <a href=" c/ ">c</a>'
    assert extract_hrefs(html) == ["b/", "a.php", "c/"]


def test_extract_hrefs_without_anchors():
    assert extract_hrefs("<html><body><h1>Forbidden</h1></body></html>") == []
    assert extract_hrefs("") == []


# -----------------------------------------------------------------------------
# 2. Tree structure
# -----------------------------------------------------------------------------
def test_children_follow_anchor_order():
    pages = {
        "/": listing("../", "x/", "a.php", "y/"),
        "/x/": listing("../", "x1.php"),
        "/y/": listing("../"),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site)

    site, root = run(scenario())

    assert root.name == ""
    assert _names(root) == ["x", "a.php", "y"]
    assert [child.kind for child in root.children] == [
        EntryKind.DIRECTORY, EntryKind.FILE, EntryKind.DIRECTORY,
    ]
    assert root.children[1] == FileEntry("a.php", site.url("/a.php"))
    assert root.children[0] == DirectoryEntry("x", [FileEntry("x1.php", site.url("/x/x1.php"))])
    assert root.children[2] == DirectoryEntry("y")


def test_children_keep_order_when_first_sibling_finishes_last():
    pages = {
        "/": listing("slow/", "a.php", "fast/"),
        "/slow/": listing("s.php"),
        "/fast/": listing("f.php"),
    }

    async def scenario():
        async with serve(pages, delays={"/slow/": 0.5}) as site:
            return await _crawl(site)

    root = run(scenario())

    assert _names(root) == ["slow", "a.php", "fast"]
    assert _names(root.children[0]) == ["s.php"]
    assert _names(root.children[2]) == ["f.php"]


def test_root_name_is_used():
    pages = {"/tags/6.9/": listing("index.php")}

    async def scenario():
        async with serve(pages) as site:
            return await _crawl(site, "/tags/6.9/", name="6.9")

    root = run(scenario())
    assert root.name == "6.9"
    assert _names(root) == ["index.php"]


def test_page_without_anchors_is_an_empty_directory():
    pages = {"/": listing("empty/"), "/empty/": "<html><body>nothing here</body></html>"}

    async def scenario():
        async with serve(pages) as site:
            return await _crawl(site)

    root = run(scenario())
    assert root == DirectoryEntry("", [DirectoryEntry("empty")])


def test_encoded_names_are_decoded():
    # the server sees decoded request paths
    pages = {"/": listing("my%20dir/", "read%20me.txt"), "/my dir/": listing("inner.php")}

    async def scenario():
        async with serve(pages) as site:
            return await _crawl(site)

    root = run(scenario())
    assert _names(root) == ["my dir", "read me.txt"]
    assert _names(root.children[0]) == ["inner.php"]


# -----------------------------------------------------------------------------
# 3. Cycles and repeated links
# -----------------------------------------------------------------------------
def test_back_link_terminates_as_empty_directory():
    pages = {
        "/": listing("a/"),
        "/a/": listing("../", "b/"),
        "/a/b/": listing("../", "/a/", "leaf.php"),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site)

    site, root = run(scenario())

    a = root.children[0]
    b = a.children[0]
    assert _names(b) == ["a", "leaf.php"]
    assert b.children[0] == DirectoryEntry("a")
    assert site.requested_paths().count("/a/") == 1


def test_absolute_back_link_to_root_is_empty():
    pages = {"/top/": listing("a/")}

    async def scenario():
        async with serve(pages) as site:
            pages["/top/a/"] = listing(site.url("/top/"), "file.php")
            return site, await _crawl(site, "/top/", name="top")

    site, root = run(scenario())

    a = root.children[0]
    assert a.children == [DirectoryEntry("top"), FileEntry("file.php", site.url("/top/a/file.php"))]
    assert site.requested_paths().count("/top/") == 1


def test_repeated_links_are_kept_but_fetched_once():
    pages = {"/": listing("dup/", "dup/", "f.php", "f.php"), "/dup/": listing("inner.php")}

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site)

    site, root = run(scenario())

    assert _names(root) == ["dup", "dup", "f.php", "f.php"]
    assert _names(root.children[0]) == ["inner.php"]
    assert root.children[1] == DirectoryEntry("dup")
    assert site.requested_paths().count("/dup/") == 1


def test_each_crawl_has_its_own_visited_set():
    pages = {"/": listing("a/"), "/a/": listing("x.php")}

    async def scenario():
        async with serve(pages) as site:
            async with HttpFetcher(timeout=5) as fetcher:
                crawler = IndexCrawler(fetcher)
                first = await crawler.crawl(site.url("/"))
                second = await crawler.crawl(site.url("/"))
            return first, second, crawler.listings_fetched

    first, second, listings_fetched = run(scenario())
    assert first == second
    assert listings_fetched == 2
    assert _names(second.children[0]) == ["x.php"]


# -----------------------------------------------------------------------------
# 4. Links that are not entries
# -----------------------------------------------------------------------------
def test_non_entry_links_are_skipped():
    pages = {
        "/pub/": listing(
            "?C=N;O=D", "#top", "", "mailto:svn@example.org",
            "https://wordpress.org/", "/elsewhere/", "ok.php",
        ),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site, "/pub/")

    site, root = run(scenario())
    assert _names(root) == ["ok.php"]
    assert site.requested_paths() == ["/pub/"]


def test_links_to_the_listing_itself_are_skipped():
    pages = {
        "/": listing("wp-admin/"),
        "/wp-admin/": listing("./", ".", "/wp-admin/", "a.php"),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site)

    site, root = run(scenario())
    assert _names(root.children[0]) == ["a.php"]
    assert site.requested_paths().count("/wp-admin/") == 1


def test_links_outside_the_root_are_skipped():
    pages = {
        "/tags/6.9/": listing("../", "/tags/", "/tags/6.8/", "/tags/6.9/wp-admin/"),
        "/tags/6.9/wp-admin/": listing("x.php"),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site, "/tags/6.9/")

    site, root = run(scenario())
    assert _names(root) == ["wp-admin"]
    assert sorted(site.requested_paths()) == ["/tags/6.9/", "/tags/6.9/wp-admin/"]


# -----------------------------------------------------------------------------
# 5. Depth limit
# -----------------------------------------------------------------------------
def test_max_depth_leaves_deeper_directories_empty():
    pages = {
        "/": listing("a/", "top.php"),
        "/a/": listing("b/", "mid.php"),
        "/a/b/": listing("deep.php"),
    }

    async def scenario():
        async with serve(pages) as site:
            return site, await _crawl(site, max_depth=1)

    site, root = run(scenario())
    a = root.children[0]
    assert _names(a) == ["b", "mid.php"]
    assert a.children[0] == DirectoryEntry("b")
    assert "/a/b/" not in site.requested_paths()


# -----------------------------------------------------------------------------
# 6. Requests and failures
# -----------------------------------------------------------------------------
def test_listing_requests_identify_themselves():
    pages = {"/": listing("a.php")}

    async def scenario():
        async with serve(pages) as site:
            await _crawl(site)
            return site

    site = run(scenario())
    (_, headers), = site.requests
    assert headers["User-Agent"] == DEFAULT_USER_AGENT
    assert headers["Accept"] == "text/html"


def test_nested_timeout_fails_the_whole_crawl():
    pages = {
        "/": listing("fast/", "slow/"),
        "/fast/": listing("a.php"),
        "/slow/": listing("b.php"),
    }

    async def scenario():
        async with serve(pages, delays={"/slow/": 1.0}) as site:
            with pytest.raises(FetchError) as excinfo:
                await _crawl(site, timeout=0.2)
            return site, excinfo.value

    site, error = run(scenario())
    assert error.url == site.url("/slow/")
    assert "timed out" in str(error)
    assert site.url("/slow/") in str(error)


def test_missing_listing_fails_with_status():
    pages = {"/": listing("gone/")}

    async def scenario():
        async with serve(pages) as site:
            with pytest.raises(FetchError) as excinfo:
                await _crawl(site)
            return site, excinfo.value

    site, error = run(scenario())
    assert error.url == site.url("/gone/")
    assert error.status == 404


def test_unreachable_root_fails():
    async def scenario():
        async with serve({}) as site:
            url = site.url("/")
        # server is closed now
        async with HttpFetcher(timeout=2) as fetcher:
            with pytest.raises(FetchError) as excinfo:
                await IndexCrawler(fetcher).crawl(url)
        return url, excinfo.value

    url, error = run(scenario())
    assert error.url == url


def test_negative_max_depth_is_rejected():
    with pytest.raises(ValueError):
        IndexCrawler(HttpFetcher(), max_depth=-1)
