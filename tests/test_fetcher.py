"""
Tests for page fetching.

Uses httpx.MockTransport so no network access is needed.
"""

import httpx
import pytest

from page_agent.config import FetchSettings
from page_agent.core.exceptions import FetchError
from page_agent.fetch import FetchedPage, PageFetcher
from page_agent.utils.metrics import FETCH_FAILURES, FETCH_LATENCY_MS, PAGES_FETCHED, Metrics


PAGE = "<html><head><title>Hello</title></head><body><p>Hi there</p></body></html>"


def make_fetcher(handler, settings: FetchSettings | None = None, metrics: Metrics | None = None) -> PageFetcher:
    """Build a fetcher whose requests go to handler."""
    return PageFetcher(settings, transport=httpx.MockTransport(handler), metrics=metrics)


class TestPageFetcher:
    """Tests for PageFetcher."""

    @pytest.mark.asyncio
    async def test_fetch_success(self):
        """A 200 response returns the page markup."""
        fetcher = make_fetcher(lambda request: httpx.Response(
            200, text=PAGE, headers={"content-type": "text/html; charset=utf-8"}))

        page = await fetcher.fetch("https://example.com/post")

        assert isinstance(page, FetchedPage)
        assert page.status_code == 200
        assert page.html == PAGE
        assert page.url == "https://example.com/post"
        assert page.content_type.startswith("text/html")

    @pytest.mark.asyncio
    async def test_sends_browser_user_agent(self):
        """Requests carry the configured user agent."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["user_agent"] = request.headers["user-agent"]
            return httpx.Response(200, text=PAGE)

        settings = FetchSettings(user_agent="TestAgent/1.0")
        await make_fetcher(handler, settings).fetch("https://example.com")

        assert seen["user_agent"] == "TestAgent/1.0"

    @pytest.mark.asyncio
    async def test_non_success_status(self):
        """Non-2xx responses raise FetchError with the status."""
        fetcher = make_fetcher(lambda request: httpx.Response(404, text="missing"))

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == "https://example.com/missing"
        assert exc_info.value.message == "Unable to fetch url. Received status 404"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Connection failures raise FetchError without a status."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as exc_info:
            await make_fetcher(handler).fetch("https://example.com")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        """Redirects are followed and the final URL reported."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://example.com/new"})
            return httpx.Response(200, text=PAGE)

        page = await make_fetcher(handler).fetch("https://example.com/old")

        assert page.url == "https://example.com/new"
        assert page.html == PAGE

    @pytest.mark.asyncio
    async def test_redirect_not_followed_when_disabled(self):
        """With redirects disabled a 3xx is a failure."""
        fetcher = make_fetcher(
            lambda request: httpx.Response(302, headers={"location": "https://example.com/"}),
            FetchSettings(follow_redirects=False),
        )

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch("https://example.com/old")

        assert exc_info.value.status_code == 302

    @pytest.mark.asyncio
    async def test_oversized_body(self):
        """Bodies over max_bytes are rejected."""
        fetcher = make_fetcher(
            lambda request: httpx.Response(200, content=b"x" * 4096),
            FetchSettings(max_bytes=1024),
        )

        with pytest.raises(FetchError):
            await fetcher.fetch("https://example.com/huge")

    @pytest.mark.asyncio
    async def test_declared_charset(self):
        """The response charset is used for decoding."""
        fetcher = make_fetcher(lambda request: httpx.Response(
            200,
            content="<p>café</p>".encode("latin-1"),
            headers={"content-type": "text/html; charset=iso-8859-1"},
        ))

        page = await fetcher.fetch("https://example.com")

        assert page.html == "<p>café</p>"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["ftp://example.com/file", "not a url", "/relative/path", ""])
    async def test_invalid_url(self, url: str):
        """Only absolute http(s) URLs are fetched."""
        fetcher = make_fetcher(lambda request: httpx.Response(200, text=PAGE))

        with pytest.raises(FetchError):
            await fetcher.fetch(url)

    @pytest.mark.asyncio
    async def test_records_metrics(self):
        """Successes, failures and latency are recorded."""
        metrics = Metrics()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/ok":
                return httpx.Response(200, text=PAGE)
            return httpx.Response(500)

        fetcher = make_fetcher(handler, metrics=metrics)
        await fetcher.fetch("https://example.com/ok")
        with pytest.raises(FetchError):
            await fetcher.fetch("https://example.com/broken")

        assert metrics.get_counter(PAGES_FETCHED) == 1
        assert metrics.get_counter(FETCH_FAILURES) == 1
        assert metrics.get_timing(FETCH_LATENCY_MS).count == 2
