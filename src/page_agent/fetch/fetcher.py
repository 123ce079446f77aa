"""
HTTP page fetching.

Retrieves the markup of pages submitted by URL, presenting a browser-like
user agent. There are no retries: a failed fetch is reported to the
caller as a FetchError.
"""

from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from page_agent.config.settings import FetchSettings
from page_agent.core.exceptions import FetchError
from page_agent.utils.logging import get_logger
from page_agent.utils.metrics import FETCH_FAILURES, FETCH_LATENCY_MS, PAGES_FETCHED, Metrics

logger = get_logger(__name__)


@dataclass
class FetchedPage:
    """Markup retrieved from a URL."""

    url: str  # Final URL after redirects
    status_code: int
    html: str
    content_type: str = ""


class PageFetcher:
    """
    Fetches pages over HTTP(S) with httpx.

    Example:
        >>> fetcher = PageFetcher(FetchSettings())
        >>> page = await fetcher.fetch("https://example.com/article")
        >>> print(page.status_code, len(page.html))
    """

    ALLOWED_SCHEMES = ("http", "https")

    def __init__(
        self,
        settings: FetchSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        metrics: Metrics | None = None,
    ) -> None:
        """
        Initialize fetcher.

        Args:
            settings: Fetch configuration; defaults when None
            transport: Custom httpx transport (tests use httpx.MockTransport)
            metrics: Optional collector for fetch counts and latency
        """
        self.settings = settings or FetchSettings()
        self.transport = transport
        self.metrics = metrics

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={
                "User-Agent": self.settings.user_agent,
                "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
            },
            timeout=self.settings.timeout_seconds,
            follow_redirects=self.settings.follow_redirects,
            transport=self.transport,
        )

    async def fetch(self, url: str) -> FetchedPage:
        """
        Fetch a page.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchedPage with decoded markup

        Raises:
            FetchError: On invalid URL, transport failure, non-success
                status, or an oversized body
        """
        self._validate_url(url)

        try:
            if self.metrics is not None:
                with self.metrics.timer(FETCH_LATENCY_MS):
                    page = await self._fetch(url)
            else:
                page = await self._fetch(url)
        except FetchError:
            self._record(FETCH_FAILURES)
            raise

        self._record(PAGES_FETCHED)
        logger.info(f"Fetched {page.url} ({page.status_code}, {len(page.html)} chars)")
        return page

    async def _fetch(self, url: str) -> FetchedPage:
        try:
            async with self._client() as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise FetchError(
                            f"Unable to fetch url. Received status {response.status_code}",
                            url=url,
                            status_code=response.status_code,
                        )

                    body = await self._read_limited(response, url)

                    return FetchedPage(
                        url=str(response.url),
                        status_code=response.status_code,
                        html=self._decode(body, response.encoding),
                        content_type=response.headers.get("content-type", ""),
                    )
        except httpx.HTTPError as e:
            logger.warning(f"Fetching {url} failed: {e!r}")
            raise FetchError(f"Unable to fetch url: {e}", url=url) from e

    async def _read_limited(self, response: httpx.Response, url: str) -> bytes:
        chunks: list[bytes] = []
        size = 0
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > self.settings.max_bytes:
                raise FetchError(
                    f"Unable to fetch url. Response exceeds {self.settings.max_bytes} bytes",
                    url=url,
                    status_code=response.status_code,
                )
            chunks.append(chunk)
        return b"".join(chunks)

    def _decode(self, body: bytes, encoding: str | None) -> str:
        try:
            return body.decode(encoding or "utf-8", errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

    def _validate_url(self, url: str) -> None:
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise FetchError(f"Unable to fetch url: {e}", url=url) from e

        if parts.scheme.lower() not in self.ALLOWED_SCHEMES or not parts.netloc:
            raise FetchError(
                "Unable to fetch url. Only absolute http(s) URLs are supported",
                url=url,
            )

    def _record(self, name: str) -> None:
        if self.metrics is not None:
            self.metrics.increment(name)
