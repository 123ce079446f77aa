"""
Metadata extraction from web pages.

Extracts title, byline, description, language and heading outline from
markup, plus the domain of the page's source URL. Every field degrades
to "absent" on its own; one unreadable field never hides the others.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag

from page_agent.extraction.page_parser import HEADING_TAGS, PageParser, collapse_whitespace
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PageMetadata:
    """Metadata read from markup and the source URL."""

    title: str | None = None
    byline: str | None = None
    domain: str | None = None
    description: str | None = None
    language: str | None = None
    headings: list[str] = field(default_factory=list)


class MetadataExtractor:
    """
    Extracts metadata from HTML pages.

    Example:
        >>> extractor = MetadataExtractor()
        >>> metadata = extractor.extract(html, "https://example.com/post")
        >>> print(metadata.title, metadata.domain)
    """

    BYLINE_PATTERN = re.compile(r"\b(byline|author|writer)\b", re.I)

    # Longer "author" elements are bios, not bylines
    MAX_BYLINE_LENGTH = 120

    BY_PREFIX_RE = re.compile(r"^by\s+", re.I)

    def __init__(self, parser: PageParser | None = None) -> None:
        self.parser = parser or PageParser()

    def extract(self, markup: str, source_url: str | None = None) -> PageMetadata:
        """
        Extract all metadata.

        Args:
            markup: HTML content
            source_url: URL the markup came from, if known

        Returns:
            PageMetadata; fields that cannot be read are None / empty
        """
        metadata = PageMetadata(domain=self.extract_domain(source_url))

        soup = self.parser.parse(markup)

        for name, extract in (
            ("headings", self._extract_headings),
            ("title", self._extract_title),
            ("byline", self._extract_byline),
            ("description", self._extract_description),
            ("language", self._extract_language),
        ):
            try:
                setattr(metadata, name, extract(soup))
            except Exception as e:
                logger.debug(f"Could not extract {name}: {e}")

        return metadata

    def extract_domain(self, source_url: str | None) -> str | None:
        """Lowercase hostname of the URL, or None."""
        if not source_url or not source_url.strip():
            return None

        url = source_url.strip()
        if "://" not in url and not url.startswith("//"):
            url = f"//{url}"

        try:
            hostname = urlsplit(url).hostname
        except ValueError:
            logger.debug(f"Unparseable source URL: {source_url!r}")
            return None

        return hostname or None

    def _extract_headings(self, soup: BeautifulSoup) -> list[str]:
        headings = []
        for heading in soup.find_all(HEADING_TAGS):
            text = self.parser.get_text(heading)
            if text:
                headings.append(text)
        return headings

    def _extract_title(self, soup: BeautifulSoup) -> str | None:
        title_tag = soup.find("title")
        if title_tag:
            title = self.parser.get_text(title_tag)
            if title:
                return title

        for heading in soup.find_all(HEADING_TAGS):
            text = self.parser.get_text(heading)
            if text:
                return text

        return self._meta_content(soup, property="og:title")

    def _extract_byline(self, soup: BeautifulSoup) -> str | None:
        for element in soup.find_all(self._is_byline_element):
            text = self.parser.get_text(element)
            text = self.BY_PREFIX_RE.sub("", text).strip()
            if text and len(text) <= self.MAX_BYLINE_LENGTH:
                return text

        return (
            self._meta_content(soup, name="author")
            or self._meta_content(soup, property="article:author")
        )

    def _is_byline_element(self, tag: Tag) -> bool:
        if tag.name in ("meta", "link", "script", "style", "html", "body"):
            return False

        rel = tag.get("rel") or []
        if "author" in (rel if isinstance(rel, list) else str(rel).split()):
            return True

        if str(tag.get("itemprop", "")).lower() == "author":
            return True

        classes = tag.get("class") or []
        element_class = " ".join(classes) if isinstance(
            classes, list) else str(classes)
        return bool(
            self.BYLINE_PATTERN.search(element_class)
            or self.BYLINE_PATTERN.search(str(tag.get("id", "")))
        )

    def _extract_description(self, soup: BeautifulSoup) -> str | None:
        return (
            self._meta_content(soup, name="description")
            or self._meta_content(soup, property="og:description")
            or self._meta_content(soup, name="twitter:description")
        )

    def _extract_language(self, soup: BeautifulSoup) -> str | None:
        html_tag = soup.find("html")
        if isinstance(html_tag, Tag) and html_tag.get("lang"):
            return str(html_tag["lang"]).strip() or None

        lang_meta = soup.find("meta", attrs={"http-equiv": "Content-Language"})
        if isinstance(lang_meta, Tag):
            return str(lang_meta.get("content", "")).strip() or None

        return None

    def _meta_content(self, soup: BeautifulSoup, **attrs: str) -> str | None:
        tag = soup.find("meta", attrs=attrs)
        if not isinstance(tag, Tag):
            return None
        content = collapse_whitespace(str(tag.get("content", "")))
        return content or None
