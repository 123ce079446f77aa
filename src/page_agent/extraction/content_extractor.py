"""
Main content extraction and detection.

Identifies the primary readable region of a page and flattens it to
plain text, filtering out navigation, ads, and other non-content
elements.
"""

import math
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from page_agent.extraction.page_parser import TEXT_STRING_TYPES, PageParser
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ElementSizes:
    """Character counts for an element and everything inside it."""

    text_length: int = 0  # Visible text, each string stripped
    markup_length: int = 0  # Approximate serialized HTML
    link_text_length: int = 0  # Visible text inside <a>


class MainContentDetector:
    """
    Detects the main content area of a web page.

    Uses, in order:
    - Semantic HTML5 containers (main, article, role="main")
    - Text density: visible text relative to markup size, weighted by
      text volume and penalised by link density

    Ties go to the element that appears first in the document, so the
    same markup always yields the same container.

    Example:
        >>> detector = MainContentDetector()
        >>> container = detector.find_main_content(soup)
    """

    # Patterns indicating non-content
    NON_CONTENT_PATTERNS = [
        re.compile(
            r"\b(nav|navigation|menu|sidebar|footer|header|comments?|ads?|advert|advertisement|"
            r"social|share|related|popular|trending|cookie|banner|promo|breadcrumbs?)\b",
            re.I,
        ),
    ]

    CANDIDATE_TAGS = ["article", "main", "section", "div", "td"]

    # Minimum text length for a valid content block
    MIN_CONTENT_LENGTH = 100

    # Candidates scoring below this are not considered content
    MIN_SCORE = 0.5

    def find_main_content(self, soup: BeautifulSoup) -> Tag | None:
        """
        Find the main content element in the page.

        Args:
            soup: BeautifulSoup tree with boilerplate already removed

        Returns:
            Tag containing main content, or None
        """
        for candidate in (
            soup.find("main"),
            soup.find("article"),
            soup.find(attrs={"role": "main"}),
        ):
            if isinstance(candidate, Tag) and self._has_substantial_text(candidate):
                return candidate

        return self._find_by_text_density(soup)

    def _has_substantial_text(self, element: Tag) -> bool:
        text = element.get_text(strip=True)
        return len(text) >= self.MIN_CONTENT_LENGTH

    def _find_by_text_density(self, soup: BeautifulSoup) -> Tag | None:
        """Find content element using text density heuristic."""
        sizes = self.measure(soup)
        best_element = None
        best_score = 0.0

        for element in soup.find_all(self.CANDIDATE_TAGS):
            score = self.score(element, sizes)

            # Strict comparison keeps the earliest element on ties
            if score > best_score:
                best_score = score
                best_element = element

        return best_element if best_score >= self.MIN_SCORE else None

    def measure(self, root: Tag) -> dict[int, ElementSizes]:
        """
        Size every element under root in one bottom-up pass.

        Returns:
            ElementSizes keyed by id() of each Tag, valid while the tree
            is left unchanged
        """
        sizes: dict[int, ElementSizes] = {}
        pending: list[tuple[Tag, bool]] = [(root, False)]

        while pending:
            tag, children_done = pending.pop()
            if not children_done:
                pending.append((tag, True))
                pending.extend((child, False) for child in tag.contents if isinstance(child, Tag))
                continue

            total = ElementSizes(markup_length=self._tag_markup_length(tag))
            for child in tag.contents:
                if isinstance(child, Tag):
                    child_sizes = sizes[id(child)]
                    total.text_length += child_sizes.text_length
                    total.markup_length += child_sizes.markup_length
                    total.link_text_length += child_sizes.link_text_length
                else:
                    total.markup_length += len(child)
                    if type(child) in TEXT_STRING_TYPES:
                        total.text_length += len(child.strip())

            if tag.name == "a":
                total.link_text_length = total.text_length
            sizes[id(tag)] = total

        return sizes

    def _tag_markup_length(self, tag: Tag) -> int:
        # Length of <name attr="value"> plus </name>
        attributes = 0
        for key, value in tag.attrs.items():
            if isinstance(value, list):
                value = " ".join(value)
            attributes += len(key) + len(str(value)) + 4
        return 2 * len(tag.name) + 5 + attributes

    def score(self, element: Tag, sizes: dict[int, ElementSizes] | None = None) -> float:
        """
        Calculate content score for an element.

        Higher scores indicate more likely to be main content. Pass the
        result of measure() when scoring many elements of one tree.
        """
        if self._looks_like_chrome(element):
            return 0.0

        if sizes is None:
            sizes = self.measure(element)
        element_sizes = sizes[id(element)]
        text_length = element_sizes.text_length

        if text_length < self.MIN_CONTENT_LENGTH:
            return 0.0

        markup_length = element_sizes.markup_length
        text_density = text_length / markup_length if markup_length else 0.0
        link_density = min(1.0, element_sizes.link_text_length / text_length)

        # Volume grows slowly so a dense paragraph does not beat its article
        volume = math.log10(text_length)

        return text_density * (1.0 - link_density) * volume

    def _looks_like_chrome(self, element: Tag) -> bool:
        element_id = str(element.get("id", ""))
        classes = element.get("class") or []
        element_class = " ".join(classes) if isinstance(
            classes, list) else str(classes)
        role = str(element.get("role", ""))

        for pattern in self.NON_CONTENT_PATTERNS:
            if pattern.search(element_id) or pattern.search(element_class):
                return True

        return role in ("navigation", "banner", "contentinfo", "complementary")


class ContentExtractor:
    """
    Extracts the readable body text of a page.

    The single entry point is ``extract_body(markup) -> str``; the
    detection heuristic lives in MainContentDetector and can be swapped
    without touching anything downstream.

    Example:
        >>> extractor = ContentExtractor()
        >>> body = extractor.extract_body(html)
        >>> print(len(body))
    """

    def __init__(
        self,
        parser: PageParser | None = None,
        detector: MainContentDetector | None = None,
    ) -> None:
        self.parser = parser or PageParser()
        self.detector = detector or MainContentDetector()

    def extract_body(self, markup: str) -> str:
        """
        Extract main content text from markup.

        Args:
            markup: HTML content, or plain text

        Returns:
            Body text with one line per block, whitespace collapsed;
            the whole document's visible text when no main container
            is found; "" for empty input
        """
        return "\n".join(self.extract_lines(markup))

    def extract_lines(self, markup: str) -> list[str]:
        """Same as extract_body, before the lines are joined."""
        soup = self.parser.parse(markup)

        if self.parser.is_plain_text(soup):
            return self.parser.flatten_plain_text(soup.get_text())

        self.parser.strip_boilerplate(soup)

        container = self.detector.find_main_content(soup)
        if container is None:
            logger.debug("No main content container found, using whole document")
            container = soup.find("body") or soup

        lines = self.parser.flatten(container)

        if not lines and container is not soup:
            lines = self.parser.flatten(soup)

        return lines
