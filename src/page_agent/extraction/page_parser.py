"""
HTML parsing and text flattening.

Shared by the content and metadata extractors: builds a BeautifulSoup
tree from untrusted markup, strips boilerplate, and flattens elements
into whitespace-normalized lines of visible text.
"""

import re

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, PageElement, ProcessingInstruction

from page_agent.utils.logging import get_logger

logger = get_logger(__name__)

WHITESPACE_RE = re.compile(r"\s+")

# Marks a block boundary while flattening; stripped from input beforehand
LINE_BREAK = "\ue000"

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

# String types rendered as visible text; comments, doctypes and script bodies are not
TEXT_STRING_TYPES = (NavigableString, CData)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return WHITESPACE_RE.sub(" ", text).strip()


class PageParser:
    """
    Parses markup into a cleaned BeautifulSoup tree and flattens it to text.

    Example:
        >>> parser = PageParser()
        >>> soup = parser.parse(html)
        >>> parser.strip_boilerplate(soup)
        >>> lines = parser.flatten(soup)
    """

    # Tags whose content is never visible text
    REMOVE_TAGS = {
        "script",
        "style",
        "noscript",
        "template",
        "iframe",
        "svg",
        "canvas",
        "video",
        "audio",
        "map",
        "object",
        "embed",
        "title",
        "meta",
        "link",
        "base",
        "select",
        "button",
        "textarea",
    }

    # Page chrome around the readable content
    NAV_TAGS = {"nav", "header", "footer", "aside", "menu", "dialog"}

    # Elements that start a new line when flattened
    BLOCK_TAGS = {
        "address",
        "article",
        "blockquote",
        "dd",
        "details",
        "div",
        "dl",
        "dt",
        "figcaption",
        "figure",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "li",
        "main",
        "ol",
        "p",
        "pre",
        "section",
        "summary",
        "table",
        "td",
        "th",
        "tr",
        "ul",
    }

    HIDDEN_CLASSES = {"sr-only", "visually-hidden", "invisible", "d-none"}

    def parse(self, markup: str) -> BeautifulSoup:
        """
        Parse markup with the lenient stdlib-backed parser.

        Args:
            markup: Raw HTML, or plain text

        Returns:
            BeautifulSoup tree (never raises for string input)
        """
        markup = (markup or "").replace(LINE_BREAK, " ")
        return BeautifulSoup(markup, "html.parser")

    def is_plain_text(self, soup: BeautifulSoup) -> bool:
        """True when the input contained no tags at all."""
        return soup.find(True) is None

    def strip_boilerplate(self, soup: BeautifulSoup) -> None:
        """Remove non-visible content and page chrome in place."""
        for node in soup.find_all(
            string=lambda s: isinstance(
                s, (Comment, Declaration, Doctype, ProcessingInstruction))
        ):
            node.extract()

        for tag in soup.find_all(self.REMOVE_TAGS | self.NAV_TAGS):
            tag.decompose()

        for tag in soup.find_all(self._is_hidden):
            tag.decompose()

    def _is_hidden(self, tag: Tag) -> bool:
        if tag.name in ("html", "body"):
            return False
        if tag.has_attr("hidden"):
            return True
        if str(tag.get("aria-hidden", "")).lower() == "true":
            return True
        style = str(tag.get("style", "")).replace(" ", "").lower()
        if "display:none" in style or "visibility:hidden" in style:
            return True
        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = [classes]
        return any(cls in self.HIDDEN_CLASSES for cls in classes)

    def get_text(self, element: Tag) -> str:
        """Visible text of an element on a single line."""
        return collapse_whitespace(element.get_text(separator=" "))

    def flatten(self, element: Tag | BeautifulSoup) -> list[str]:
        """
        Flatten an element into lines of text.

        Block-level elements and <br> end a line; whitespace inside a line
        collapses to single spaces; blank lines are dropped. The tree is
        walked once and left unchanged.
        """
        chunks: list[str] = []
        # None marks the end of a block element
        pending: list[PageElement | None] = [element]

        while pending:
            node = pending.pop()
            if node is None:
                chunks.append(LINE_BREAK)
            elif isinstance(node, NavigableString):
                if type(node) in TEXT_STRING_TYPES:
                    chunks.append(str(node))
            elif node.name == "br":
                chunks.append(LINE_BREAK)
            else:
                if node.name in self.BLOCK_TAGS:
                    chunks.append(LINE_BREAK)
                    pending.append(None)
                pending.extend(reversed(node.contents))

        lines = (collapse_whitespace(part) for part in "".join(chunks).split(LINE_BREAK))
        return [line for line in lines if line]

    def flatten_plain_text(self, text: str) -> list[str]:
        """Split tag-free input into whitespace-normalized lines."""
        lines = (collapse_whitespace(line) for line in text.splitlines())
        return [line for line in lines if line]
