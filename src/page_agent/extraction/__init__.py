"""
Extraction module for Page Agent.

Provides content extraction and parsing including:
- HTML parsing and flattening
- Main content detection
- Metadata extraction
"""

from page_agent.extraction.page_parser import PageParser, collapse_whitespace
from page_agent.extraction.content_extractor import (
    ContentExtractor,
    ElementSizes,
    MainContentDetector,
)
from page_agent.extraction.metadata_extractor import (
    MetadataExtractor,
    PageMetadata,
)

__all__ = [
    # Page parsing
    "PageParser",
    "collapse_whitespace",
    # Content extraction
    "ContentExtractor",
    "ElementSizes",
    "MainContentDetector",
    # Metadata
    "MetadataExtractor",
    "PageMetadata",
]
