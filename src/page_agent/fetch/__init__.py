"""
Fetch module for Page Agent.

Retrieves page markup for URLs submitted without HTML.
"""

from page_agent.fetch.fetcher import FetchedPage, PageFetcher

__all__ = [
    "FetchedPage",
    "PageFetcher",
]
