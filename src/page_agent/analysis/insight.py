"""
Page insight assembly.

Composes metadata extraction, content extraction, summarization and
action detection into a single AgentInsight. Analysis is pure and
total: it performs no I/O, keeps no state between calls, and never
raises for string input. A stage that fails is logged and contributes
its empty result instead.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from page_agent.analysis.actions import ActionExtractor
from page_agent.analysis.summarizer import PLACEHOLDER_SUMMARY, Summarizer, Summary
from page_agent.config.settings import AnalysisSettings
from page_agent.extraction.content_extractor import ContentExtractor
from page_agent.extraction.metadata_extractor import MetadataExtractor, PageMetadata
from page_agent.utils.logging import get_logger
from page_agent.utils.metrics import ANALYSIS_LATENCY_MS, PAGES_ANALYZED, Metrics

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class InsightMetadata:
    """Descriptive metadata attached to an insight."""

    title: str | None = None
    byline: str | None = None
    domain: str | None = None
    length: int = 0  # Characters of extracted body text
    headings: tuple[str, ...] = ()
    description: str | None = None
    language: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "byline": self.byline,
            "domain": self.domain,
            "length": self.length,
            "headings": list(self.headings),
            "description": self.description,
            "language": self.language,
        }


@dataclass(frozen=True)
class AgentInsight:
    """
    Result of analyzing one page.

    Created fresh per analysis and never mutated afterwards.
    """

    summary: str
    key_points: tuple[str, ...] = ()
    action_items: tuple[str, ...] = ()
    metadata: InsightMetadata = field(default_factory=InsightMetadata)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served by the API."""
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "actionItems": list(self.action_items),
            "metadata": self.metadata.to_dict(),
        }


class PageAnalyzer:
    """
    Turns page markup into an AgentInsight.

    Analyzers hold only configuration and may be shared between
    concurrent requests.

    Example:
        >>> analyzer = PageAnalyzer()
        >>> insight = analyzer.analyze(html, "https://example.com/post")
        >>> print(insight.summary)
        >>> for action in insight.action_items:
        ...     print("-", action)
    """

    def __init__(
        self,
        settings: AnalysisSettings | None = None,
        content_extractor: ContentExtractor | None = None,
        metadata_extractor: MetadataExtractor | None = None,
        summarizer: Summarizer | None = None,
        action_extractor: ActionExtractor | None = None,
        metrics: Metrics | None = None,
    ) -> None:
        """
        Initialize analyzer.

        Args:
            settings: Analysis bounds; defaults when None
            content_extractor: Body text extractor
            metadata_extractor: Metadata extractor
            summarizer: Summary and key point builder
            action_extractor: Action item detector
            metrics: Optional collector for analysis counts and latency
        """
        settings = settings or AnalysisSettings()
        self.content_extractor = content_extractor or ContentExtractor()
        self.metadata_extractor = metadata_extractor or MetadataExtractor()
        self.summarizer = summarizer or Summarizer.from_settings(settings)
        self.action_extractor = action_extractor or ActionExtractor.from_settings(
            settings)
        self.metrics = metrics

    def analyze(self, markup: str | None, source_url: str | None = None) -> AgentInsight:
        """
        Analyze page markup.

        Args:
            markup: Raw HTML (or plain text); None is treated as empty
            source_url: URL the markup came from, used for the domain

        Returns:
            AgentInsight; degraded but valid for empty or malformed input
        """
        if self.metrics is None:
            return self._analyze(markup, source_url)

        with self.metrics.timer(ANALYSIS_LATENCY_MS):
            insight = self._analyze(markup, source_url)
        self.metrics.increment(PAGES_ANALYZED)
        return insight

    def _analyze(self, markup: str | None, source_url: str | None) -> AgentInsight:
        if not isinstance(markup, str):
            markup = "" if markup is None else str(markup)
        if source_url is not None and not isinstance(source_url, str):
            source_url = None

        metadata = self._run_stage(
            "metadata",
            lambda: self.metadata_extractor.extract(markup, source_url),
            lambda: PageMetadata(),
        )
        body = self._run_stage(
            "content",
            lambda: self.content_extractor.extract_body(markup),
            lambda: "",
        )
        summary = self._run_stage(
            "summary",
            lambda: self.summarizer.summarize(body),
            lambda: Summary(summary=PLACEHOLDER_SUMMARY),
        )
        actions = self._run_stage(
            "actions",
            lambda: self.action_extractor.extract(body),
            tuple,
        )

        logger.debug(
            f"Analyzed page (body={len(body)} chars, key_points={len(summary.key_points)}, "
            f"actions={len(actions)}, domain={metadata.domain})"
        )

        return AgentInsight(
            summary=summary.summary,
            key_points=tuple(summary.key_points),
            action_items=tuple(actions),
            metadata=InsightMetadata(
                title=metadata.title,
                byline=metadata.byline,
                domain=metadata.domain,
                length=len(body),
                headings=tuple(metadata.headings),
                description=metadata.description,
                language=metadata.language,
            ),
        )

    def _run_stage(self, name: str, run: Callable[[], T], fallback: Callable[[], T]) -> T:
        try:
            return run()
        except Exception as e:
            logger.warning(f"Page analysis stage '{name}' failed, using empty result: {e!r}")
            return fallback()


def analyze_page(
    markup: str | None,
    source_url: str | None = None,
    settings: AnalysisSettings | None = None,
) -> AgentInsight:
    """
    Analyze page markup with a fresh analyzer.

    Args:
        markup: Raw HTML (or plain text)
        source_url: URL the markup came from
        settings: Analysis bounds; defaults when None

    Returns:
        AgentInsight
    """
    return PageAnalyzer(settings).analyze(markup, source_url)
