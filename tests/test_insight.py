"""
Tests for page analysis.

Tests the assembled AgentInsight, its serialized form, and graceful
degradation on empty or malformed markup.
"""

import time

import pytest

from page_agent.analysis import (
    PLACEHOLDER_SUMMARY,
    AgentInsight,
    InsightMetadata,
    PageAnalyzer,
    analyze_page,
)
from page_agent.config import AnalysisSettings
from page_agent.extraction import ContentExtractor
from page_agent.utils.metrics import ANALYSIS_LATENCY_MS, PAGES_ANALYZED, Metrics


class ExplodingExtractor(ContentExtractor):
    """Content extractor that always fails."""

    def extract_body(self, markup: str) -> str:
        raise RuntimeError("boom")


class TestAnalyzePage:
    """Tests for analyze_page."""

    def test_title_headings_and_summary(self):
        """A page with a title, three headings and a body is fully analyzed."""
        html = """
        <html>
        <head><title>Team Handbook</title></head>
        <body>
            <h2>Onboarding</h2>
            <p>New engineers spend their first week pairing with a buddy on real tickets.</p>
            <h2>Releases</h2>
            <p>Releases ship every Tuesday after the automated test suite passes.</p>
            <h2>Support</h2>
            <p>The support rotation changes weekly and is posted in the team calendar.</p>
        </body>
        </html>
        """

        insight = analyze_page(html)

        assert insight.metadata.title == "Team Handbook"
        assert insight.metadata.headings == ("Onboarding", "Releases", "Support")
        assert insight.summary
        assert insight.summary != PLACEHOLDER_SUMMARY

    def test_empty_markup(self):
        """Empty markup degrades to the placeholder insight."""
        insight = analyze_page("")

        assert insight.summary == PLACEHOLDER_SUMMARY
        assert insight.key_points == ()
        assert insight.action_items == ()
        assert insight.metadata.length == 0

    def test_directive_becomes_action(self):
        """A directive sentence is reported as an action item."""
        html = "<p>You should migrate the database before Friday.</p>"

        insight = analyze_page(html)

        assert "You should migrate the database before Friday." in insight.action_items

    def test_no_source_url_means_no_domain(self, sample_html: str):
        """The domain is absent when no URL is supplied."""
        assert analyze_page(sample_html).metadata.domain is None

    def test_domain_from_source_url(self, sample_html: str):
        """The domain is the hostname of the source URL."""
        insight = analyze_page(sample_html, "https://Docs.Example.com/guide")

        assert insight.metadata.domain == "docs.example.com"

    def test_full_page(self, sample_html: str):
        """A realistic article yields every part of the insight."""
        insight = analyze_page(sample_html)

        assert insight.summary.startswith("The platform team is moving every service")
        assert 1 <= len(insight.key_points) <= 5
        assert insight.action_items == (
            "Review the migration guide before the kickoff meeting",
            "Schedule a maintenance window with your team",
            "You should migrate the database before Friday.",
            "Contact the platform team in the usual channel if anything is unclear.",
        )
        assert insight.metadata.byline == "Dana Reyes"
        assert insight.metadata.language == "en"

    def test_length_matches_body(self, sample_html: str):
        """metadata.length is the length of the extracted body text."""
        body = ContentExtractor().extract_body(sample_html)

        assert analyze_page(sample_html).metadata.length == len(body)

    def test_idempotent(self, sample_html: str):
        """Analyzing the same page twice gives equal insights."""
        url = "https://example.com/upgrade"

        assert analyze_page(sample_html, url) == analyze_page(sample_html, url)

    def test_settings_bound_results(self, sample_html: str):
        """Limits from settings are respected."""
        settings = AnalysisSettings(max_key_points=1, max_action_items=2)

        insight = analyze_page(sample_html, settings=settings)

        assert len(insight.key_points) <= 1
        assert len(insight.action_items) == 2

    @pytest.mark.parametrize("markup", [
        "<<<>>>",
        "<div><p>Unclosed",
        "</p></div></body>",
        "<html><body><script>var x = '</p>';",
        "\x00�<p>binary\x07</p>",
        "<" * 1000,
        "<p>" + "nested <b>" * 200 + "deep",
        "plain text without any tags at all",
    ])
    def test_malformed_markup_never_raises(self, markup: str):
        """Arbitrary markup always produces a valid insight."""
        insight = analyze_page(markup)

        assert isinstance(insight, AgentInsight)
        assert isinstance(insight.summary, str) and insight.summary
        assert insight.metadata.length >= 0

    def test_none_markup(self):
        """None is treated as empty markup."""
        assert analyze_page(None).summary == PLACEHOLDER_SUMMARY


class TestLargeMarkup:
    """Analysis time stays proportional to the size of the markup."""

    TIME_LIMIT_SECONDS = 5.0

    def timed_analysis(self, markup: str) -> tuple[AgentInsight, float]:
        started = time.perf_counter()
        insight = analyze_page(markup, "https://example.com/large")
        return insight, time.perf_counter() - started

    def test_deeply_nested_blocks(self):
        """Thousands of nested blocks are analyzed quickly."""
        blocks = 2000
        markup = "".join(
            f"<div><p>Paragraph {k} explains the release plan for the team.</p>"
            for k in range(blocks)
        ) + "</div>" * blocks

        insight, elapsed = self.timed_analysis(markup)

        assert elapsed < self.TIME_LIMIT_SECONDS
        assert insight.summary != PLACEHOLDER_SUMMARY
        assert insight.metadata.length > len("Paragraph 0") * blocks

    def test_many_sibling_blocks(self):
        """A long flat page is analyzed quickly."""
        markup = "<body>" + "".join(
            f"<div><p>Entry {k} records the deployment of one service.</p></div>"
            for k in range(5000)
        ) + "</body>"

        insight, elapsed = self.timed_analysis(markup)

        assert elapsed < self.TIME_LIMIT_SECONDS
        assert insight.summary != PLACEHOLDER_SUMMARY


class TestPageAnalyzer:
    """Tests for PageAnalyzer."""

    def test_failing_stage_degrades(self, sample_html: str):
        """A failing stage contributes its empty result."""
        analyzer = PageAnalyzer(content_extractor=ExplodingExtractor())

        insight = analyzer.analyze(sample_html, "https://example.com")

        assert insight.summary == PLACEHOLDER_SUMMARY
        assert insight.action_items == ()
        assert insight.metadata.length == 0
        # Metadata comes from its own stage
        assert insight.metadata.title == "Planning the Database Upgrade"
        assert insight.metadata.domain == "example.com"

    def test_records_metrics(self, sample_html: str):
        """Analysis counts and latency are recorded when metrics are given."""
        metrics = Metrics()
        analyzer = PageAnalyzer(metrics=metrics)

        analyzer.analyze(sample_html)
        analyzer.analyze("")

        assert metrics.get_counter(PAGES_ANALYZED) == 2
        assert metrics.get_timing(ANALYSIS_LATENCY_MS).count == 2


class TestAgentInsight:
    """Tests for the insight data model."""

    def test_to_dict_wire_keys(self, sample_html: str):
        """The serialized form uses camelCase keys."""
        data = analyze_page(sample_html, "https://example.com/a").to_dict()

        assert set(data) == {"summary", "keyPoints", "actionItems", "metadata"}
        assert isinstance(data["keyPoints"], list)
        assert data["metadata"]["domain"] == "example.com"
        assert isinstance(data["metadata"]["headings"], list)

    def test_immutable(self):
        """Insights cannot be modified after creation."""
        insight = AgentInsight(summary="Done", metadata=InsightMetadata(length=4))

        with pytest.raises(AttributeError):
            insight.summary = "Changed"
