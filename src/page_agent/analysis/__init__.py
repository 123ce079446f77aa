"""
Analysis module for Page Agent.

Turns extracted page text into an insight:
- Summary and key points
- Action items
- Assembly of the final AgentInsight
"""

from page_agent.analysis.summarizer import PLACEHOLDER_SUMMARY, Summarizer, Summary
from page_agent.analysis.actions import ActionExtractor
from page_agent.analysis.insight import (
    AgentInsight,
    InsightMetadata,
    PageAnalyzer,
    analyze_page,
)

__all__ = [
    # Summarization
    "Summarizer",
    "Summary",
    "PLACEHOLDER_SUMMARY",
    # Actions
    "ActionExtractor",
    # Insight
    "AgentInsight",
    "InsightMetadata",
    "PageAnalyzer",
    "analyze_page",
]
