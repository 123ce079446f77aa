"""
Page Agent - Turns web pages into summaries, key points and action items.

This package extracts the readable content and metadata of a page, builds a
short summary with key points, detects suggested actions, and keeps a small
task board of the actions worth following up.
"""

from page_agent.config import Settings, load_config
from page_agent.utils.logging import setup_logging, get_logger
from page_agent.core.exceptions import PageAgentError
from page_agent.analysis import AgentInsight, PageAnalyzer, analyze_page

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "PageAgentError",
    "AgentInsight",
    "PageAnalyzer",
    "analyze_page",
]
