"""
Utilities module for Page Agent.

Provides logging setup and in-memory metrics.
"""

from page_agent.utils.logging import get_logger, reset_logging, setup_logging
from page_agent.utils.metrics import Metrics, TimingStats

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
]
