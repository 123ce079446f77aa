"""
Core module for Page Agent.

Contains the exception hierarchy shared by every layer.
"""

from page_agent.core.exceptions import (
    PageAgentError,
    ConfigurationError,
    FetchError,
    StorageError,
    DatabaseError,
    TaskNotFoundError,
    ValidationError,
)

__all__ = [
    # Base
    "PageAgentError",
    "ConfigurationError",
    # Fetch
    "FetchError",
    # Storage
    "StorageError",
    "DatabaseError",
    "TaskNotFoundError",
    # Validation
    "ValidationError",
]
