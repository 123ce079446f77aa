"""
Configuration module for Page Agent.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from page_agent.config.settings import (
    Settings,
    AnalysisSettings,
    FetchSettings,
    StorageSettings,
    ServerSettings,
    LoggingSettings,
)
from page_agent.config.loader import load_config, get_default_config_path

__all__ = [
    "Settings",
    "AnalysisSettings",
    "FetchSettings",
    "StorageSettings",
    "ServerSettings",
    "LoggingSettings",
    "load_config",
    "get_default_config_path",
]
