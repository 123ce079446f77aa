"""
Pydantic settings models for Page Agent.

All configuration is defined here with defaults suitable for a single
local instance backed by a SQLite file.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class AnalysisSettings(BaseModel):
    """Bounds for the page analysis heuristics."""

    model_config = {"extra": "forbid"}

    min_content_length: int = Field(
        default=40,
        ge=0,
        le=10000,
        description="Body text shorter than this gets the placeholder summary",
    )
    max_summary_length: int = Field(
        default=320,
        ge=80,
        le=5000,
        description="Maximum summary length in characters",
    )
    max_key_points: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Maximum number of key points",
    )
    key_point_min_length: int = Field(
        default=40,
        ge=1,
        le=1000,
        description="Shortest sentence eligible as a key point",
    )
    key_point_max_length: int = Field(
        default=240,
        ge=20,
        le=2000,
        description="Longest sentence eligible as a key point",
    )
    max_action_items: int = Field(
        default=8,
        ge=0,
        le=50,
        description="Maximum number of action items",
    )
    action_min_length: int = Field(
        default=12,
        ge=1,
        le=500,
        description="Shortest phrase eligible as an action item",
    )
    action_max_length: int = Field(
        default=160,
        ge=20,
        le=2000,
        description="Longest phrase eligible as an action item",
    )

    @model_validator(mode="after")
    def check_ranges(self) -> "AnalysisSettings":
        """Minimum lengths must not exceed their maximums."""
        if self.key_point_min_length > self.key_point_max_length:
            raise ValueError(
                "key_point_min_length must not exceed key_point_max_length")
        if self.action_min_length > self.action_max_length:
            raise ValueError(
                "action_min_length must not exceed action_max_length")
        return self


class FetchSettings(BaseModel):
    """HTTP fetching of pages submitted by URL."""

    model_config = {"extra": "forbid"}

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User agent sent when fetching pages",
    )
    timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Timeout for a single page fetch",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Whether to follow HTTP redirects",
    )
    max_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        le=100 * 1024 * 1024,
        description="Largest response body accepted",
    )


class StorageSettings(BaseModel):
    """SQLite storage configuration."""

    model_config = {"extra": "forbid"}

    database_path: Path = Field(
        default=Path("data/page_agent.db"),
        description="Path to SQLite database file",
    )
    wal_mode: bool = Field(
        default=True,
        description="Enable WAL mode for better concurrent access",
    )
    cache_size_mb: int = Field(
        default=16,
        ge=1,
        le=512,
        description="SQLite cache size in megabytes",
    )
    store_captures: bool = Field(
        default=True,
        description="Persist ingested pages and their insight",
    )

    @field_validator("database_path", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class ServerSettings(BaseModel):
    """HTTP API server configuration."""

    model_config = {"extra": "forbid"}

    host: str = Field(
        default="127.0.0.1",
        description="Interface to bind",
    )
    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port to listen on",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: str) -> str:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    analysis: AnalysisSettings = Field(
        default_factory=AnalysisSettings,
        description="Page analysis heuristics",
    )
    fetch: FetchSettings = Field(
        default_factory=FetchSettings,
        description="Page fetching",
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Database storage settings",
    )
    server: ServerSettings = Field(
        default_factory=ServerSettings,
        description="HTTP API settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
