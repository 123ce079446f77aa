"""
Storage module for Page Agent.

Provides SQLite-based storage with:
- Connection management with WAL mode
- Schema initialization
- Repository pattern for tasks and page captures
"""

from page_agent.storage.database import Database
from page_agent.storage.schema import SchemaManager, SCHEMA_VERSION
from page_agent.storage.repositories import TaskRepository, CaptureRepository
from page_agent.storage.models import (
    TaskRecord,
    TaskStatus,
    TaskPriority,
    CaptureRecord,
)

__all__ = [
    # Database
    "Database",
    # Schema
    "SchemaManager",
    "SCHEMA_VERSION",
    # Repositories
    "TaskRepository",
    "CaptureRepository",
    # Models
    "TaskRecord",
    "TaskStatus",
    "TaskPriority",
    "CaptureRecord",
]
