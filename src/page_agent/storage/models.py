"""
Data models for storage layer.

Defines dataclasses representing database records with
type-safe access and serialization.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Progress of a tracked task."""

    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @property
    def label(self) -> str:
        """Human-readable label."""
        return self.value.replace("_", " ").title()


class TaskPriority(str, Enum):
    """Priority of a tracked task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass
class TaskRecord:
    """
    Record of a tracked task.

    The id and created_at are assigned by the repository on insert.
    """

    title: str
    id: str | None = None
    status: TaskStatus = TaskStatus.BACKLOG
    priority: TaskPriority = TaskPriority.MEDIUM
    page_url: str | None = None
    notes: str | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served by the API."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "page_url": self.page_url,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: dict) -> "TaskRecord":
        """Create from database row."""
        return cls(
            id=row["id"],
            title=row["title"],
            status=TaskStatus(row.get("status") or TaskStatus.BACKLOG.value),
            priority=TaskPriority(row.get("priority") or TaskPriority.MEDIUM.value),
            page_url=row.get("page_url"),
            notes=row.get("notes"),
            created_at=_parse_datetime(row.get("created_at")),
        )


@dataclass
class CaptureRecord:
    """
    Record of an ingested page.

    Stores the markup that was analyzed and the insight produced.
    """

    html: str
    insight: dict = field(default_factory=dict)
    url: str | None = None
    id: int | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict) -> "CaptureRecord":
        """Create from database row."""
        return cls(
            id=row.get("id"),
            url=row.get("url"),
            html=row.get("html", ""),
            insight=json.loads(row.get("insight") or "{}"),
            created_at=_parse_datetime(row.get("created_at")),
        )


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
