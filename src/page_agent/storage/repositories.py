"""
Repository classes for data access.

Provides typed interfaces for database operations on each entity type.
"""

import json
import uuid
from typing import Any

from page_agent.core.exceptions import TaskNotFoundError, ValidationError
from page_agent.storage.database import Database
from page_agent.storage.models import (
    CaptureRecord,
    TaskPriority,
    TaskRecord,
    TaskStatus,
    utc_now,
)
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)


def _clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Task title must not be blank.")
    return cleaned


class TaskRepository:
    """
    Repository for task records.

    Example:
        >>> repo = TaskRepository(database)
        >>> task = repo.create(TaskRecord(title="Review pricing page"))
        >>> repo.update(task.id, status=TaskStatus.DONE)
    """

    # Columns a caller may change after creation
    UPDATABLE_FIELDS = ("title", "status", "priority", "notes")

    def __init__(self, db: Database) -> None:
        """Initialize repository with database."""
        self.db = db

    def create(self, task: TaskRecord) -> TaskRecord:
        """
        Insert a new task.

        Args:
            task: TaskRecord; id and created_at are assigned here

        Returns:
            The stored task

        Raises:
            ValidationError: If the title is blank
        """
        stored = TaskRecord(
            id=uuid.uuid4().hex,
            title=_clean_title(task.title),
            status=TaskStatus(task.status),
            priority=TaskPriority(task.priority),
            page_url=task.page_url,
            notes=task.notes,
            created_at=utc_now(),
        )

        self.db.insert("tasks", {
            "id": stored.id,
            "title": stored.title,
            "status": stored.status.value,
            "priority": stored.priority.value,
            "page_url": stored.page_url,
            "notes": stored.notes,
            "created_at": stored.created_at.isoformat(),
        })

        logger.info(f"Created task {stored.id}")
        return stored

    def get(self, task_id: str) -> TaskRecord | None:
        """Get task by ID."""
        row = self.db.fetch_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
        return TaskRecord.from_row(row) if row else None

    def list_all(
        self,
        status: TaskStatus | None = None,
        limit: int | None = None,
    ) -> list[TaskRecord]:
        """List tasks, newest first."""
        sql = "SELECT * FROM tasks"
        params: tuple = ()
        if status is not None:
            sql += " WHERE status = ?"
            params = (TaskStatus(status).value,)
        sql += " ORDER BY created_at DESC, rowid DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params += (limit,)

        return [TaskRecord.from_row(row) for row in self.db.fetch_all(sql, params)]

    def update(self, task_id: str, **changes: Any) -> TaskRecord:
        """
        Change some fields of a task.

        Args:
            task_id: Task to update
            **changes: Any of title, status, priority, notes

        Returns:
            The task after the update

        Raises:
            TaskNotFoundError: If no task has this id
            ValidationError: If the new title is blank
            ValueError: If a field is not updatable or a value is invalid
        """
        unknown = set(changes) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        data: dict[str, Any] = {}
        for name, value in changes.items():
            if name == "title":
                value = _clean_title(value)
            elif name == "status":
                value = TaskStatus(value).value
            elif name == "priority":
                value = TaskPriority(value).value
            data[name] = value

        if data:
            affected = self.db.update_by_id("tasks", task_id, data)
            if affected == 0:
                raise TaskNotFoundError(task_id)

        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        logger.info(f"Updated task {task_id} ({', '.join(sorted(data)) or 'no changes'})")
        return task

    def delete(self, task_id: str) -> None:
        """
        Delete a task.

        Raises:
            TaskNotFoundError: If no task has this id
        """
        if self.db.delete_by_id("tasks", task_id) == 0:
            raise TaskNotFoundError(task_id)
        logger.info(f"Deleted task {task_id}")

    def count_by_status(self) -> dict[TaskStatus, int]:
        """Count tasks per status; every status is present."""
        counts = {status: 0 for status in TaskStatus}
        rows = self.db.fetch_all(
            "SELECT status, COUNT(*) AS count FROM tasks GROUP BY status")
        for row in rows:
            counts[TaskStatus(row["status"])] = row["count"]
        return counts


class CaptureRepository:
    """
    Repository for ingested page captures.

    Example:
        >>> repo = CaptureRepository(database)
        >>> capture_id = repo.insert(url, html, insight.to_dict())
    """

    def __init__(self, db: Database) -> None:
        """Initialize repository with database."""
        self.db = db

    def insert(self, url: str | None, html: str, insight: dict) -> int:
        """Store a capture and return its id."""
        capture_id = self.db.insert("page_captures", {
            "url": url,
            "html": html,
            "insight": json.dumps(insight, ensure_ascii=False),
            "created_at": utc_now().isoformat(),
        })
        logger.debug(f"Stored page capture {capture_id} (url={url})")
        return capture_id

    def get(self, capture_id: int) -> CaptureRecord | None:
        """Get capture by ID."""
        row = self.db.fetch_one(
            "SELECT * FROM page_captures WHERE id = ?", (capture_id,))
        return CaptureRecord.from_row(row) if row else None

    def recent(self, limit: int = 20) -> list[CaptureRecord]:
        """Most recent captures first."""
        rows = self.db.fetch_all(
            "SELECT * FROM page_captures ORDER BY id DESC LIMIT ?", (limit,))
        return [CaptureRecord.from_row(row) for row in rows]
