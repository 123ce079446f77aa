"""Request models for the HTTP API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from page_agent.storage.models import TaskPriority, TaskStatus


def _strip_title(title: Optional[str]) -> Optional[str]:
    if title is None:
        return None
    title = title.strip()
    if not title:
        raise ValueError("Task title must not be blank.")
    return title


class IngestRequest(BaseModel):
    """A page to analyze, given by URL, by markup, or both."""

    model_config = ConfigDict(extra="forbid")

    url: Optional[str] = Field(None, max_length=2048, description="Page URL")
    html: Optional[str] = Field(None, description="Page markup")

    @model_validator(mode="after")
    def require_source(self) -> "IngestRequest":
        """At least one of url and html must be non-empty."""
        if not self.url and not self.html:
            raise ValueError("Provide a url or page html to analyze.")
        return self


class TaskCreate(BaseModel):
    """New task fields."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    status: TaskStatus = Field(TaskStatus.BACKLOG, description="Initial status")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    page_url: Optional[str] = Field(None, max_length=2048, description="Page the task came from")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_title(v)


class TaskUpdate(BaseModel):
    """Partial task update; only the fields supplied are changed."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Task to update")
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _strip_title(v)

    def changes(self) -> dict:
        """Fields explicitly set in the request, without the id.

        Notes may be cleared with null; the other fields ignore it.
        """
        changes = self.model_dump(exclude={"id"}, exclude_unset=True)
        return {
            name: value for name, value in changes.items()
            if value is not None or name == "notes"
        }
