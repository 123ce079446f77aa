"""
Exceptions raised by Page Agent.

Page analysis itself never raises; these errors come from the layers
around it. The API maps FetchError to 422 and TaskNotFoundError to
404; the CLI prints the message and exits with status 1.

    PageAgentError
    ├── ConfigurationError
    ├── FetchError
    ├── StorageError
    │   ├── DatabaseError
    │   └── TaskNotFoundError
    └── ValidationError
"""

from typing import Any

MAX_QUERY_IN_DETAILS = 200


class PageAgentError(Exception):
    """
    Root of the Page Agent exception tree.

    ``message`` is safe to show to a client; ``details`` holds extra
    context for logs (paths, URLs, SQL).
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} ({context})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


class ConfigurationError(PageAgentError):
    """A configuration file or override could not be turned into Settings."""


class FetchError(PageAgentError):
    """
    A page could not be retrieved.

    status_code is set when the server answered with a non-success
    status and is None for invalid URLs or transport failures.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        context = dict(details) if details else {}
        if url:
            context["url"] = url
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, context)
        self.url = url
        self.status_code = status_code


class StorageError(PageAgentError):
    """Persistence failed."""


class DatabaseError(StorageError):
    """An SQLite operation failed; details carry the statement, shortened."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        context = dict(details) if details else {}
        if query:
            if len(query) > MAX_QUERY_IN_DETAILS:
                context["query"] = f"{query[:MAX_QUERY_IN_DETAILS]}..."
            else:
                context["query"] = query
        super().__init__(message, context)
        self.query = query


class TaskNotFoundError(StorageError):
    """No stored task has the given id."""

    def __init__(self, task_id: str) -> None:
        super().__init__("Task not found", details={"id": task_id})
        self.task_id = task_id


class ValidationError(PageAgentError):
    """
    Inbound input was rejected.

    Raised for CLI arguments that do not name a known status or
    priority, and by the task repository for blank titles. HTTP bodies
    are validated by pydantic before they reach the routes.
    """
