"""Task board API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from page_agent.api.dependencies import get_metrics, get_task_repository
from page_agent.api.schemas import TaskCreate, TaskUpdate
from page_agent.core.exceptions import StorageError, TaskNotFoundError
from page_agent.storage import TaskRecord, TaskRepository
from page_agent.utils.logging import get_logger
from page_agent.utils.metrics import TASKS_CREATED, TASKS_DELETED, TASKS_UPDATED, Metrics

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = get_logger(__name__)


def _storage_failure(tag: str, error: StorageError, message: str) -> JSONResponse:
    logger.error(f"[{tag}] {error}")
    return JSONResponse(status_code=500, content={"error": message})


@router.get("")
def list_tasks(tasks: TaskRepository = Depends(get_task_repository)):
    """List all tasks, newest first."""
    try:
        return {"tasks": [task.to_dict() for task in tasks.list_all()]}
    except StorageError as e:
        return _storage_failure("tasks#get", e, "Unable to load tasks.")


@router.post("", status_code=201)
def create_task(
    request: TaskCreate,
    tasks: TaskRepository = Depends(get_task_repository),
    metrics: Metrics = Depends(get_metrics),
):
    """Create a task."""
    try:
        task = tasks.create(TaskRecord(
            title=request.title,
            status=request.status,
            priority=request.priority,
            page_url=request.page_url,
            notes=request.notes,
        ))
    except StorageError as e:
        return _storage_failure("tasks#post", e, "Unable to create task.")

    metrics.increment(TASKS_CREATED)
    return {"task": task.to_dict()}


@router.patch("")
def update_task(
    request: TaskUpdate,
    tasks: TaskRepository = Depends(get_task_repository),
    metrics: Metrics = Depends(get_metrics),
):
    """
    Update a task in place.

    Only the fields present in the body change. An unknown id is a 404.
    """
    try:
        task = tasks.update(request.id, **request.changes())
    except TaskNotFoundError:
        raise
    except StorageError as e:
        return _storage_failure("tasks#patch", e, "Unable to update task.")

    metrics.increment(TASKS_UPDATED)
    return {"task": task.to_dict()}


@router.delete("", status_code=204)
def delete_task(
    id: Optional[str] = Query(None, description="Task to delete"),
    tasks: TaskRepository = Depends(get_task_repository),
    metrics: Metrics = Depends(get_metrics),
):
    """Delete a task by the ``id`` query parameter."""
    if not id:
        return JSONResponse(status_code=400, content={"error": "Task id is required."})

    try:
        tasks.delete(id)
    except TaskNotFoundError:
        raise
    except StorageError as e:
        return _storage_failure("tasks#delete", e, "Unable to delete task.")

    metrics.increment(TASKS_DELETED)
    return Response(status_code=204)
