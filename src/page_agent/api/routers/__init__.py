"""API routers."""

from page_agent.api.routers import ingest, tasks

__all__ = ["ingest", "tasks"]
