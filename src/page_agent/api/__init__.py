"""
HTTP API for Page Agent.

Provides a FastAPI application with:
- Page ingestion and analysis
- Task board CRUD
- Health and metrics endpoints
"""

from page_agent.api.app import create_app

__all__ = ["create_app"]
