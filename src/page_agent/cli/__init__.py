"""
CLI module for Page Agent.

Provides command-line interface using Typer:
- analyze: Summarize a page and list suggested actions
- serve: Run the HTTP API
- tasks: Manage the task board
- config: Configuration management
"""

from page_agent.cli.main import app

__all__ = ["app"]
