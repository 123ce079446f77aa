"""Accessors for the per-app services kept on ``app.state``."""

from fastapi import Request

from page_agent.analysis import PageAnalyzer
from page_agent.config import Settings
from page_agent.fetch import PageFetcher
from page_agent.storage import CaptureRepository, TaskRepository
from page_agent.utils.metrics import Metrics


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics(request: Request) -> Metrics:
    return request.app.state.metrics


def get_analyzer(request: Request) -> PageAnalyzer:
    return request.app.state.analyzer


def get_fetcher(request: Request) -> PageFetcher:
    return request.app.state.fetcher


def get_task_repository(request: Request) -> TaskRepository:
    return request.app.state.tasks


def get_capture_repository(request: Request) -> CaptureRepository:
    return request.app.state.captures
