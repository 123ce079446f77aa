"""
FastAPI application factory.

Every app owns its services: settings, metrics, database, repositories,
analyzer and fetcher are created in ``create_app`` and kept on
``app.state``. The database is closed when the app shuts down.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from page_agent import __version__
from page_agent.analysis import PageAnalyzer
from page_agent.api.routers import ingest, tasks
from page_agent.config import Settings
from page_agent.core.exceptions import FetchError, TaskNotFoundError
from page_agent.fetch import PageFetcher
from page_agent.storage import CaptureRepository, Database, TaskRepository
from page_agent.utils.logging import get_logger
from page_agent.utils.metrics import Metrics

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    logger.info("Page Agent API started")

    yield

    logger.info("Shutting down Page Agent API...")
    app.state.database.close()


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        message = str(error.get("msg", "Invalid request"))
        # Messages from model validators carry a "Value error, " prefix
        message = message.removeprefix("Value error, ")
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        messages.append(f"{'.'.join(location)}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request."


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _format_validation_error(exc)})


async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    logger.warning(f"[ingest] {exc}")
    return JSONResponse(status_code=422, content={"error": exc.message})


async def task_not_found_handler(request: Request, exc: TaskNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": exc.message})


def create_app(
    settings: Settings | None = None,
    fetcher: PageFetcher | None = None,
) -> FastAPI:
    """
    Build the HTTP API.

    Args:
        settings: Application settings; defaults when None
        fetcher: Page fetcher; one is built from settings when None

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()
    metrics = Metrics()
    database = Database.create(settings)

    app = FastAPI(
        title="Page Agent",
        description="Turns web pages into summaries, key points and action items",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.database = database
    app.state.tasks = TaskRepository(database)
    app.state.captures = CaptureRepository(database)
    app.state.analyzer = PageAnalyzer(settings=settings.analysis, metrics=metrics)
    app.state.fetcher = fetcher or PageFetcher(settings.fetch, metrics=metrics)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(FetchError, fetch_error_handler)
    app.add_exception_handler(TaskNotFoundError, task_not_found_handler)

    app.include_router(ingest.router)
    app.include_router(tasks.router)

    @app.get("/api/health")
    async def health_check() -> dict:
        """Health check endpoint for monitoring."""
        return {"status": "ok"}

    @app.get("/api/metrics")
    async def metrics_snapshot() -> dict:
        """Counters and timings recorded by this app."""
        return app.state.metrics.snapshot()

    return app
