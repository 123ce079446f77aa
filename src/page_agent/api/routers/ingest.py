"""Page ingestion API router."""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from page_agent.analysis import PageAnalyzer
from page_agent.api.dependencies import (
    get_analyzer,
    get_capture_repository,
    get_fetcher,
    get_metrics,
    get_settings,
)
from page_agent.api.schemas import IngestRequest
from page_agent.config import Settings
from page_agent.core.exceptions import FetchError
from page_agent.fetch import PageFetcher
from page_agent.storage import CaptureRepository
from page_agent.utils.logging import get_logger
from page_agent.utils.metrics import CAPTURES_STORED, Metrics

router = APIRouter(prefix="/api", tags=["ingest"])
logger = get_logger(__name__)


@router.post("/ingest")
async def ingest_page(
    request: IngestRequest,
    settings: Settings = Depends(get_settings),
    analyzer: PageAnalyzer = Depends(get_analyzer),
    fetcher: PageFetcher = Depends(get_fetcher),
    captures: CaptureRepository = Depends(get_capture_repository),
    metrics: Metrics = Depends(get_metrics),
):
    """
    Analyze a page and optionally store the capture.

    Markup in the request is analyzed as-is; otherwise the URL is fetched
    first. The URL, when given, also supplies the insight's domain.
    Parsing and the SQLite write run in worker threads so the event loop
    keeps serving other requests.
    """
    try:
        html = request.html or ""
        if not html:
            page = await fetcher.fetch(request.url)
            html = page.html

        insight = await asyncio.to_thread(analyzer.analyze, html, request.url)
        payload = insight.to_dict()

        stored = False
        if settings.storage.store_captures:
            await asyncio.to_thread(captures.insert, request.url, html, payload)
            metrics.increment(CAPTURES_STORED)
            stored = True

        return {
            "insight": payload,
            "meta": {
                "htmlLength": len(html),
                "stored": stored,
            },
        }
    except FetchError:
        raise
    except Exception as e:
        logger.exception(f"[ingest] {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Unexpected error during page ingestion."},
        )
