from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response
from loguru import logger

from speaking_agent.api.deps import get_pipeline, get_search_gateway
from speaking_agent.config import settings
from speaking_agent.errors import SpeakingAgentError
from speaking_agent.models.events import CandidateResult, EventRecord
from speaking_agent.models.schemas import (
    ErrorResponse,
    SearchEventsRequest,
    SearchEventsResponse,
    SearchPreviewItem,
    SearchPreviewResponse,
)
from speaking_agent.pipeline.heuristic import host_of
from speaking_agent.pipeline.ranking import RankingPipeline
from speaking_agent.services.export import EXPORT_FILENAME, records_to_csv
from speaking_agent.tools.serpapi_search import SerpApiSearch, normalize_results

router = APIRouter(prefix="/api", tags=["events"])

DEFAULT_PREVIEW_QUERY = "healthcare leadership conference Texas 2026"
PREVIEW_RESULT_COUNT = 20
NOISE_HOSTS = ("vercel.com", "github.com")
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


async def _run_search(body: Optional[SearchEventsRequest], pipeline: RankingPipeline) -> list[EventRecord]:
    body = body or SearchEventsRequest()
    logger.info(
        "search-events provider={} serpKey={} topics={} maxResults={}",
        settings.llm_provider or "auto",
        "SET" if settings.serpapi_api_key else "MISSING",
        len(body.topics),
        body.max_results or settings.max_candidates,
    )
    return await pipeline.run(body.to_search_request(settings.max_candidates))


def _is_noise(candidate: CandidateResult) -> bool:
    host = host_of(candidate.link)
    if any(host == noise or host.endswith(f".{noise}") for noise in NOISE_HOSTS):
        return True
    return "documentation" in candidate.title.lower()


@router.post("/search-events", response_model=SearchEventsResponse, responses=ERROR_RESPONSES)
async def search_events(
    body: Optional[SearchEventsRequest] = None,
    pipeline: RankingPipeline = Depends(get_pipeline),
):
    """Search, enrich and rank upcoming speaking opportunities."""
    try:
        results = await _run_search(body, pipeline)
    except SpeakingAgentError:
        raise
    except Exception as e:
        logger.exception("search-events error")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})

    return SearchEventsResponse(count=len(results), results=results)


@router.post("/search-events/export", responses=ERROR_RESPONSES)
async def export_search_events(
    body: Optional[SearchEventsRequest] = None,
    pipeline: RankingPipeline = Depends(get_pipeline),
):
    """Run the same search and return the ranked results as CSV."""
    try:
        results = await _run_search(body, pipeline)
    except SpeakingAgentError:
        raise
    except Exception as e:
        logger.exception("search-events export error")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})

    return Response(
        content=records_to_csv(results),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.get("/search-preview", response_model=SearchPreviewResponse, responses=ERROR_RESPONSES)
async def search_preview(
    q: str = Query(default=DEFAULT_PREVIEW_QUERY),
    gateway: SerpApiSearch = Depends(get_search_gateway),
):
    """Raw search results without extraction, minus obvious non-event hosts."""
    payload = await gateway.fetch(q or DEFAULT_PREVIEW_QUERY, PREVIEW_RESULT_COUNT, recency=False)
    events = [
        SearchPreviewItem(title=c.title, link=c.link, snippet=c.snippet)
        for c in normalize_results(payload)
        if not _is_noise(c)
    ]
    return SearchPreviewResponse(count=len(events), events=events)
