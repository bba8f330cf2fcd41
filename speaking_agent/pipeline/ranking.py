from __future__ import annotations

import asyncio
from datetime import date
from typing import Awaitable, Callable, Protocol, Sequence, TypeVar

from loguru import logger

from speaking_agent.config import Settings, settings
from speaking_agent.errors import ConfigurationError
from speaking_agent.llm_client import resolve_providers
from speaking_agent.models.events import CandidateResult, EventRecord, SearchRequest
from speaking_agent.pipeline.extractor import Extractor
from speaking_agent.pipeline.past_filter import is_upcoming, looks_past, within_window
from speaking_agent.pipeline.queries import build_queries
from speaking_agent.pipeline.scoring import apply_location_boost
from speaking_agent.services.logger import log_event
from speaking_agent.tools.serpapi_search import SerpApiSearch

MAX_QUERY_FANOUT = 8
DEFAULT_RESULT_CAP = 50

T = TypeVar("T")
R = TypeVar("R")


class SearchGateway(Protocol):
    async def search(self, query: str, count: int = 10) -> list[CandidateResult]:
        ...


async def bounded_map(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    *,
    max_parallel: int,
) -> list[R]:
    """Await ``func`` over ``items`` with at most ``max_parallel`` in flight.

    Results keep the order of ``items``. With ``max_parallel <= 1`` calls run
    strictly one after another and the first exception stops the loop. In
    parallel mode the first exception cancels every call still pending.
    """
    if max_parallel <= 1:
        return [await func(item) for item in items]

    semaphore = asyncio.Semaphore(max_parallel)

    async def run_one(item: T) -> R:
        async with semaphore:
            return await func(item)

    tasks = [asyncio.ensure_future(run_one(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def dedupe_candidates(batches: Sequence[Sequence[CandidateResult]]) -> list[CandidateResult]:
    """Merge result batches by exact link, first occurrence wins."""
    seen: set[str] = set()
    merged: list[CandidateResult] = []
    for batch in batches:
        for candidate in batch:
            if candidate.link in seen:
                continue
            seen.add(candidate.link)
            merged.append(candidate)
    return merged


class RankingPipeline:
    """Build queries, search, filter, extract, boost and rank event leads."""

    def __init__(
        self,
        search_gateway: SearchGateway,
        extractor: Extractor,
        *,
        max_queries: int = 2,
        result_cap: int = DEFAULT_RESULT_CAP,
        max_parallel_search: int = 1,
        max_parallel_extract: int = 1,
        clock: Callable[[], date] = date.today,
    ):
        self.search_gateway = search_gateway
        self.extractor = extractor
        self.max_queries = min(max(max_queries, 1), MAX_QUERY_FANOUT)
        self.result_cap = max(result_cap, 1)
        self.max_parallel_search = max_parallel_search
        self.max_parallel_extract = max_parallel_extract
        self.clock = clock

    async def run(self, request: SearchRequest) -> list[EventRecord]:
        today = self.clock()
        options = request.options

        queries = build_queries(
            request.topics,
            request.prioritize_healthcare,
            request.prioritize_texas,
        )[: self.max_queries]

        # SearchProviderError propagates and aborts the whole run.
        batches = await bounded_map(
            lambda query: self.search_gateway.search(query, request.max_results_per_query),
            queries,
            max_parallel=self.max_parallel_search,
        )
        candidates = dedupe_candidates(batches)
        fresh = [candidate for candidate in candidates if not looks_past(candidate, today)]

        extracted = await bounded_map(
            lambda candidate: self.extractor.extract(candidate, options),
            fresh,
            max_parallel=self.max_parallel_extract,
        )

        records: list[EventRecord] = []
        for candidate, fields in zip(fresh, extracted):
            if not is_upcoming(fields, today):
                logger.debug(f"Dropping past event {candidate.link}")
                continue
            if not within_window(fields.start_date, request.date_from, request.date_to):
                continue
            record = EventRecord.from_extraction(candidate, fields)
            records.append(apply_location_boost(record, request.prioritize_texas))

        # sorted() is stable, so ties keep dedup order.
        ranked = sorted(records, key=lambda record: record.score, reverse=True)[: self.result_cap]

        log_event(
            event_type="search_events_ranked",
            message="Ranked event candidates",
            queries=len(queries),
            candidates=len(candidates),
            pre_filtered=len(candidates) - len(fresh),
            kept=len(records),
            results=len(ranked),
            heuristic_only=self.extractor.heuristic_only,
        )
        return ranked


def build_pipeline(config: Settings | None = None) -> RankingPipeline:
    """Wire the pipeline from settings; raises ``ConfigurationError`` when unusable."""
    config = config or settings
    if not config.serpapi_api_key:
        raise ConfigurationError("SERPAPI_API_KEY is missing in this environment")

    providers = resolve_providers(config)
    logger.info(
        "Extraction providers: {}",
        ", ".join(f"{p.name}:{p.model}" for p in providers) or "heuristic",
    )

    return RankingPipeline(
        SerpApiSearch(config.serpapi_api_key, timeout_seconds=config.serpapi_timeout_seconds),
        Extractor.from_providers(
            providers,
            timeout_seconds=config.llm_timeout_seconds,
            temperature=config.llm_temperature,
        ),
        max_queries=config.max_queries,
        result_cap=config.result_cap,
        max_parallel_search=config.max_parallel_search,
        max_parallel_extract=config.max_parallel_extract,
    )
