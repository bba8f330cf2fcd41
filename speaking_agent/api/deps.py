from __future__ import annotations

from functools import lru_cache

from speaking_agent.config import settings
from speaking_agent.errors import ConfigurationError
from speaking_agent.pipeline.ranking import RankingPipeline, build_pipeline
from speaking_agent.tools.serpapi_search import SerpApiSearch


@lru_cache(maxsize=1)
def get_pipeline() -> RankingPipeline:
    """Build the ranking pipeline once per process."""
    return build_pipeline(settings)


def get_search_gateway() -> SerpApiSearch:
    if not settings.serpapi_api_key:
        raise ConfigurationError("SERPAPI_API_KEY is missing in this environment")
    return SerpApiSearch(settings.serpapi_api_key, timeout_seconds=settings.serpapi_timeout_seconds)
