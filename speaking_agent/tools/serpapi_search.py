from __future__ import annotations

from typing import Any

import httpx

from speaking_agent.errors import SearchProviderError
from speaking_agent.models.events import CandidateResult

SERPAPI_SEARCH_URL = "https://serpapi.com/search.json"

# Only results indexed within the last year.
TBS_RECENCY = "qdr:y"


def normalize_results(payload: dict[str, Any]) -> list[CandidateResult]:
    """Map SerpAPI ``organic_results`` to candidates, dropping malformed entries."""
    mapped: list[CandidateResult] = []
    for item in payload.get("organic_results", []) or []:
        if not isinstance(item, dict):
            continue
        title = (item.get("title") or "").strip()
        link = (item.get("link") or "").strip()
        if not title or not link:
            continue
        mapped.append(
            CandidateResult(
                title=title,
                snippet=(item.get("snippet") or "").strip(),
                link=link,
            )
        )
    return mapped


class SerpApiSearch:
    """Google web search through SerpAPI."""

    def __init__(self, api_key: str, *, timeout_seconds: float = 30.0):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _params(self, query: str, count: int, *, recency: bool = True) -> dict[str, Any]:
        params: dict[str, Any] = {
            "engine": "google",
            "q": query,
            "num": count,
            "api_key": self.api_key,
            "hl": "en",
            "gl": "us",
        }
        if recency:
            params["tbs"] = TBS_RECENCY
        return params

    async def fetch(self, query: str, count: int, *, recency: bool = True) -> dict[str, Any]:
        """Run one SerpAPI request and return the decoded payload."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(
                    SERPAPI_SEARCH_URL,
                    params=self._params(query, count, recency=recency),
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            raise SearchProviderError(f"SerpAPI request failed: {e}") from e

        if not response.is_success:
            raise SearchProviderError(
                f"SerpAPI error: {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise SearchProviderError(
                "SerpAPI returned invalid JSON", status_code=response.status_code
            ) from e
        return payload if isinstance(payload, dict) else {}

    async def search(self, query: str, count: int = 10) -> list[CandidateResult]:
        payload = await self.fetch(query, count)
        return normalize_results(payload)
