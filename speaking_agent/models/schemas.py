from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from speaking_agent.models.events import EventRecord, SearchRequest, normalize_iso_date


# --- Requests ---


class SearchEventsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    topics: list[str] = Field(default_factory=list)
    prioritize_healthcare: bool = Field(default=True, alias="prioritizeHealthcare")
    prioritize_texas: bool = Field(default=True, alias="prioritizeTexas")
    max_results: Optional[int] = Field(default=None, alias="maxResults", ge=1, le=100)
    date_from: Optional[str] = Field(default=None, alias="dateFrom")
    date_to: Optional[str] = Field(default=None, alias="dateTo")

    @field_validator("date_from", "date_to")
    @classmethod
    def _iso_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        normalized = normalize_iso_date(value)
        if normalized is None:
            raise ValueError("dates must be YYYY-MM-DD")
        return normalized

    def to_search_request(self, default_max_results: int) -> SearchRequest:
        return SearchRequest(
            topics=tuple(self.topics),
            prioritize_healthcare=self.prioritize_healthcare,
            prioritize_texas=self.prioritize_texas,
            max_results_per_query=self.max_results or default_max_results,
            date_from=self.date_from,
            date_to=self.date_to,
        )


# --- Responses ---


class SearchEventsResponse(BaseModel):
    count: int
    results: list[EventRecord]


class SearchPreviewItem(BaseModel):
    title: str
    link: str
    snippet: str


class SearchPreviewResponse(BaseModel):
    ok: bool = True
    count: int
    events: list[SearchPreviewItem]


class ErrorResponse(BaseModel):
    error: str
