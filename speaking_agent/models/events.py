from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PaysSpeakers = Literal["yes", "no", "unknown"]

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DEFAULT_MAX_RESULTS_PER_QUERY = 8


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    prioritize_healthcare: bool = True
    prioritize_texas: bool = True


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """One search invocation. Empty ``topics`` selects the default topic set."""

    topics: tuple[str, ...] = ()
    prioritize_healthcare: bool = True
    prioritize_texas: bool = True
    max_results_per_query: int = DEFAULT_MAX_RESULTS_PER_QUERY
    date_from: str | None = None
    date_to: str | None = None

    def __post_init__(self) -> None:
        if self.max_results_per_query < 1:
            raise ValueError("max_results_per_query must be positive")

    @property
    def options(self) -> ExtractionOptions:
        return ExtractionOptions(
            prioritize_healthcare=self.prioritize_healthcare,
            prioritize_texas=self.prioritize_texas,
        )


@dataclass(frozen=True, slots=True)
class CandidateResult:
    """A raw search hit before enrichment."""

    title: str
    snippet: str
    link: str


def normalize_iso_date(value: Any) -> Optional[str]:
    """Return ``value`` when it is a real ``YYYY-MM-DD`` date, else None."""
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not ISO_DATE_RE.match(cleaned):
        return None
    try:
        date.fromisoformat(cleaned)
    except ValueError:
        return None
    return cleaned


class ExtractedEvent(BaseModel):
    """Fields extracted for one candidate, by the model or the heuristic."""

    model_config = ConfigDict(extra="ignore")

    event_name: Optional[str] = None
    organizer: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    cfp_deadline: Optional[str] = None
    contact_url: Optional[str] = None
    pays_speakers: PaysSpeakers = "unknown"
    verticals: list[str] = Field(default_factory=list)
    score: float = Field(ge=0, le=100, strict=True)
    is_future: Optional[bool] = None

    @field_validator("start_date", "end_date", "cfp_deadline", mode="before")
    @classmethod
    def _iso_dates_only(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return normalize_iso_date(value)

    @field_validator(
        "event_name", "organizer", "city", "state", "country", "contact_url", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("pays_speakers", mode="before")
    @classmethod
    def _normalize_pays(cls, value: Any) -> Any:
        if value is None:
            return "unknown"
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("verticals", mode="before")
    @classmethod
    def _default_verticals(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def has_dates(self) -> bool:
        return bool(self.start_date or self.end_date or self.cfp_deadline)


class EventRecord(BaseModel):
    """Enriched, scored event returned to callers."""

    event_name: str
    organizer: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    cfp_deadline: Optional[str] = None
    url: str
    contact_url: Optional[str] = None
    pays_speakers: PaysSpeakers = "unknown"
    verticals: list[str] = Field(default_factory=list)
    source: str = "serp"
    # Not re-clamped after location boosts.
    score: float = 0

    @classmethod
    def from_extraction(cls, candidate: CandidateResult, extracted: ExtractedEvent) -> "EventRecord":
        return cls(
            event_name=extracted.event_name or candidate.title,
            organizer=extracted.organizer,
            start_date=extracted.start_date,
            end_date=extracted.end_date,
            city=extracted.city,
            state=extracted.state,
            country=extracted.country,
            cfp_deadline=extracted.cfp_deadline,
            url=candidate.link,
            contact_url=extracted.contact_url,
            pays_speakers=extracted.pays_speakers,
            verticals=list(extracted.verticals),
            source="serp",
            score=extracted.score,
        )

    @property
    def location_text(self) -> str:
        return " ".join(part for part in (self.city, self.state, self.country) if part)
