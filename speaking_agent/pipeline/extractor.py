"""Model-backed event extraction with heuristic fallback."""
from __future__ import annotations

import asyncio
import json
import time
from datetime import date
from typing import Any, Protocol, Sequence

import openai
from loguru import logger
from pydantic import ValidationError

from speaking_agent.errors import ExtractionError
from speaking_agent.llm_client import ProviderConfig, get_client
from speaking_agent.models.events import CandidateResult, ExtractedEvent, ExtractionOptions
from speaking_agent.pipeline.heuristic import heuristic_extract
from speaking_agent.services.logger import log_llm_call

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_TEMPERATURE = 0.2

_DECODER = json.JSONDecoder()


def build_system_prompt(today: date) -> str:
    return " ".join(
        [
            "You are a precise event extractor for a nonprofit speaker about medical missions in Peru, leadership, CSR, and healthcare.",
            "Return STRICT JSON with fields:",
            "event_name, organizer, start_date, end_date, city, state, country, cfp_deadline, contact_url, "
            "pays_speakers (yes/no/unknown), verticals (array), score (0-100), is_future (boolean).",
            f"If dates are present, output them as YYYY-MM-DD. Compute is_future by comparing to TODAY={today.isoformat()}.",
            "If the page is a recap/past edition, set is_future=false unless it clearly points to the upcoming edition with dates.",
            "Boost score for Healthcare, medical associations, leadership/CSR; "
            "extra boost for Texas (Dallas, DFW, Houston, Austin, San Antonio, Fort Worth).",
        ]
    )


def build_user_payload(candidate: CandidateResult, options: ExtractionOptions) -> str:
    return json.dumps(
        {
            "title": candidate.title,
            "snippet": candidate.snippet,
            "url": candidate.link,
            "prioritizeHealthcare": options.prioritize_healthcare,
            "prioritizeTexas": options.prioritize_texas,
        }
    )


def parse_model_output(raw_text: str) -> dict[str, Any]:
    """Pull the trailing JSON object out of a completion that may be wrapped in prose."""
    text = raw_text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()

    parsed: dict[str, Any] | None = None
    last_error: json.JSONDecodeError | None = None
    position = text.find("{")
    while position != -1:
        try:
            obj, end = _DECODER.raw_decode(text, position)
        except json.JSONDecodeError as e:
            last_error = e
            position = text.find("{", position + 1)
            continue
        parsed = obj
        # Skip braces nested inside the object just decoded.
        position = text.find("{", end)

    if parsed is None:
        if last_error is None:
            raise ExtractionError("no JSON object in model output", reason="malformed_json")
        raise ExtractionError(
            f"invalid JSON in model output: {last_error}", reason="malformed_json"
        ) from last_error
    return parsed


def validate_extraction(payload: dict[str, Any]) -> ExtractedEvent:
    try:
        return ExtractedEvent.model_validate(payload)
    except ValidationError as e:
        raise ExtractionError(
            f"model output failed schema validation: {e.error_count()} error(s)",
            reason="invalid_schema",
        ) from e


class ModelExtractor(Protocol):
    name: str

    async def try_extract(
        self, candidate: CandidateResult, options: ExtractionOptions
    ) -> ExtractedEvent:
        """Return validated fields or raise ``ExtractionError``."""
        ...


class ChatCompletionExtractor:
    """Extracts event fields through an OpenAI-compatible chat completion."""

    def __init__(
        self,
        provider: ProviderConfig,
        *,
        client: Any | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.provider = provider
        self.name = provider.name
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self._client = client if client is not None else get_client(provider)

    async def _complete(self, system: str, user: str) -> str:
        completion = await self._client.chat.completions.create(
            model=self.provider.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        )
        choices = getattr(completion, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or ""

    async def try_extract(
        self, candidate: CandidateResult, options: ExtractionOptions
    ) -> ExtractedEvent:
        system = build_system_prompt(date.today())
        user = build_user_payload(candidate, options)
        started = time.monotonic()

        try:
            raw = await asyncio.wait_for(self._complete(system, user), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            self._log(started, "timeout", f"no response within {self.timeout_seconds}s")
            raise ExtractionError("model call timed out", reason="timeout") from e
        except openai.RateLimitError as e:
            self._log(started, "rate_limited", str(e))
            raise ExtractionError("model provider rate limited", reason="rate_limited") from e
        except Exception as e:
            self._log(started, "error", str(e))
            raise ExtractionError(f"model provider error: {e}", reason="provider_error") from e

        self._log(started, "success")
        return validate_extraction(parse_model_output(raw))

    def _log(self, started: float, status: str, error: str | None = None) -> None:
        log_llm_call(
            model=self.provider.model,
            caller=f"extractor:{self.name}",
            duration_ms=int((time.monotonic() - started) * 1000),
            status=status,
            error=error,
        )


class Extractor:
    """Tries each model extractor in order, ending with the heuristic."""

    def __init__(self, model_extractors: Sequence[ModelExtractor] = ()):
        self.model_extractors = tuple(model_extractors)

    @classmethod
    def from_providers(
        cls,
        providers: Sequence[ProviderConfig],
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> "Extractor":
        return cls(
            [
                ChatCompletionExtractor(
                    provider,
                    timeout_seconds=timeout_seconds,
                    temperature=temperature,
                )
                for provider in providers
            ]
        )

    @property
    def heuristic_only(self) -> bool:
        return not self.model_extractors

    async def extract(
        self, candidate: CandidateResult, options: ExtractionOptions
    ) -> ExtractedEvent:
        for model_extractor in self.model_extractors:
            try:
                return await model_extractor.try_extract(candidate, options)
            except ExtractionError as e:
                logger.warning(
                    f"Extraction via {model_extractor.name} failed ({e.reason}) for {candidate.link}; "
                    "falling back"
                )
        return heuristic_extract(candidate, options)
