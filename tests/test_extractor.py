from __future__ import annotations

import asyncio
import json
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from speaking_agent.errors import ExtractionError
from speaking_agent.llm_client import ProviderConfig
from speaking_agent.models.events import CandidateResult, ExtractedEvent, ExtractionOptions
from speaking_agent.pipeline.extractor import (
    ChatCompletionExtractor,
    Extractor,
    build_system_prompt,
    build_user_payload,
    parse_model_output,
    validate_extraction,
)
from speaking_agent.pipeline.heuristic import heuristic_extract

CANDIDATE = CandidateResult(
    title="Texas Healthcare Leadership Conference - Call for Speakers",
    snippet="Join hospital executives in Houston. Submit a proposal for our keynote track.",
    link="https://www.tha.org/conference",
)
OPTIONS = ExtractionOptions(prioritize_healthcare=True, prioritize_texas=True)
PROVIDER = ProviderConfig(name="openai", api_key="sk-test", model="gpt-4o-mini")


def completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def fake_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    return client


class TestParseModelOutput:
    def test_extracts_object_wrapped_in_prose(self):
        raw = 'Sure! Here is what I found:\n{"event_name": "THA Annual", "score": 72}\nLet me know.'
        assert parse_model_output(raw) == {"event_name": "THA Annual", "score": 72}

    def test_strips_markdown_fence(self):
        raw = '```json\n{"score": 40, "verticals": ["Healthcare"]}\n```'
        assert parse_model_output(raw)["verticals"] == ["Healthcare"]

    def test_trailing_prose_with_braces_is_ignored(self):
        raw = '{"score": 50, "event_name": "A"}\nNote: fields in {braces} were guessed.'
        assert parse_model_output(raw) == {"score": 50, "event_name": "A"}

    def test_takes_the_trailing_object(self):
        raw = 'Draft: {"score": 10}\nFinal answer: {"score": 70, "location": {"city": "Austin"}}'
        assert parse_model_output(raw) == {"score": 70, "location": {"city": "Austin"}}

    def test_plain_prose_is_malformed(self):
        with pytest.raises(ExtractionError) as exc_info:
            parse_model_output("I could not find any event details on this page.")
        assert exc_info.value.reason == "malformed_json"

    def test_broken_json_is_malformed(self):
        with pytest.raises(ExtractionError) as exc_info:
            parse_model_output('{"score": 40,, }')
        assert exc_info.value.reason == "malformed_json"


class TestValidateExtraction:
    def test_score_out_of_range_fails(self):
        with pytest.raises(ExtractionError) as exc_info:
            validate_extraction({"score": 150})
        assert exc_info.value.reason == "invalid_schema"

    @pytest.mark.parametrize("score", ["85", True, None])
    def test_non_numeric_score_fails(self, score):
        with pytest.raises(ExtractionError) as exc_info:
            validate_extraction({"score": score})
        assert exc_info.value.reason == "invalid_schema"

    def test_integer_score_is_accepted(self):
        assert validate_extraction({"score": 85}).score == 85

    def test_missing_score_fails(self):
        with pytest.raises(ExtractionError):
            validate_extraction({"event_name": "No score"})

    def test_unknown_pays_value_fails(self):
        with pytest.raises(ExtractionError):
            validate_extraction({"score": 10, "pays_speakers": "sometimes"})

    def test_normalizes_dates_and_defaults(self):
        fields = validate_extraction(
            {
                "score": 55,
                "start_date": "March 3, 2027",
                "end_date": "2027-03-05",
                "pays_speakers": "Yes",
                "verticals": None,
                "city": "",
            }
        )
        assert fields.start_date is None
        assert fields.end_date == "2027-03-05"
        assert fields.pays_speakers == "yes"
        assert fields.verticals == []
        assert fields.city is None


def test_prompt_is_grounded_on_today():
    prompt = build_system_prompt(date(2026, 10, 19))
    assert "TODAY=2026-10-19" in prompt
    assert "STRICT JSON" in prompt


def test_user_payload_carries_candidate_and_options():
    payload = json.loads(build_user_payload(CANDIDATE, OPTIONS))
    assert payload == {
        "title": CANDIDATE.title,
        "snippet": CANDIDATE.snippet,
        "url": CANDIDATE.link,
        "prioritizeHealthcare": True,
        "prioritizeTexas": True,
    }


@pytest.mark.asyncio
async def test_chat_extractor_returns_validated_fields():
    body = json.dumps(
        {
            "event_name": "THA Annual Conference",
            "start_date": "2027-02-10",
            "city": "Houston",
            "state": "TX",
            "score": 88,
            "is_future": True,
        }
    )
    client = fake_client(return_value=completion(f"Here you go: {body}"))
    extractor = ChatCompletionExtractor(PROVIDER, client=client, timeout_seconds=1)

    fields = await extractor.try_extract(CANDIDATE, OPTIONS)

    assert fields.event_name == "THA Annual Conference"
    assert fields.score == 88
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.2
    assert kwargs["messages"][0]["role"] == "system"
    assert json.loads(kwargs["messages"][1]["content"])["url"] == CANDIDATE.link


@pytest.mark.asyncio
async def test_malformed_model_output_falls_back_to_heuristic():
    client = fake_client(return_value=completion("Sorry, this page has no event details."))
    extractor = Extractor([ChatCompletionExtractor(PROVIDER, client=client)])

    result = await extractor.extract(CANDIDATE, OPTIONS)

    assert result == heuristic_extract(CANDIDATE, OPTIONS)


@pytest.mark.asyncio
async def test_empty_completion_falls_back_to_heuristic():
    client = fake_client(return_value=completion(None))
    extractor = Extractor([ChatCompletionExtractor(PROVIDER, client=client)])

    assert await extractor.extract(CANDIDATE, OPTIONS) == heuristic_extract(CANDIDATE, OPTIONS)


@pytest.mark.asyncio
async def test_timeout_is_an_extraction_error():
    async def slow(**kwargs):
        await asyncio.sleep(1)
        return completion('{"score": 99}')

    client = fake_client(side_effect=slow)
    extractor = ChatCompletionExtractor(PROVIDER, client=client, timeout_seconds=0.01)

    with pytest.raises(ExtractionError) as exc_info:
        await extractor.try_extract(CANDIDATE, OPTIONS)
    assert exc_info.value.reason == "timeout"

    fallback = await Extractor([extractor]).extract(CANDIDATE, OPTIONS)
    assert fallback == heuristic_extract(CANDIDATE, OPTIONS)


@pytest.mark.asyncio
async def test_rate_limit_is_reported_distinctly():
    response = httpx.Response(429, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    error = openai.RateLimitError("rate limited", response=response, body=None)
    extractor = ChatCompletionExtractor(PROVIDER, client=fake_client(side_effect=error))

    with pytest.raises(ExtractionError) as exc_info:
        await extractor.try_extract(CANDIDATE, OPTIONS)
    assert exc_info.value.reason == "rate_limited"


@pytest.mark.asyncio
async def test_provider_error_is_not_retried():
    client = fake_client(side_effect=RuntimeError("connection reset"))
    extractor = Extractor([ChatCompletionExtractor(PROVIDER, client=client)])

    result = await extractor.extract(CANDIDATE, OPTIONS)

    assert result == heuristic_extract(CANDIDATE, OPTIONS)
    assert client.chat.completions.create.await_count == 1


@pytest.mark.asyncio
async def test_extractor_tries_providers_in_order():
    failing = ChatCompletionExtractor(PROVIDER, client=fake_client(side_effect=RuntimeError("down")))
    backup_provider = ProviderConfig(
        name="openrouter", api_key="sk-or", model="deepseek/deepseek-r1:free", base_url="https://openrouter.ai/api/v1"
    )
    backup = ChatCompletionExtractor(
        backup_provider, client=fake_client(return_value=completion('{"score": 64, "event_name": "Backup"}'))
    )

    result = await Extractor([failing, backup]).extract(CANDIDATE, OPTIONS)

    assert isinstance(result, ExtractedEvent)
    assert result.event_name == "Backup"
    assert result.score == 64


def test_extractor_without_models_is_heuristic_only():
    assert Extractor().heuristic_only
    assert not Extractor([ChatCompletionExtractor(PROVIDER, client=MagicMock())]).heuristic_only
