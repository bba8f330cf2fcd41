from __future__ import annotations

from datetime import date

import pytest

from speaking_agent.models.events import CandidateResult, ExtractedEvent
from speaking_agent.pipeline.past_filter import is_upcoming, looks_past, within_window

TODAY = date(2026, 10, 19)


def candidate(title: str, snippet: str = "", link: str = "https://example.org/events") -> CandidateResult:
    return CandidateResult(title=title, snippet=snippet, link=link)


def test_current_year_event_is_not_prefiltered():
    assert not looks_past(candidate("2026 Healthcare Leadership Summit"), TODAY)


def test_recap_with_old_year_is_prefiltered():
    assert looks_past(candidate("2022 Conference Recap"), TODAY)


@pytest.mark.parametrize(
    "title",
    ["Summit Highlights", "What happened at the Leadership Forum", "Previous Event gallery"],
)
def test_recap_vocabulary_is_prefiltered(title):
    assert looks_past(candidate(title), TODAY)


@pytest.mark.parametrize(
    "link",
    ["https://example.org/events/2024/summit", "https://example.org/summit-2023-agenda"],
)
def test_old_year_in_url_path_is_prefiltered(link):
    assert looks_past(candidate("Healthcare Summit", link=link), TODAY)


def test_candidate_without_year_is_kept():
    assert not looks_past(candidate("Call for Speakers: Nursing Leadership Congress"), TODAY)


def test_future_year_is_kept():
    assert not looks_past(candidate("AORN Congress 2027", link="https://aorn.org/congress/2027"), TODAY)


def test_record_without_dates_is_always_kept():
    assert is_upcoming(ExtractedEvent(score=10, is_future=False), TODAY)


def test_record_with_past_start_date_is_dropped():
    assert not is_upcoming(ExtractedEvent(score=80, start_date="2020-01-01"), TODAY)


def test_future_flag_keeps_record_with_past_dates():
    assert is_upcoming(ExtractedEvent(score=80, start_date="2020-01-01", is_future=True), TODAY)


def test_open_cfp_deadline_keeps_record():
    fields = ExtractedEvent(score=50, start_date="2026-01-10", cfp_deadline="2026-11-01")
    assert is_upcoming(fields, TODAY)


def test_event_ending_today_is_kept():
    fields = ExtractedEvent(score=50, start_date="2026-10-17", end_date="2026-10-19")
    assert is_upcoming(fields, TODAY)


def test_within_window_checks_inclusive_bounds():
    assert within_window("2027-03-01", "2027-03-01", "2027-03-31")
    assert not within_window("2027-04-01", None, "2027-03-31")
    assert not within_window("2027-02-28", "2027-03-01", None)
    assert within_window(None, "2027-03-01", "2027-03-31")
