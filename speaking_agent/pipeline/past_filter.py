"""Two-stage gate that keeps past events out of the ranked output.

``looks_past`` is a cheap text check run on raw candidates before any
extraction call is spent on them. ``is_upcoming`` runs after extraction and
only rejects a record when it carries dates and every one of them is behind
today. A record without dates is always kept.
"""
from __future__ import annotations

import re
from datetime import date

from speaking_agent.models.events import CandidateResult, ExtractedEvent

RECAP_RE = re.compile(r"recap|highlights|past event|previous event|what happened")

# Year as a URL path segment, e.g. /2023/ or /summit-2023-agenda
PATH_YEAR_RE = re.compile(r"(?<=[/-])((?:19|20)\d{2})(?=[/-]|$)")
BARE_YEAR_RE = re.compile(r"\b((?:19|20)\d{2})\b")


def _has_year_before(text: str, current_year: int) -> bool:
    for pattern in (PATH_YEAR_RE, BARE_YEAR_RE):
        for match in pattern.finditer(text):
            if int(match.group(1)) < current_year:
                return True
    return False


def looks_past(candidate: CandidateResult, today: date | None = None) -> bool:
    """Return True when the raw search hit is obviously about a past event."""
    today = today or date.today()
    text = f"{candidate.title} {candidate.snippet} {candidate.link}".lower()
    if RECAP_RE.search(text):
        return True
    return _has_year_before(text, today.year)


def is_upcoming(extracted: ExtractedEvent, today: date | None = None) -> bool:
    """Return False only when extracted dates show the event is over."""
    if not extracted.has_dates:
        return True
    if extracted.is_future is True:
        return True

    today_iso = (today or date.today()).isoformat()
    # Fixed-width ISO strings compare correctly as text.
    return any(
        value >= today_iso
        for value in (extracted.start_date, extracted.end_date, extracted.cfp_deadline)
        if value
    )


def within_window(start_date: str | None, date_from: str | None, date_to: str | None) -> bool:
    """Check an event start against an optional inclusive date window."""
    if not start_date:
        return True
    if date_from and start_date < date_from:
        return False
    if date_to and start_date > date_to:
        return False
    return True
