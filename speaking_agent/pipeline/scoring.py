from __future__ import annotations

import re

from speaking_agent.models.events import EventRecord

TEXAS_BONUS = 15
NON_US_PENALTY = 20

TEXAS_LOCATION_RE = re.compile(
    r"\b(?:texas|tx|dallas|dfw|houston|austin|san antonio|fort worth)\b"
)

US_LITERAL_RE = re.compile(r"united states|\busa\b|u\.s\.")

US_STATE_NAMES: tuple[str, ...] = (
    "alabama", "alaska", "arizona", "arkansas", "california", "colorado",
    "connecticut", "delaware", "florida", "georgia", "hawaii", "idaho",
    "illinois", "indiana", "iowa", "kansas", "kentucky", "louisiana", "maine",
    "maryland", "massachusetts", "michigan", "minnesota", "mississippi",
    "missouri", "montana", "nebraska", "nevada", "new hampshire", "new jersey",
    "new mexico", "new york", "north carolina", "north dakota", "ohio",
    "oklahoma", "oregon", "pennsylvania", "rhode island", "south carolina",
    "south dakota", "tennessee", "texas", "utah", "vermont", "virginia",
    "washington", "west virginia", "wisconsin", "wyoming",
)
US_STATE_NAME_RE = re.compile(r"\b(?:" + "|".join(US_STATE_NAMES) + r")\b")

US_STATE_ABBREVIATIONS: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI",
    "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN",
    "MS", "MO", "MT", "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH",
    "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA",
    "WV", "WI", "WY",
)
# Upper-case only so "La Paz" or "in" never read as a state code.
US_STATE_ABBR_RE = re.compile(
    r"(?:^|[\s,(/])(?:" + "|".join(US_STATE_ABBREVIATIONS) + r")(?=$|[\s,.)/])"
)
# Upper-case only so the pronoun "us" is not read as the country.
US_CODE_RE = re.compile(r"\bUS\b")


def is_texas_location(location: str) -> bool:
    return bool(TEXAS_LOCATION_RE.search(location.lower()))


def is_us_location(location: str) -> bool:
    lowered = location.lower()
    if US_LITERAL_RE.search(lowered) or US_STATE_NAME_RE.search(lowered):
        return True
    return bool(US_CODE_RE.search(location) or US_STATE_ABBR_RE.search(location))


def location_adjustment(location: str, prioritize_texas: bool) -> int:
    if prioritize_texas:
        return TEXAS_BONUS if is_texas_location(location) else 0
    return 0 if is_us_location(location) else -NON_US_PENALTY


def apply_location_boost(record: EventRecord, prioritize_texas: bool) -> EventRecord:
    """Return a copy of ``record`` with the regional bonus or penalty applied.

    The adjusted score is not clamped to 0-100.
    """
    delta = location_adjustment(record.location_text, prioritize_texas)
    if not delta:
        return record
    return record.model_copy(update={"score": record.score + delta})
