"""Keyword and domain heuristic used when no model result is available."""
from __future__ import annotations

import re
from urllib.parse import urlparse

from speaking_agent.models.events import CandidateResult, ExtractedEvent, ExtractionOptions

EVENT_KEYWORDS: tuple[str, ...] = (
    "call for speakers",
    "call for proposals",
    "call for presentations",
    "call for abstracts",
    "submit a proposal",
    "speaker proposals",
    "keynote",
    "conference",
    "annual meeting",
    "summit",
    "congress",
    "symposium",
    "convention",
)

THEME_KEYWORDS: tuple[str, ...] = (
    "leadership",
    "csr",
    "corporate social responsibility",
    "healthcare",
    "medical",
    "surgical",
    "nursing",
    "anesthesiology",
    "global health",
    "medical missions",
    "mgma",
    "himss",
    "ache",
    "aorn",
    "asca",
)

HEALTHCARE_DOMAINS: tuple[str, ...] = (
    "aha.org",
    "ama-assn.org",
    "mgma.com",
    "himss.org",
    "ache.org",
    "aorn.org",
    "ascassociation.org",
    "asahq.org",
    "facs.org",
    "nursingworld.org",
    "texmed.org",
    "tha.org",
    "aapa.org",
)

TEXAS_CITIES: tuple[str, ...] = (
    "dallas",
    "houston",
    "austin",
    "san antonio",
    "fort worth",
    "el paso",
    "arlington",
    "plano",
    "irving",
    "frisco",
    "galveston",
    "lubbock",
)

HEALTHCARE_TEXT_RE = re.compile(r"healthcare|medical|hospital")
TEXAS_TOKEN_RE = re.compile(r"\btexas\b|\btx\b|\bdfw\b")

VERTICAL_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Healthcare", re.compile(r"health|medical|surg|clinic|hospital|nurs|anesthesi|physician")),
    ("Leadership", re.compile(r"leadership|executive|\bleaders?\b|management")),
    ("CSR", re.compile(r"\bcsr\b|corporate social responsibility|philanthrop|nonprofit|non-profit")),
    ("Sales", re.compile(r"\bsales\b|selling|revenue|business development")),
)

EVENT_SCORE = 12
THEME_SCORE = 6
HEALTHCARE_DOMAIN_SCORE = 25
HEALTHCARE_TEXT_SCORE = 12
TEXAS_TEXT_SCORE = 18


def _keyword_pattern(keywords: tuple[str, ...]) -> list[re.Pattern[str]]:
    return [re.compile(rf"\b{re.escape(keyword)}\b") for keyword in keywords]


EVENT_PATTERNS = _keyword_pattern(EVENT_KEYWORDS)
THEME_PATTERNS = _keyword_pattern(THEME_KEYWORDS)
TEXAS_CITY_PATTERNS = _keyword_pattern(TEXAS_CITIES)


def host_of(url: str) -> str:
    """Lowercased hostname without ``www.``; empty for unparseable URLs."""
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""
    if host.startswith("www."):
        host = host[4:]
    return host


def is_healthcare_domain(host: str) -> bool:
    return bool(host) and any(host == domain or host.endswith(f".{domain}") for domain in HEALTHCARE_DOMAINS)


def mentions_texas(text: str) -> bool:
    if TEXAS_TOKEN_RE.search(text):
        return True
    return any(pattern.search(text) for pattern in TEXAS_CITY_PATTERNS)


def heuristic_score(text: str, host: str, options: ExtractionOptions) -> int:
    score = 0
    score += EVENT_SCORE * sum(1 for pattern in EVENT_PATTERNS if pattern.search(text))
    score += THEME_SCORE * sum(1 for pattern in THEME_PATTERNS if pattern.search(text))

    if options.prioritize_healthcare:
        if is_healthcare_domain(host):
            score += HEALTHCARE_DOMAIN_SCORE
        if HEALTHCARE_TEXT_RE.search(text):
            score += HEALTHCARE_TEXT_SCORE

    if options.prioritize_texas and mentions_texas(text):
        score += TEXAS_TEXT_SCORE

    return max(0, min(100, score))


def derive_verticals(text: str) -> list[str]:
    return [label for label, pattern in VERTICAL_PATTERNS if pattern.search(text)]


def derive_organizer(host: str) -> str | None:
    labels = [label for label in host.split(".") if label]
    if len(labels) < 2:
        return None
    return labels[-2].upper()


def heuristic_extract(candidate: CandidateResult, options: ExtractionOptions) -> ExtractedEvent:
    """Score and classify a candidate from its title, snippet and host alone."""
    text = f"{candidate.title} {candidate.snippet}".lower()
    host = host_of(candidate.link)

    return ExtractedEvent(
        event_name=candidate.title,
        organizer=derive_organizer(host),
        pays_speakers="unknown",
        verticals=derive_verticals(text),
        score=heuristic_score(text, host, options),
    )
