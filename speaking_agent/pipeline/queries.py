from __future__ import annotations

from typing import Iterable

BASE_SEEDS: tuple[str, ...] = (
    "call for speakers",
    "keynote speakers",
    "speaker proposals",
    "submit a proposal",
    "leadership conference",
    "medical missions conference",
    "nonprofit leadership event",
    "corporate social responsibility conference",
    "global health summit",
    "faith based medical missions",
)

HEALTHCARE_SEEDS: tuple[str, ...] = (
    "medical conference",
    "healthcare leadership conference",
    "surgical society annual meeting",
    "MGMA conference",
    "HIMSS call for speakers",
    "ACHE congress call for proposals",
    "ambulatory surgery association meeting",
    "AORN chapter meeting",
)

DEFAULT_TOPICS: tuple[str, ...] = (
    "volunteer medical missions",
    "surgical missions Peru",
    "global health",
    "nonprofit leadership",
    "mission medicine",
    "Texas healthcare",
    "medical student service",
    "servant leadership",
    "CSR healthcare",
)

TEXAS_TOPICS: tuple[str, ...] = (
    "Texas",
    "Dallas",
    "DFW",
    "Houston",
    "Austin",
    "San Antonio",
    "Fort Worth",
    "Texas medical association",
)


def _clean_topics(topics: Iterable[str]) -> list[str]:
    cleaned: list[str] = []
    for topic in topics:
        value = " ".join(str(topic).split())
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


def build_queries(
    topics: Iterable[str],
    prioritize_healthcare: bool,
    prioritize_texas: bool,
) -> list[str]:
    """Build ``"{seed} {topic}"`` search phrases, seed-major and topic-minor.

    Blank input topics fall back to ``DEFAULT_TOPICS``. With ``prioritize_texas``
    the Texas place names are appended to the topics unless already present.
    """
    topic_list = _clean_topics(topics) or list(DEFAULT_TOPICS)

    if prioritize_texas:
        for topic in TEXAS_TOPICS:
            if topic not in topic_list:
                topic_list.append(topic)

    seeds = BASE_SEEDS + HEALTHCARE_SEEDS if prioritize_healthcare else BASE_SEEDS

    return [f"{seed} {topic}" for seed in seeds for topic in topic_list]
