from __future__ import annotations

from speaking_agent.pipeline.queries import (
    BASE_SEEDS,
    DEFAULT_TOPICS,
    HEALTHCARE_SEEDS,
    TEXAS_TOPICS,
    build_queries,
)


def test_build_queries_is_seed_major_cross_product():
    queries = build_queries(["A", "B"], prioritize_healthcare=False, prioritize_texas=False)

    assert len(queries) == len(BASE_SEEDS) * 2
    expected = [f"{seed} {topic}" for seed in BASE_SEEDS for topic in ("A", "B")]
    assert queries == expected
    assert queries[:2] == [f"{BASE_SEEDS[0]} A", f"{BASE_SEEDS[0]} B"]


def test_build_queries_appends_healthcare_seeds():
    queries = build_queries(["A"], prioritize_healthcare=True, prioritize_texas=False)

    assert len(queries) == len(BASE_SEEDS) + len(HEALTHCARE_SEEDS)
    assert queries[-1] == f"{HEALTHCARE_SEEDS[-1]} A"


def test_build_queries_uses_default_topics_when_empty():
    queries = build_queries([], prioritize_healthcare=False, prioritize_texas=False)

    assert queries
    assert len(queries) == len(BASE_SEEDS) * len(DEFAULT_TOPICS)
    assert all(query.strip() for query in queries)
    assert all(any(query.endswith(f" {topic}") for topic in DEFAULT_TOPICS) for query in queries)


def test_build_queries_treats_blank_topics_as_empty():
    assert build_queries(["  ", ""], False, False) == build_queries([], False, False)


def test_build_queries_adds_texas_topics_without_duplicates():
    queries = build_queries(["Dallas", "leadership"], prioritize_healthcare=False, prioritize_texas=True)

    topics_per_seed = len(queries) // len(BASE_SEEDS)
    assert topics_per_seed == 2 + len(TEXAS_TOPICS) - 1
    assert queries.count(f"{BASE_SEEDS[0]} Dallas") == 1
    assert f"{BASE_SEEDS[0]} Fort Worth" in queries


def test_build_queries_is_deterministic():
    first = build_queries(["x"], True, True)
    second = build_queries(["x"], True, True)
    assert first == second
