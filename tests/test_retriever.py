"""Tests for the protocol-first, core-fallback retrieval policy."""

import pytest

from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.errors import DimensionMismatchError, EmbeddingUnavailableError, InvalidQueryError
from rag_pipeline.retriever import EMPTY_BASE_MESSAGE, retrieve
from tests.helpers import make_record, no_sleep


@pytest.fixture
def x_axis_embedder():
    """Every query embeds to [1, 0, 0]."""
    return EmbeddingClient(lambda text: [1.0, 0.0, 0.0], sleep=no_sleep)


def test_category_caps_protocol_hits_at_two_and_fills_from_core(tiered_records, x_axis_embedder):
    result = retrieve("panic attack", tiered_records, x_axis_embedder, category="panic", limit=3)

    assert [h.tier for h in result.hits] == ["protocol", "protocol", "core"]
    assert [h.record.id for h in result.hits] == ["clark_4", "clark_3", "beck_9"]
    assert result.tiers_used == ["protocol", "core"]
    assert result.tier_counts == {"protocol": 2, "core": 1}
    assert result.message is None


def test_protocol_hits_ranked_within_tier(tiered_records, x_axis_embedder):
    result = retrieve("panic", tiered_records, x_axis_embedder, category="panic", limit=5)
    protocol_scores = [h.score for h in result.hits if h.tier == "protocol"]
    core_scores = [h.score for h in result.hits if h.tier == "core"]

    assert protocol_scores == sorted(protocol_scores, reverse=True)
    assert core_scores == sorted(core_scores, reverse=True)
    assert len(result.hits) == 5


def test_without_category_only_core_is_considered(tiered_records, x_axis_embedder):
    result = retrieve("anxiety", tiered_records, x_axis_embedder, limit=3)

    assert [h.tier for h in result.hits] == ["core"] * 3
    assert [h.record.id for h in result.hits] == ["beck_9", "beck_8", "beck_7"]
    assert result.tiers_used == ["core"]


def test_limit_one_with_category_returns_single_protocol_hit(tiered_records, x_axis_embedder):
    result = retrieve("panic", tiered_records, x_axis_embedder, category="panic", limit=1)

    assert [h.record.id for h in result.hits] == ["clark_4"]
    assert result.tiers_used == ["protocol"]


def test_unknown_category_falls_back_to_core(tiered_records, x_axis_embedder):
    result = retrieve("ocd", tiered_records, x_axis_embedder, category="ocd", limit=3)

    assert [h.tier for h in result.hits] == ["core"] * 3
    assert result.tier_counts == {"core": 3}


def test_category_ignores_protocols_of_other_disorders(x_axis_embedder):
    records = [
        make_record("dep_0", [1.0, 0.0, 0.0], tier="protocol", category="depression"),
        make_record("core_0", [0.0, 1.0, 0.0]),
    ]
    result = retrieve("q", records, x_axis_embedder, category="panic", limit=2)
    assert [h.record.id for h in result.hits] == ["core_0"]


def test_limit_larger_than_pool_returns_what_exists(tiered_records, x_axis_embedder):
    result = retrieve("q", tiered_records, x_axis_embedder, category="panic", limit=50)
    assert len(result.hits) == 2 + 10


def test_empty_base_returns_guidance_without_embedding():
    def must_not_embed(text):
        raise AssertionError("embedding should not be called on an empty base")

    result = retrieve("q", (), EmbeddingClient(must_not_embed, sleep=no_sleep), limit=3)

    assert result.hits == []
    assert result.tiers_used == []
    assert result.message == EMPTY_BASE_MESSAGE


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_rejected(tiered_records, x_axis_embedder, limit):
    with pytest.raises(InvalidQueryError):
        retrieve("q", tiered_records, x_axis_embedder, limit=limit)


@pytest.mark.parametrize("query", ["", "   "])
def test_blank_query_rejected(tiered_records, x_axis_embedder, query):
    with pytest.raises(InvalidQueryError):
        retrieve(query, tiered_records, x_axis_embedder)


def test_embedding_failure_is_a_request_error(tiered_records):
    def down(text):
        raise ConnectionError("service unavailable")

    with pytest.raises(EmbeddingUnavailableError):
        retrieve("q", tiered_records, EmbeddingClient(down, sleep=no_sleep))


def test_query_dimension_mismatch_fails_fast(tiered_records):
    embedder = EmbeddingClient(lambda text: [1.0, 0.0], sleep=no_sleep)
    with pytest.raises(DimensionMismatchError):
        retrieve("q", tiered_records, embedder)
