"""
retriever.py
============
Hierarchical semantic retrieval over the loaded knowledge base.

Strategy:
  1. Protocol tier: when the caller names a category (e.g. "panic"), rank
     only protocol chunks of that category and keep at most two, so
     disorder-specific material never crowds out the general library.

  2. Core tier: fill every remaining slot from the core library.

Protocol hits always come before core hits in the returned list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.errors import DimensionMismatchError, EmbeddingUnavailableError, InvalidQueryError
from rag_pipeline.similarity import rank
from rag_pipeline.sources import TIER_CORE, TIER_PROTOCOL
from rag_pipeline.store import ChunkRecord

logger = logging.getLogger(__name__)

PROTOCOL_SLOT_CAP = 2
DEFAULT_LIMIT     = 3

EMPTY_BASE_MESSAGE = (
    "Knowledge base is empty. Run `python -m rag_pipeline.ingest` first."
)


@dataclass(frozen=True)
class SearchHit:
    record: ChunkRecord
    score: float
    tier: str     # tier that produced the hit


@dataclass
class RetrievalResult:
    hits: List[SearchHit] = field(default_factory=list)
    tiers_used: List[str] = field(default_factory=list)
    tier_counts: Dict[str, int] = field(default_factory=dict)
    message: Optional[str] = None    # set only when the base is empty


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def retrieve(
    query: str,
    records: Sequence[ChunkRecord],
    embedder: EmbeddingClient,
    *,
    category: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> RetrievalResult:
    """
    Return up to ``limit`` chunks relevant to ``query``.

    Parameters
    ----------
    query    : free-text question from the caller
    records  : one immutable snapshot of the knowledge base
    embedder : client used to embed the query
    category : optional disorder label selecting protocol chunks
    limit    : total number of hits wanted, must be positive

    Raises
    ------
    InvalidQueryError          blank query or limit <= 0
    EmbeddingUnavailableError  the query could not be embedded
    DimensionMismatchError     query vector and stored vectors disagree
    """
    if limit <= 0:
        raise InvalidQueryError(f"limit must be positive, got {limit}")
    if not query or not query.strip():
        raise InvalidQueryError("Query required")

    if not records:
        logger.warning("Knowledge base is empty; returning no results.")
        return RetrievalResult(message=EMPTY_BASE_MESSAGE)

    query_vec = embedder.embed(query)
    if query_vec is None:
        raise EmbeddingUnavailableError("Could not embed the query; embedding service unavailable")

    stored_dim = len(records[0].embedding)
    if len(query_vec) != stored_dim:
        raise DimensionMismatchError(
            f"Query embedding has {len(query_vec)} dimensions, knowledge base has {stored_dim}"
        )

    result = RetrievalResult()

    if category:
        protocol_pool = [
            r for r in records if r.tier == TIER_PROTOCOL and r.category == category
        ]
        top = rank(query_vec, protocol_pool)[: min(PROTOCOL_SLOT_CAP, limit)]
        _add_tier(result, TIER_PROTOCOL, top)

    remaining = limit - len(result.hits)
    if remaining > 0:
        core_pool = [r for r in records if r.tier == TIER_CORE]
        _add_tier(result, TIER_CORE, rank(query_vec, core_pool)[:remaining])

    logger.debug(
        "Retrieved %d chunks (category=%s, limit=%d, tiers=%s).",
        len(result.hits), category, limit, result.tier_counts,
    )
    return result


def _add_tier(result: RetrievalResult, tier: str, ranked: list) -> None:
    if not ranked:
        return
    result.hits.extend(SearchHit(record=r, score=s, tier=tier) for r, s in ranked)
    result.tiers_used.append(tier)
    result.tier_counts[tier] = len(ranked)
