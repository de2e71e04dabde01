"""
similarity.py
=============
Exact (brute-force) cosine similarity ranking over an in-memory record set.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from rag_pipeline.errors import DimensionMismatchError
from rag_pipeline.store import ChunkRecord


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    dot(a, b) / (|a| * |b|).

    Raises DimensionMismatchError when the vectors differ in length. A zero
    vector has no direction and scores 0.0 against anything.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"vector dimensions differ: {len(a)} vs {len(b)}"
        )

    dot = sum(x * y for x, y in zip(a, b))
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(y * y for y in b))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return dot / (na * nb)


def rank(
    query_vec: Sequence[float],
    records: Iterable[ChunkRecord],
) -> List[Tuple[ChunkRecord, float]]:
    """Score every record and sort best first; equal scores keep input order."""
    scored = [(record, cosine_similarity(query_vec, record.embedding)) for record in records]
    # list.sort is stable, so ties stay in original order
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored
