"""Deterministic stand-ins for the remote embedding model and record factories."""

import hashlib
from typing import List, Optional, Sequence

from rag_pipeline.store import ChunkRecord

HASH_DIM = 32


def hash_embed(text: str, dim: int = HASH_DIM) -> List[float]:
    """Deterministic bag-of-tokens embedding; no network."""
    values = [0.0] * dim
    for token in text.lower().split():
        digest = hashlib.sha256(token.encode("utf-8")).digest()
        idx = int.from_bytes(digest[:2], "big") % dim
        sign = 1.0 if digest[2] % 2 == 0 else -1.0
        values[idx] += sign
    if not any(values):
        values[0] = 1.0
    return values


def make_record(
    record_id: str,
    embedding: Sequence[float],
    *,
    tier: str = "core",
    category: Optional[str] = None,
    text: Optional[str] = None,
    source_id: Optional[str] = None,
) -> ChunkRecord:
    source = source_id or record_id.rsplit("_", 1)[0]
    return ChunkRecord(
        id           = record_id,
        source_id    = source,
        source_title = source.title(),
        text         = text or f"passage {record_id}",
        embedding    = tuple(float(v) for v in embedding),
        tier         = tier,
        category     = category,
    )


def no_sleep(_seconds: float) -> None:
    pass
