"""
store.py
========
Persisted knowledge base: a single JSON array of chunk records.

The ingestion pipeline overwrites the file wholesale (``save_records``); the
retrieval server reads it wholesale into a KnowledgeStore at startup and on
every explicit refresh. The in-memory record set is an immutable tuple that
is swapped by reference, so a search that grabbed a snapshot keeps working
on it even if a refresh lands mid-request.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChunkRecord:
    """One embedded passage of a source document."""

    id: str                 # "<sourceId>_<windowIndex>"
    source_id: str
    source_title: str
    text: str
    embedding: Tuple[float, ...]
    tier: str               # "core" | "protocol"
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id":          self.id,
            "sourceId":    self.source_id,
            "sourceTitle": self.source_title,
            "text":        self.text,
            "embedding":   list(self.embedding),
            "metadata": {
                "tier":     self.tier,
                "category": self.category,
            },
        }

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "ChunkRecord":
        metadata = row.get("metadata") or {}
        embedding = row["embedding"]
        if not isinstance(embedding, list) or not embedding:
            raise ValueError(f"record {row.get('id')!r} has no embedding")
        return cls(
            id           = str(row["id"]),
            source_id    = str(row["sourceId"]),
            source_title = str(row["sourceTitle"]),
            text         = str(row["text"]),
            embedding    = tuple(float(v) for v in embedding),
            tier         = str(metadata["tier"]),
            category     = metadata.get("category"),
        )


# ---------------------------------------------------------------------------
# File persistence
# ---------------------------------------------------------------------------

def serialize_records(records: Iterable[ChunkRecord]) -> str:
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)


def save_records(path: Path, records: Sequence[ChunkRecord]) -> None:
    """Overwrite ``path`` with ``records``; the old file is replaced atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(serialize_records(records), encoding="utf-8")
    os.replace(tmp_path, path)


def read_records(path: Path) -> List[ChunkRecord]:
    """
    Parse the store file.

    Raises
    ------
    FileNotFoundError  if the file does not exist
    ValueError         on malformed JSON, malformed rows or mixed
                       embedding dimensionality
    """
    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if not isinstance(payload, list):
        raise ValueError("knowledge base file must contain a JSON array")

    records: List[ChunkRecord] = []
    for row in payload:
        try:
            records.append(ChunkRecord.from_dict(row))
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"malformed record {row!r:.80}: {exc}") from exc

    dimensions = {len(r.embedding) for r in records}
    if len(dimensions) > 1:
        raise ValueError(f"records have mixed embedding dimensions: {sorted(dimensions)}")
    return records


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

@dataclass
class KnowledgeStore:
    """Process-wide holder of the loaded record set."""

    path: Path
    _records: Tuple[ChunkRecord, ...] = field(default=(), init=False, repr=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False)

    def snapshot(self) -> Tuple[ChunkRecord, ...]:
        """The current record set. Never mutated after it is published."""
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    @property
    def dimension(self) -> Optional[int]:
        records = self._records
        return len(records[0].embedding) if records else None

    def load(self) -> Tuple[ChunkRecord, ...]:
        """
        (Re)load the store file and publish it as the new snapshot.

        A missing or unreadable file publishes an empty snapshot instead of
        raising, so the server stays up in a degraded state.
        """
        with self._lock:
            try:
                records: Tuple[ChunkRecord, ...] = tuple(read_records(self.path))
                logger.info("Knowledge base loaded: %d chunks from %s", len(records), self.path)
            except FileNotFoundError:
                records = ()
                logger.warning(
                    "%s not found. Run `python -m rag_pipeline.ingest` first.", self.path,
                )
            except (OSError, ValueError) as exc:
                records = ()
                logger.error("Failed to load knowledge base %s: %s", self.path, exc)

            self._records = records
            return records

    refresh = load
