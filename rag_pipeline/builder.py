"""
builder.py
==========
Offline ingestion: source documents → chunked, embedded records → JSON file.

For each configured source, in catalog order:

  1. Resolve the file under the docs directory (missing → log, skip).
  2. Extract the text and collapse whitespace.
  3. Cut it into fixed windows, dropping windows that are too short.
  4. Embed each window; a window whose embedding fails is skipped.
  5. Rewrite the whole store file with everything accumulated so far, so a
     crash later in the run keeps the finished documents.

Every run starts from scratch: an existing store file is deleted first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from rag_pipeline.chunker import split_text
from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.errors import ExtractionError
from rag_pipeline.extractor import extract_pdf_text
from rag_pipeline.sources import TIER_CORE, SourceDocument
from rag_pipeline.store import ChunkRecord, save_records

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], str]

_PROGRESS_EVERY = 10


@dataclass
class BuildStats:
    documents_processed: int = 0
    documents_skipped: int   = 0
    chunks_embedded: int     = 0
    chunks_failed: int       = 0
    chunks_filtered: int     = 0
    records_by_tier: Dict[str, int] = field(default_factory=dict)

    @property
    def total_records(self) -> int:
        return sum(self.records_by_tier.values())


def build_knowledge_base(
    sources: Sequence[SourceDocument],
    docs_dir: Path,
    kb_file: Path,
    embedder: EmbeddingClient,
    *,
    chunk_size: int = 1000,
    min_chunk_length: int = 100,
    extractor: Optional[Extractor] = None,
) -> BuildStats:
    """
    Rebuild the knowledge base file from ``sources``.

    Parameters
    ----------
    sources          : ordered source descriptors
    docs_dir         : directory the descriptors' ``file`` paths are relative to
    kb_file          : store file to (re)write
    embedder         : retrying embedding client
    chunk_size       : window size in characters
    min_chunk_length : windows shorter than this (after trim) are not embedded
    extractor        : document → raw text, defaults to the pypdf extractor;
                       raises ExtractionError on failure

    Returns
    -------
    BuildStats describing what was stored and what was skipped.
    """
    kb_file = Path(kb_file)
    docs_dir = Path(docs_dir)
    extract = extractor or extract_pdf_text

    if kb_file.exists():
        logger.info("Removing previous knowledge base %s", kb_file)
        kb_file.unlink()

    records: List[ChunkRecord] = []
    stats = BuildStats()
    dimension: Optional[int] = None

    for source in sources:
        file_path = docs_dir / source.file
        if not file_path.is_file():
            logger.error("Source file not found: %s", file_path)
            stats.documents_skipped += 1
            continue

        label = "CORE" if source.tier == TIER_CORE else f"PROTOCOL ({source.category})"
        logger.info("%s: %s", label, source.title)

        try:
            text = extract(file_path)
        except (ExtractionError, OSError) as exc:
            logger.error("Skipping %s: %s", source.file, exc)
            stats.documents_skipped += 1
            continue

        chunks = split_text(text, chunk_size, min_chunk_length)
        logger.info(
            "  %d characters, %d windows", len(chunks.text), chunks.window_count,
        )

        kept = embedded = 0
        for chunk in chunks:
            kept += 1
            vector = embedder.embed(chunk.text)
            if vector is None:
                logger.warning("  Skipping chunk %s_%d: embedding failed", source.id, chunk.index)
                stats.chunks_failed += 1
                continue
            if dimension is None:
                dimension = len(vector)
            elif len(vector) != dimension:
                logger.warning(
                    "  Skipping chunk %s_%d: embedding has %d dimensions, store has %d",
                    source.id, chunk.index, len(vector), dimension,
                )
                stats.chunks_failed += 1
                continue

            records.append(ChunkRecord(
                id           = f"{source.id}_{chunk.index}",
                source_id    = source.id,
                source_title = source.title,
                text         = chunk.text,
                embedding    = tuple(vector),
                tier         = source.tier,
                category     = source.category,
            ))
            embedded += 1
            if chunk.index % _PROGRESS_EVERY == 0:
                logger.debug("  ... window %d/%d", chunk.index + 1, chunks.window_count)

        stats.chunks_filtered += chunks.window_count - kept
        stats.chunks_embedded += embedded
        stats.records_by_tier[source.tier] = stats.records_by_tier.get(source.tier, 0) + embedded
        stats.documents_processed += 1

        save_records(kb_file, records)
        logger.info("  Done: %s (%d chunks stored, checkpoint saved)", source.title, embedded)

    _log_summary(stats, kb_file)
    return stats


def _log_summary(stats: BuildStats, kb_file: Path) -> None:
    logger.info("=" * 50)
    logger.info("Knowledge base complete")
    logger.info("  Total chunks : %d", stats.total_records)
    for tier, count in sorted(stats.records_by_tier.items()):
        logger.info("  %-12s : %d", tier.capitalize(), count)
    logger.info(
        "  Documents    : %d processed, %d skipped",
        stats.documents_processed, stats.documents_skipped,
    )
    if stats.chunks_failed:
        logger.warning("  %d chunks skipped after embedding failures", stats.chunks_failed)
    logger.info("  Saved to     : %s", kb_file)
    logger.info("=" * 50)
