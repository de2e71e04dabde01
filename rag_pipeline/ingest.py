"""
ingest.py
=========
Command-line entry point for rebuilding the knowledge base.

Run from the project root:

  python -m rag_pipeline.ingest
  python -m rag_pipeline.ingest --docs-dir ./docs --out ./knowledge_base.json

Settings come from the environment / .env (see rag_pipeline.config); the
flags below override them for a single run. Exits 0 once every source has
been attempted, even if some were skipped.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rag_pipeline.builder import build_knowledge_base
from rag_pipeline.config import get_settings
from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.errors import ConfigurationError
from rag_pipeline.sources import load_sources

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the clinical knowledge base")
    parser.add_argument("--docs-dir",         type=Path, help="Directory holding the source PDFs")
    parser.add_argument("--out",              type=Path, help="Knowledge base JSON file to write")
    parser.add_argument("--sources",          type=Path, help="JSON manifest of source documents")
    parser.add_argument("--chunk-size",       type=int)
    parser.add_argument("--min-chunk-length", type=int)
    parser.add_argument("-v", "--verbose",    action="store_true", help="Log per-chunk progress")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s | %(message)s",
    )

    try:
        settings = get_settings()
        sources = load_sources(args.sources or settings.sources_file)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    chunk_size = settings.chunk_size if args.chunk_size is None else args.chunk_size
    min_chunk_length = (
        settings.min_chunk_length if args.min_chunk_length is None else args.min_chunk_length
    )
    if chunk_size <= 0 or min_chunk_length <= 0:
        logger.error("--chunk-size and --min-chunk-length must be positive")
        return 2

    logger.info("Building hierarchical knowledge base from %d sources", len(sources))
    try:
        build_knowledge_base(
            sources,
            args.docs_dir or settings.docs_dir,
            args.out or settings.kb_file,
            EmbeddingClient.from_settings(settings),
            chunk_size       = chunk_size,
            min_chunk_length = min_chunk_length,
        )
    except Exception as exc:
        logger.error("Ingestion aborted: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
