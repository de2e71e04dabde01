"""
extractor.py
============
PDF → plain text, via pypdf.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pypdf import PdfReader

from rag_pipeline.errors import ExtractionError

logger = logging.getLogger(__name__)


def extract_pdf_text(path: Path) -> str:
    """Return the concatenated text of every page, or raise ExtractionError."""
    try:
        reader = PdfReader(str(path))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as exc:
        raise ExtractionError(f"Failed to extract text from {path}: {exc}") from exc

    logger.debug("Extracted %d pages from %s", len(pages), path)
    return "\n".join(pages)
