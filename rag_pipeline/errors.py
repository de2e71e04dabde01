"""
errors.py
=========
Exception hierarchy shared by the ingestion pipeline and the retrieval server.
"""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base class for every error raised by rag_pipeline."""


class ConfigurationError(KnowledgeBaseError):
    """Missing credential or invalid setting. Fatal at startup."""


class ExtractionError(KnowledgeBaseError):
    """A source document could not be read or parsed into text."""


class DimensionMismatchError(KnowledgeBaseError):
    """Two vectors compared by the search engine have different lengths."""


class EmbeddingUnavailableError(KnowledgeBaseError):
    """The embedding model could not embed a live query after all retries."""


class InvalidQueryError(KnowledgeBaseError):
    """The caller sent a blank query or a non-positive limit."""
