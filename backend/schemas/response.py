"""
schemas/response.py
===================
Pydantic v2 request/response models for the retrieval API.

Python attributes are snake_case; the JSON wire format is camelCase
(``tiersUsed``, ``totalResults``) to match what the frontend consumes.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class SearchRequest(_CamelModel):
    # Optional here so a missing query gets an explicit 400 from the handler
    query: Optional[str] = None
    category: Optional[str] = Field(None, description="Disorder label, e.g. 'panic'")
    limit: int = Field(3, gt=0, description="Total number of passages to return")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class SearchResultItem(_CamelModel):
    text: str
    source: str                 # source document title
    tier: str                   # "protocol" | "core"
    score: float                # cosine similarity
    category: Optional[str] = None


class SearchResponse(_CamelModel):
    results: List[SearchResultItem] = Field(default_factory=list)
    tiers_used: List[str] = Field(default_factory=list)
    tier_counts: Optional[Dict[str, int]] = None
    total_results: Optional[int] = None
    message: Optional[str] = None


class RefreshResponse(_CamelModel):
    message: str
    count: int


class HealthResponse(_CamelModel):
    status: str
    knowledge_base_ready: bool
    knowledge_base_count: int
    knowledge_base_file: str
    embedding_model: str
    api_version: str


class ErrorResponse(BaseModel):
    detail: str
