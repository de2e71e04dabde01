# backend/schemas/__init__.py
from backend.schemas.response import (
    ErrorResponse,
    HealthResponse,
    RefreshResponse,
    SearchRequest,
    SearchResponse,
    SearchResultItem,
)

__all__ = [
    "SearchRequest", "SearchResponse", "SearchResultItem",
    "RefreshResponse", "HealthResponse", "ErrorResponse",
]
