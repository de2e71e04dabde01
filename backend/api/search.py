"""
api/search.py
=============
POST /search   : hierarchical semantic search over the knowledge base
POST /refresh  : reload the knowledge base file without restarting

Every search runs against one snapshot of the record set taken when the
request arrives; a concurrent refresh publishes a new snapshot for later
requests and never alters the one in use.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request, status

from backend.schemas.response import (
    ErrorResponse, RefreshResponse, SearchRequest, SearchResponse, SearchResultItem,
)
from rag_pipeline.errors import (
    DimensionMismatchError, EmbeddingUnavailableError, InvalidQueryError,
)
from rag_pipeline.retriever import retrieve

logger = logging.getLogger(__name__)

router = APIRouter()

_DEFAULT_SEARCH_TIMEOUT = 15.0


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/search",
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def search(payload: SearchRequest, request: Request):
    """Return the passages most relevant to the query, protocol tier first."""
    if not payload.query or not payload.query.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Query required")

    state = request.app.state
    records = state.store.snapshot()
    settings = getattr(state, "settings", None)
    timeout = settings.search_timeout if settings is not None else _DEFAULT_SEARCH_TIMEOUT

    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(
                retrieve,
                payload.query,
                records,
                state.embedder,
                category = payload.category,
                limit    = payload.limit,
            ),
            timeout=timeout,
        )
    except InvalidQueryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except EmbeddingUnavailableError as exc:
        logger.error("Search failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    except DimensionMismatchError as exc:
        logger.error("Search failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    except asyncio.TimeoutError:
        logger.error("Search exceeded %.1fs deadline (query=%r)", timeout, payload.query[:80])
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"Search did not complete within {timeout:g} seconds",
        )

    if result.message is not None:
        response = SearchResponse(results=[], message=result.message, tiers_used=[])
        return response.model_dump(by_alias=True, exclude_unset=True)

    items = [
        SearchResultItem(
            text     = hit.record.text,
            source   = hit.record.source_title,
            tier     = hit.tier,
            score    = hit.score,
            category = hit.record.category,
        )
        for hit in result.hits
    ]
    response = SearchResponse(
        results       = items,
        tiers_used    = result.tiers_used,
        tier_counts   = result.tier_counts,
        total_results = len(items),
    )
    return response.model_dump(by_alias=True, exclude_unset=True)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(request: Request) -> RefreshResponse:
    """Reload the knowledge base file and swap it in."""
    records = await asyncio.to_thread(request.app.state.store.refresh)
    logger.info("Knowledge base refreshed: %d chunks", len(records))
    return RefreshResponse(message="Knowledge base reloaded", count=len(records))
