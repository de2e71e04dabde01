"""
api/health.py
=============
GET /health: liveness and readiness probe for the retrieval server.
"""

from fastapi import APIRouter, Request

from backend.schemas.response import HealthResponse

router = APIRouter()

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return service status and knowledge-base readiness."""
    state = request.app.state
    count = len(state.store)

    return HealthResponse(
        status               = "ok",
        knowledge_base_ready = count > 0,
        knowledge_base_count = count,
        knowledge_base_file  = str(state.store.path),
        embedding_model      = state.embedder.model_name,
        api_version          = API_VERSION,
    )
