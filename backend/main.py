"""
main.py
=======
FastAPI application entry point for the knowledge-base retrieval server.

Run locally:
  uvicorn backend.main:app --reload --port 3001

The lifespan handler validates configuration (a missing embedding credential
aborts startup), builds the embedding client and loads the knowledge base
once, before the first request. Each embedding call made by the server is
capped at SEARCH_TIMEOUT so an abandoned search does not hold a worker thread
for the full EMBEDDING_TIMEOUT.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.health import API_VERSION, router as health_router
from backend.api.search import router as search_router
from rag_pipeline.config import Settings, get_frontend_url, get_settings
from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.store import KnowledgeStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise settings, embedder and knowledge base before first request."""
    logger.info("Knowledge base server starting up…")
    state = app.state

    if state.settings is None:
        state.settings = get_settings()
    if state.embedder is None:
        state.embedder = EmbeddingClient.from_settings(
            state.settings,
            timeout=min(state.settings.embedding_timeout, state.settings.search_timeout),
        )
    if state.store is None:
        state.store = KnowledgeStore(state.settings.kb_file)

    state.store.load()
    logger.info("Ready. %d chunks available for search.", len(state.store))
    yield

    logger.info("Knowledge base server shutting down.")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    *,
    settings: Optional[Settings] = None,
    embedder: Optional[EmbeddingClient] = None,
    store: Optional[KnowledgeStore] = None,
) -> FastAPI:
    """
    Build the application. Collaborators left as None are created from the
    environment at startup.
    """
    app = FastAPI(
        title       = "Clinical Knowledge Base API",
        description = (
            "Hierarchical semantic search over embedded clinical reference "
            "texts: disorder protocols first, core library as fallback."
        ),
        version     = API_VERSION,
        docs_url    = "/docs",
        redoc_url   = "/redoc",
        lifespan    = lifespan,
    )
    app.state.settings = settings
    app.state.embedder = embedder
    app.state.store    = store

    # ── CORS ──────────────────────────────────────────────────────────────
    origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]
    frontend_url = settings.frontend_url if settings is not None else get_frontend_url()
    if frontend_url:
        origins.append(frontend_url)
    app.add_middleware(
        CORSMiddleware,
        allow_origins     = origins,
        allow_credentials = True,
        allow_methods     = ["*"],
        allow_headers     = ["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────
    app.include_router(health_router)
    app.include_router(search_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3001")))
