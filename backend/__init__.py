"""
backend: FastAPI application package.

Routers: api/search.py, api/health.py
Schemas: schemas/response.py
Entry point: main.py → run with `uvicorn backend.main:app --reload`
"""
