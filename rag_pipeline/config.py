"""
config.py
=========
Environment-driven settings for the ingestion CLI and the retrieval server.

Values are read from the process environment (optionally seeded from a
``.env`` file at the project root). The embedding credential is mandatory;
everything else has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv  # type: ignore

from rag_pipeline.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_KB_FILE         = "./knowledge_base.json"
DEFAULT_DOCS_DIR        = "./docs"
DEFAULT_CHUNK_SIZE      = 1000
DEFAULT_MIN_CHUNK_LEN   = 100


def _clean_env(name: str, default: str = "") -> str:
    value = os.getenv(name, default)
    return value.strip().strip('"').strip("'")


def _positive_int(name: str, default: int) -> int:
    raw = _clean_env(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _positive_float(name: str, default: float, *, allow_zero: bool = False) -> float:
    raw = _clean_env(name, str(default))
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """All runtime configuration bundled in a single immutable object."""

    embedding_api_key: str
    embedding_base_url: Optional[str]
    embedding_model: str
    embedding_timeout: float
    embedding_max_attempts: int
    embedding_retry_delay: float

    kb_file: Path
    docs_dir: Path
    sources_file: Optional[Path]
    chunk_size: int
    min_chunk_length: int

    search_timeout: float
    frontend_url: Optional[str] = None


def load_environment() -> None:
    """Seed the process environment from PROJECT_ROOT/.env; existing variables win."""
    load_dotenv(PROJECT_ROOT / ".env")


def get_frontend_url() -> Optional[str]:
    """Extra CORS origin for the deployed frontend, if FRONTEND_URL is set."""
    load_environment()
    return _clean_env("FRONTEND_URL") or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache configuration from environment variables.

    Raises
    ------
    ConfigurationError
        if EMBEDDING_API_KEY is missing or any numeric setting is invalid.
    """
    load_environment()

    api_key = _clean_env("EMBEDDING_API_KEY")
    if not api_key or api_key.startswith("your_"):
        raise ConfigurationError(
            "EMBEDDING_API_KEY is not set. Add it to the environment or the .env file."
        )

    sources_file = _clean_env("KB_SOURCES_FILE")

    return Settings(
        embedding_api_key      = api_key,
        embedding_base_url     = _clean_env("EMBEDDING_BASE_URL") or None,
        embedding_model        = _clean_env("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
        embedding_timeout      = _positive_float("EMBEDDING_TIMEOUT", 30.0),
        embedding_max_attempts = _positive_int("EMBEDDING_MAX_ATTEMPTS", 3),
        embedding_retry_delay  = _positive_float("EMBEDDING_RETRY_DELAY", 2.0, allow_zero=True),
        kb_file                = Path(_clean_env("KB_FILE", DEFAULT_KB_FILE)).expanduser(),
        docs_dir               = Path(_clean_env("KB_DOCS_DIR", DEFAULT_DOCS_DIR)).expanduser(),
        sources_file           = Path(sources_file).expanduser() if sources_file else None,
        chunk_size             = _positive_int("KB_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
        min_chunk_length       = _positive_int("KB_MIN_CHUNK_LENGTH", DEFAULT_MIN_CHUNK_LEN),
        search_timeout         = _positive_float("SEARCH_TIMEOUT", 15.0),
        frontend_url           = get_frontend_url(),
    )
