"""Pytest configuration and fixtures shared by the test suite."""

from pathlib import Path
from typing import List

import pytest

from rag_pipeline.config import Settings, get_settings
from rag_pipeline.embedder import EmbeddingClient
from rag_pipeline.store import ChunkRecord
from tests.helpers import hash_embed, make_record, no_sleep


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def hash_embedder() -> EmbeddingClient:
    return EmbeddingClient(hash_embed, model_name="hash-test", sleep=no_sleep)


@pytest.fixture
def kb_file(tmp_path: Path) -> Path:
    return tmp_path / "knowledge_base.json"


@pytest.fixture
def settings(tmp_path: Path, kb_file: Path) -> Settings:
    return Settings(
        embedding_api_key      = "test-key",
        embedding_base_url     = None,
        embedding_model        = "hash-test",
        embedding_timeout      = 5.0,
        embedding_max_attempts = 3,
        embedding_retry_delay  = 0.0,
        kb_file                = kb_file,
        docs_dir               = tmp_path / "docs",
        sources_file           = None,
        chunk_size             = 1000,
        min_chunk_length       = 100,
        search_timeout         = 5.0,
    )


@pytest.fixture
def tiered_records() -> List[ChunkRecord]:
    """protocol "panic" x5 then core x10; higher index scores higher against [1, 0, 0]."""
    records = [
        make_record(f"clark_{i}", [1.0, 1.0 / (i + 1), 0.0], tier="protocol", category="panic")
        for i in range(5)
    ]
    records += [
        make_record(f"beck_{i}", [1.0, 0.0, 1.0 / (i + 1)])
        for i in range(10)
    ]
    return records
