"""Tests for environment-driven settings and the source catalog."""

import json
from pathlib import Path

import pytest

from rag_pipeline.config import get_settings
from rag_pipeline.errors import ConfigurationError
from rag_pipeline.sources import DEFAULT_SOURCES, SourceDocument, load_sources

_ENV_VARS = [
    "EMBEDDING_API_KEY", "EMBEDDING_BASE_URL", "EMBEDDING_MODEL", "EMBEDDING_TIMEOUT",
    "EMBEDDING_MAX_ATTEMPTS", "EMBEDDING_RETRY_DELAY", "KB_FILE", "KB_DOCS_DIR",
    "KB_SOURCES_FILE", "KB_CHUNK_SIZE", "KB_MIN_CHUNK_LENGTH", "SEARCH_TIMEOUT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    clean_env.setenv("EMBEDDING_API_KEY", ' "sk-test" ')
    settings = get_settings()

    assert settings.embedding_api_key == "sk-test"
    assert settings.embedding_base_url is None
    assert settings.embedding_max_attempts == 3
    assert settings.embedding_retry_delay == 2.0
    assert settings.chunk_size == 1000
    assert settings.min_chunk_length == 100
    assert settings.kb_file == Path("knowledge_base.json")
    assert settings.sources_file is None


def test_overrides(clean_env, tmp_path):
    clean_env.setenv("EMBEDDING_API_KEY", "sk-test")
    clean_env.setenv("EMBEDDING_BASE_URL", "https://example.invalid/v1")
    clean_env.setenv("KB_CHUNK_SIZE", "500")
    clean_env.setenv("KB_FILE", str(tmp_path / "kb.json"))
    clean_env.setenv("KB_SOURCES_FILE", str(tmp_path / "sources.json"))
    settings = get_settings()

    assert settings.embedding_base_url == "https://example.invalid/v1"
    assert settings.chunk_size == 500
    assert settings.kb_file == tmp_path / "kb.json"
    assert settings.sources_file == tmp_path / "sources.json"


@pytest.mark.parametrize("value", ["", "your_api_key_here"])
def test_missing_credential_is_fatal(clean_env, value):
    clean_env.setenv("EMBEDDING_API_KEY", value)
    with pytest.raises(ConfigurationError):
        get_settings()


@pytest.mark.parametrize(
    "name, value",
    [("KB_CHUNK_SIZE", "0"), ("KB_CHUNK_SIZE", "big"), ("SEARCH_TIMEOUT", "-1"),
     ("EMBEDDING_MAX_ATTEMPTS", "0")],
)
def test_invalid_numbers_are_rejected(clean_env, name, value):
    clean_env.setenv("EMBEDDING_API_KEY", "sk-test")
    clean_env.setenv(name, value)
    with pytest.raises(ConfigurationError):
        get_settings()


def test_zero_retry_delay_allowed(clean_env):
    clean_env.setenv("EMBEDDING_API_KEY", "sk-test")
    clean_env.setenv("EMBEDDING_RETRY_DELAY", "0")
    assert get_settings().embedding_retry_delay == 0.0


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def test_default_catalog_is_core_library():
    sources = load_sources()
    assert [s.id for s in sources] == ["socratico", "psicoeducacao", "beck"]
    assert all(s.tier == "core" for s in sources)
    assert sources == DEFAULT_SOURCES


def test_manifest_replaces_catalog(tmp_path):
    manifest = tmp_path / "sources.json"
    manifest.write_text(json.dumps([
        {"file": "core/beck.pdf", "title": "Beck", "id": "beck"},
        {"file": "protocols/panic/clark.pdf", "title": "Clark", "id": "clark",
         "tier": "protocol", "category": "panic"},
    ]), encoding="utf-8")

    sources = load_sources(manifest)

    assert [s.id for s in sources] == ["beck", "clark"]
    assert sources[1].category == "panic"


def test_core_entries_drop_category():
    assert SourceDocument(file="a.pdf", title="A", id="a", category="panic").category is None


@pytest.mark.parametrize(
    "payload",
    [
        {"file": "a.pdf"},
        [{"file": "a.pdf", "title": "A", "id": "a", "tier": "appendix"}],
        [{"file": "a.pdf", "id": "a"}, {"file": "b.pdf", "id": "a"}],
        [{"title": "no file", "id": "x"}],
        ["not-an-object"],
        [{"file": "p.pdf", "id": "p", "tier": "protocol", "category": 5}],
    ],
)
def test_bad_manifests_are_configuration_errors(tmp_path, payload):
    manifest = tmp_path / "sources.json"
    manifest.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_sources(manifest)


def test_unreadable_manifest(tmp_path):
    with pytest.raises(ConfigurationError):
        load_sources(tmp_path / "missing.json")
