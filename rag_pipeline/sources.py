"""
sources.py
==========
Catalog of source documents that make up the clinical knowledge base.

The knowledge base is hierarchical:

  • core     : general reference material consulted for every query
  • protocol : disorder-specific treatment protocols, consulted first when
               the caller supplies a matching category (e.g. "panic")

The built-in catalog below can be replaced with a JSON manifest
(KB_SOURCES_FILE) holding a list of objects with the same field names.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from rag_pipeline.errors import ConfigurationError

logger = logging.getLogger(__name__)

TIER_CORE     = "core"
TIER_PROTOCOL = "protocol"
TIERS         = (TIER_CORE, TIER_PROTOCOL)


@dataclass(frozen=True)
class SourceDocument:
    """Static description of one document fed to the ingestion pipeline."""

    file: str                        # relative to the docs directory
    title: str
    id: str
    tier: str = TIER_CORE            # "core" | "protocol"
    category: Optional[str] = None   # disorder label, protocol tier only

    def __post_init__(self) -> None:
        if self.tier not in TIERS:
            raise ConfigurationError(
                f"Source '{self.id}' has unknown tier '{self.tier}' (expected one of {TIERS})"
            )
        if not self.id or not self.file:
            raise ConfigurationError("Source descriptors need both 'id' and 'file'")
        if self.category is not None and not isinstance(self.category, str):
            raise ConfigurationError(
                f"Source '{self.id}' category must be a string, got {self.category!r}"
            )
        if self.tier == TIER_CORE and self.category is not None:
            object.__setattr__(self, "category", None)


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

DEFAULT_SOURCES: List[SourceDocument] = [
    # Layer 1: universal core library
    SourceDocument(
        file  = "core/Questionamento_Socrático_para_Terapeutas_Aprenda_a_Pensar_e_a_Intervir.pdf",
        title = "Questionamento Socrático",
        id    = "socratico",
    ),
    SourceDocument(
        file  = "core/Psicoeducacao.pdf",
        title = "Psicoeducação",
        id    = "psicoeducacao",
    ),
    SourceDocument(
        file  = "core/TerapiaCognitivacomportamental3°EdiçãoJudithS.BECK.pdf",
        title = "TCC Beck 3ª Edição",
        id    = "beck",
    ),
    # Layer 2: disorder protocols are declared the same way, e.g.
    # SourceDocument(file="protocols/panic/clark_panic.pdf", title="Clark: Panic",
    #                id="clark_panic", tier=TIER_PROTOCOL, category="panic"),
]


def _from_dict(entry: Dict[str, Any]) -> SourceDocument:
    try:
        return SourceDocument(
            file     = str(entry["file"]),
            title    = str(entry.get("title") or entry["id"]),
            id       = str(entry["id"]),
            tier     = str(entry.get("tier", TIER_CORE)),
            category = entry.get("category"),
        )
    except KeyError as exc:
        raise ConfigurationError(f"Source entry is missing field {exc}: {entry!r}") from exc
    except (TypeError, AttributeError) as exc:
        raise ConfigurationError(f"Source entry must be a JSON object: {entry!r}") from exc


def load_sources(manifest: Optional[Path] = None) -> List[SourceDocument]:
    """
    Return the configured source catalog.

    Parameters
    ----------
    manifest : optional path to a JSON list of descriptors. When omitted the
               built-in DEFAULT_SOURCES are returned.

    Raises
    ------
    ConfigurationError on an unreadable manifest, malformed entries or
    duplicate ids.
    """
    if manifest is None:
        sources = list(DEFAULT_SOURCES)
    else:
        try:
            payload = json.loads(Path(manifest).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Cannot read sources manifest {manifest}: {exc}") from exc
        if not isinstance(payload, list):
            raise ConfigurationError(f"Sources manifest {manifest} must contain a JSON list")
        sources = [_from_dict(entry) for entry in payload]
        logger.info("Loaded %d source descriptors from %s", len(sources), manifest)

    seen: set = set()
    for source in sources:
        if source.id in seen:
            raise ConfigurationError(f"Duplicate source id '{source.id}'")
        seen.add(source.id)
    return sources
