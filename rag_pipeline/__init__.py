"""
rag_pipeline: clinical knowledge base and hierarchical retrieval.

Components:
  sources   : catalog of core / protocol source documents
  extractor : PDF → text (pypdf)
  chunker   : fixed-window chunking with a minimum-length filter
  embedder  : remote embedding client with bounded retry
  builder   : offline ingestion into a single JSON store (see ingest.py)
  store     : chunk records, persistence and the reloadable in-memory store
  similarity: exact cosine ranking
  retriever : protocol-first, core-fallback retrieval policy
"""
