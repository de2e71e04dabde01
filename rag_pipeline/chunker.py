"""
chunker.py
==========
Split normalized document text into fixed-size, contiguous, non-overlapping
character windows.

Boundaries are purely positional: a window may cut a sentence in half.
Windows whose trimmed length falls below ``min_length`` are dropped because
they carry too little content to be worth an embedding call. The window
index is assigned before filtering, so chunk ids stay stable whatever the
threshold.
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple

_WHITESPACE = re.compile(r"\s+")


class Chunk(NamedTuple):
    index: int   # ordinal position of the window in the document
    text: str


def normalize_text(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE.sub(" ", text or "").strip()


class ChunkSequence:
    """
    Lazy, restartable view of a text as consecutive windows.

    Every call to ``iter()`` starts again from the beginning of the text;
    nothing is materialised up front.
    """

    def __init__(self, text: str, chunk_size: int, min_length: int = 0) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer")
        if min_length < 0:
            raise ValueError("min_length must not be negative")
        self.text = text
        self.chunk_size = chunk_size
        self.min_length = min_length

    @property
    def window_count(self) -> int:
        return -(-len(self.text) // self.chunk_size)

    def windows(self) -> Iterator[Chunk]:
        """Every window, including the ones the length filter would drop."""
        for index, start in enumerate(range(0, len(self.text), self.chunk_size)):
            yield Chunk(index, self.text[start : start + self.chunk_size])

    def __iter__(self) -> Iterator[Chunk]:
        for chunk in self.windows():
            if len(chunk.text.strip()) >= self.min_length:
                yield chunk


def split_text(text: str, chunk_size: int, min_length: int = 0) -> ChunkSequence:
    """Normalize ``text`` and return its chunk sequence."""
    return ChunkSequence(normalize_text(text), chunk_size, min_length)
