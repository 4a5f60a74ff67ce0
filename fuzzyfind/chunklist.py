"""Input items stored in fixed-size chunks."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from fuzzyfind.cache import ChunkCache
from fuzzyfind.constants import CHUNK_SIZE
from fuzzyfind.item import Item

ItemBuilder = Callable[[Any], "Item | None"]
"""Turns raw input into an Item, or returns None to skip it."""


@dataclass(eq=False)
class Chunk:
    """Up to CHUNK_SIZE items; chunks compare and hash by identity."""

    items: list[Item] = field(default_factory=list)

    @property
    def count(self) -> int:
        """Number of items in the chunk."""
        return len(self.items)

    def push(self, builder: ItemBuilder, data: Any) -> bool:
        """Build an item from ``data`` and add it; False if the builder skipped it."""
        item = builder(data)
        if item is None:
            return False
        self.items.append(item)
        return True

    def is_full(self) -> bool:
        """Whether the chunk holds CHUNK_SIZE items."""
        return len(self.items) == CHUNK_SIZE

    def copy(self) -> Chunk:
        """Return a chunk with the same items that later pushes will not change."""
        return Chunk(list(self.items))


def count_items(chunks: Sequence[Chunk]) -> int:
    """Total number of items in ``chunks``."""
    if not chunks:
        return 0
    if len(chunks) == 1:
        return chunks[0].count
    # The first chunk may be partial after a tail was applied.
    return chunks[0].count + CHUNK_SIZE * (len(chunks) - 2) + chunks[-1].count


class ChunkList:
    """A growing list of chunks that can be read through snapshots."""

    def __init__(self, cache: ChunkCache, builder: ItemBuilder) -> None:
        self.chunks: list[Chunk] = []
        self.builder = builder
        self.cache = cache
        self._lock = threading.Lock()

    def push(self, data: Any) -> bool:
        """Add an item built from ``data``; False if the builder skipped it."""
        with self._lock:
            if not self.chunks or self.chunks[-1].is_full():
                self.chunks.append(Chunk())
            return self.chunks[-1].push(self.builder, data)

    def clear(self) -> None:
        """Drop every item."""
        with self._lock:
            self.chunks = []

    def snapshot(self, tail: int) -> tuple[list[Chunk], int, bool]:
        """Return an immutable view of the chunks, their item count and a change flag.

        A positive ``tail`` first discards all but the last ``tail`` items;
        the flag tells whether that removed anything.
        """
        with self._lock:
            changed = False
            if tail > 0 and count_items(self.chunks) > tail:
                changed = True
                self._keep_tail(tail)

            chunks = list(self.chunks)
            if chunks:
                if tail > 0 and len(chunks) > 1:
                    chunks[0] = chunks[0].copy()
                chunks[-1] = chunks[-1].copy()
            return chunks, count_items(chunks), changed

    def _keep_tail(self, tail: int) -> None:
        num_chunks = 0
        left = tail
        for chunk in reversed(self.chunks):
            if left <= 0:
                break
            num_chunks += 1
            left -= chunk.count

        min_index = len(self.chunks) - num_chunks
        self.cache.retire(*self.chunks[:min_index])
        kept = self.chunks[min_index:]

        left = tail
        for pos in range(len(kept) - 1, -1, -1):
            chunk = kept[pos]
            if chunk.count > left:
                kept[pos] = Chunk(chunk.items[chunk.count - left:])
                self.cache.retire(chunk)
                break
            left -= chunk.count
        self.chunks = kept