"""Per-chunk cache of query results."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from fuzzyfind.constants import QUERY_CACHE_MAX

if TYPE_CHECKING:
    from fuzzyfind.chunklist import Chunk


class ChunkCache:
    """Maps a chunk and a query string to the results found in that chunk.

    Only full chunks are cached, as a chunk that is still filling up can
    gain items that the cached results would miss.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cache: dict[Chunk, dict[str, Sequence[Any]]] = {}

    def clear(self) -> None:
        """Forget every cached result."""
        with self._lock:
            self._cache = {}

    def retire(self, *args: Chunk) -> None:
        """Forget the results cached for the given chunks."""
        with self._lock:
            for chunk in args:
                self._cache.pop(chunk, None)

    def add(self, chunk: Chunk, key: str, results: Sequence[Any]) -> None:
        """Cache ``results`` for ``key`` in ``chunk`` when that is worthwhile."""
        if not key or not chunk.is_full() or len(results) > QUERY_CACHE_MAX:
            return
        with self._lock:
            self._cache.setdefault(chunk, {})[key] = results

    def lookup(self, chunk: Chunk, key: str) -> Sequence[Any] | None:
        """Return the results cached for exactly ``key``, or None."""
        if not key or not chunk.is_full():
            return None
        with self._lock:
            queries = self._cache.get(chunk)
            if queries is None:
                return None
            return queries.get(key)

    def search(self, chunk: Chunk, key: str) -> Sequence[Any] | None:
        """Return the results cached for the longest prefix or suffix of ``key``.

        Such results are a superset of those for ``key`` itself.
        """
        if not key or not chunk.is_full():
            return None
        with self._lock:
            queries = self._cache.get(chunk)
            if queries is None:
                return None
            for cut in range(1, len(key)):
                for substring in (key[: len(key) - cut], key[cut:]):
                    cached = queries.get(substring)
                    if cached is not None:
                        return cached
        return None