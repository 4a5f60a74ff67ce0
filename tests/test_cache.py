from fuzzyfind.cache import ChunkCache
from fuzzyfind.chunklist import Chunk
from fuzzyfind.constants import CHUNK_SIZE, QUERY_CACHE_MAX
from fuzzyfind.item import Item


def full_chunk() -> Chunk:
    return Chunk([Item(text=f"item {i}") for i in range(CHUNK_SIZE)])


def test_chunk_cache_carried_cases():
    cache = ChunkCache()
    chunk1 = Chunk()
    chunk2 = full_chunk()
    items1 = ["r1"]
    items2 = ["r1", "r2"]
    cache.add(chunk1, "foo", items1)
    cache.add(chunk2, "foo", items1)
    cache.add(chunk2, "bar", items2)

    assert cache.lookup(chunk1, "foo") is None
    assert cache.lookup(chunk2, "foo") == ["r1"]
    assert cache.lookup(chunk2, "bar") == ["r1", "r2"]
    assert cache.lookup(chunk1, "foobar") is None


def test_empty_key_not_cached():
    cache = ChunkCache()
    chunk = full_chunk()
    cache.add(chunk, "", ["x"])
    assert cache.lookup(chunk, "") is None


def test_low_selectivity_results_not_cached():
    cache = ChunkCache()
    chunk = full_chunk()
    cache.add(chunk, "a", ["x"] * (QUERY_CACHE_MAX + 1))
    assert cache.lookup(chunk, "a") is None
    cache.add(chunk, "b", ["x"] * QUERY_CACHE_MAX)
    assert len(cache.lookup(chunk, "b")) == QUERY_CACHE_MAX


def test_search_prefix_and_suffix():
    cache = ChunkCache()
    chunk = full_chunk()
    cache.add(chunk, "foo", ["foo-result"])
    assert cache.search(chunk, "foob") == ["foo-result"]
    assert cache.search(chunk, "xfoo") == ["foo-result"]
    assert cache.search(chunk, "bar") is None
    assert cache.search(Chunk(), "foob") is None


def test_retire_and_clear():
    cache = ChunkCache()
    chunk_a = full_chunk()
    chunk_b = full_chunk()
    cache.add(chunk_a, "q", ["a"])
    cache.add(chunk_b, "q", ["b"])
    cache.retire(chunk_a)
    assert cache.lookup(chunk_a, "q") is None
    assert cache.lookup(chunk_b, "q") == ["b"]
    cache.clear()
    assert cache.lookup(chunk_b, "q") is None