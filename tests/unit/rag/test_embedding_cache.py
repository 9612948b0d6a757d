"""Tests for embedding cache backends."""

import pytest

from affiliate_rag.rag.embedding_cache import (
    EmbeddingCacheProtocol,
    InMemoryEmbeddingCache,
    SQLiteEmbeddingCache,
    make_cache_key,
)


class TestCacheKey:
    def test_key_includes_model(self):
        assert make_cache_key("m1", "text").startswith("m1_")
        assert make_cache_key("m1", "text") != make_cache_key("m2", "text")

    def test_key_deterministic(self):
        assert make_cache_key("m", "hello") == make_cache_key("m", "hello")
        assert make_cache_key("m", "hello") != make_cache_key("m", "hello!")


class TestInMemoryEmbeddingCache:
    """Tests for InMemoryEmbeddingCache."""

    @pytest.mark.asyncio
    async def test_put_get(self):
        cache = InMemoryEmbeddingCache(max_size=100)
        await cache.put("key", [0.1, 0.2, 0.3])
        assert await cache.get("key") == [0.1, 0.2, 0.3]

    @pytest.mark.asyncio
    async def test_miss_returns_none(self):
        cache = InMemoryEmbeddingCache(max_size=100)
        assert await cache.get("nonexistent_key") is None

    @pytest.mark.asyncio
    async def test_fifo_eviction(self):
        """Oldest entry is evicted once max size is reached."""
        cache = InMemoryEmbeddingCache(max_size=3)
        await cache.put("key1", [1.0, 2.0])
        await cache.put("key2", [3.0, 4.0])
        await cache.put("key3", [5.0, 6.0])
        await cache.put("key4", [7.0, 8.0])

        assert await cache.get("key1") is None
        assert await cache.get("key4") == [7.0, 8.0]
        assert cache.get_stats()["size"] == 3

    @pytest.mark.asyncio
    async def test_stats(self):
        cache = InMemoryEmbeddingCache()
        await cache.put("a", [1.0])
        await cache.get("a")
        await cache.get("b")

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_clear(self):
        cache = InMemoryEmbeddingCache()
        await cache.put("a", [1.0])
        await cache.clear()
        assert cache.get_stats()["size"] == 0
        assert await cache.get("a") is None

    def test_conforms_to_protocol(self):
        assert isinstance(InMemoryEmbeddingCache(), EmbeddingCacheProtocol)


class TestSQLiteEmbeddingCache:
    """Tests for SQLiteEmbeddingCache."""

    @pytest.mark.asyncio
    async def test_put_get(self, tmp_path):
        cache = SQLiteEmbeddingCache(db_path=tmp_path / "cache.db")
        try:
            await cache.put("key", [0.5, 0.25, 1.0])
            assert await cache.get("key") == pytest.approx([0.5, 0.25, 1.0])
        finally:
            await cache.close()

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        db_path = tmp_path / "cache.db"
        first = SQLiteEmbeddingCache(db_path=db_path)
        await first.put("key", [1.0, 2.0])
        await first.close()

        second = SQLiteEmbeddingCache(db_path=db_path)
        try:
            assert await second.get("key") == pytest.approx([1.0, 2.0])
        finally:
            await second.close()

    @pytest.mark.asyncio
    async def test_evicts_beyond_max_size(self, tmp_path):
        cache = SQLiteEmbeddingCache(db_path=tmp_path / "cache.db", max_size=2)
        try:
            await cache.put("a", [1.0])
            await cache.put("b", [2.0])
            await cache.put("c", [3.0])
            assert cache.get_stats()["size"] == 2
        finally:
            await cache.close()

    @pytest.mark.asyncio
    async def test_miss_and_clear(self, tmp_path):
        cache = SQLiteEmbeddingCache(db_path=tmp_path / "cache.db")
        try:
            assert await cache.get("missing") is None
            await cache.put("a", [1.0])
            await cache.clear()
            assert await cache.get("a") is None
            assert cache.get_stats()["size"] == 0
        finally:
            await cache.close()

    def test_conforms_to_protocol(self, tmp_path):
        assert isinstance(SQLiteEmbeddingCache(db_path=tmp_path / "c.db"), EmbeddingCacheProtocol)
