"""Embedding cache with Protocol interface and two backends.

- InMemoryEmbeddingCache: dict-based, FIFO eviction (default)
- SQLiteEmbeddingCache: aiosqlite-backed, LRU eviction, survives restarts

Keys are derived from the embedding model name and the text, so switching
models never returns stale vectors.
"""

from __future__ import annotations

import hashlib
import time
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiosqlite
import numpy as np


def make_cache_key(model: str, text: str) -> str:
    """Stable cache key for (model, text)."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:32]
    return f"{model}_{digest}"


@runtime_checkable
class EmbeddingCacheProtocol(Protocol):
    """Protocol for embedding cache backends."""

    async def get(self, key: str) -> list[float] | None:
        """Return the cached vector or None."""
        ...

    async def put(self, key: str, embedding: list[float]) -> None:
        """Store a vector."""
        ...

    async def clear(self) -> None:
        """Drop every cached vector."""
        ...

    def get_stats(self) -> dict[str, float]:
        """Return size, max_size, hits, misses, hit_rate."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


class _HitCounter:
    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0

    @property
    def hit_rate(self) -> float:
        return self.hits / max(1, self.hits + self.misses)

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0


class InMemoryEmbeddingCache:
    """Dict-based cache. Oldest entry is evicted first once max_size is reached."""

    def __init__(self, max_size: int = 1000):
        self._cache: dict[str, list[float]] = {}
        self._max_size = max_size
        self._counter = _HitCounter()

    async def get(self, key: str) -> list[float] | None:
        embedding = self._cache.get(key)
        if embedding is None:
            self._counter.misses += 1
            return None
        self._counter.hits += 1
        return embedding

    async def put(self, key: str, embedding: list[float]) -> None:
        if key not in self._cache and len(self._cache) >= self._max_size:
            oldest = next(iter(self._cache))
            del self._cache[oldest]
        self._cache[key] = list(embedding)

    async def clear(self) -> None:
        self._cache.clear()
        self._counter.reset()

    def get_stats(self) -> dict[str, float]:
        return {
            "size": len(self._cache),
            "max_size": self._max_size,
            "hits": self._counter.hits,
            "misses": self._counter.misses,
            "hit_rate": self._counter.hit_rate,
        }

    async def close(self) -> None:
        self._cache.clear()


class SQLiteEmbeddingCache:
    """SQLite-backed cache with LRU eviction.

    Vectors are stored as float32 blobs. The connection is opened lazily on
    first access.
    """

    def __init__(self, db_path: str | Path = "data/embedding_cache.db", max_size: int = 10000):
        """
        Args:
            db_path: SQLite 파일 경로
            max_size: 최대 항목 수 (초과 시 가장 오래 사용되지 않은 항목 삭제)
        """
        self._db_path = Path(db_path)
        self._max_size = max_size
        self._db: aiosqlite.Connection | None = None
        self._size = 0
        self._counter = _HitCounter()

    async def _connection(self) -> aiosqlite.Connection:
        if self._db is not None:
            return self._db

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._db_path))
        await self._db.execute(
            """
            CREATE TABLE IF NOT EXISTS embeddings (
                key TEXT PRIMARY KEY,
                vector BLOB NOT NULL,
                last_accessed REAL NOT NULL
            )
            """
        )
        await self._db.execute(
            "CREATE INDEX IF NOT EXISTS idx_embeddings_last_accessed "
            "ON embeddings(last_accessed)"
        )
        await self._db.commit()
        self._size = await self._count()
        return self._db

    async def _count(self) -> int:
        cursor = await self._db.execute("SELECT COUNT(*) FROM embeddings")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def get(self, key: str) -> list[float] | None:
        db = await self._connection()
        cursor = await db.execute("SELECT vector FROM embeddings WHERE key = ?", (key,))
        row = await cursor.fetchone()
        if row is None:
            self._counter.misses += 1
            return None

        await db.execute(
            "UPDATE embeddings SET last_accessed = ? WHERE key = ?", (time.time(), key)
        )
        await db.commit()
        self._counter.hits += 1
        return np.frombuffer(row[0], dtype=np.float32).tolist()

    async def put(self, key: str, embedding: list[float]) -> None:
        db = await self._connection()
        blob = np.asarray(embedding, dtype=np.float32).tobytes()
        await db.execute(
            "INSERT OR REPLACE INTO embeddings (key, vector, last_accessed) VALUES (?, ?, ?)",
            (key, blob, time.time()),
        )

        self._size = await self._count()
        if self._size > self._max_size:
            await db.execute(
                """
                DELETE FROM embeddings WHERE key IN (
                    SELECT key FROM embeddings ORDER BY last_accessed ASC LIMIT ?
                )
                """,
                (self._size - self._max_size,),
            )
            self._size = self._max_size
        await db.commit()

    async def clear(self) -> None:
        db = await self._connection()
        await db.execute("DELETE FROM embeddings")
        await db.commit()
        self._size = 0
        self._counter.reset()

    def get_stats(self) -> dict[str, float]:
        # size reflects the last count seen by this process
        return {
            "size": self._size,
            "max_size": self._max_size,
            "hits": self._counter.hits,
            "misses": self._counter.misses,
            "hit_rate": self._counter.hit_rate,
        }

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None
