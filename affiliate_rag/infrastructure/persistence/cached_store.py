"""
Cached Record Store
===================
임의의 RecordStoreProtocol 구현을 코퍼스별 TTL 캐시로 감쌉니다.

실패한 조회는 캐시하지 않습니다.
"""

import logging
import time

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.interfaces.record_store import RecordStoreProtocol

logger = logging.getLogger(__name__)


class CachedRecordStore:
    """TTL 캐시 래퍼"""

    def __init__(self, inner: RecordStoreProtocol, ttl_seconds: float = 60.0):
        self.inner = inner
        self.ttl_seconds = ttl_seconds
        self._cache: dict[CorpusType, tuple[float, list[Record]]] = {}

    async def fetch_all(self, corpus_type: CorpusType) -> list[Record]:
        entry = self._cache.get(corpus_type)
        if entry is not None:
            cached_at, records = entry
            if time.monotonic() - cached_at < self.ttl_seconds:
                return list(records)

        records = await self.inner.fetch_all(corpus_type)
        self._cache[corpus_type] = (time.monotonic(), list(records))
        logger.debug(f"Record cache refreshed: {corpus_type.value} ({len(records)} records)")
        return records

    async def count(self, corpus_type: CorpusType) -> int:
        return await self.inner.count(corpus_type)

    def invalidate(self, corpus_type: CorpusType | None = None) -> None:
        """캐시 무효화 (None이면 전체)"""
        if corpus_type is None:
            self._cache.clear()
        else:
            self._cache.pop(corpus_type, None)
