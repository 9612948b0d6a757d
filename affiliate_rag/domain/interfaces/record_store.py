"""
Record Store Protocol
=====================
코퍼스 레코드 저장소에 대한 추상 인터페이스

구현체:
- SupabaseRecordStore (affiliate_rag/infrastructure/persistence/supabase_store.py)
- JsonFileRecordStore (affiliate_rag/infrastructure/persistence/json_store.py)
- InMemoryRecordStore (affiliate_rag/infrastructure/persistence/memory_store.py)
- CachedRecordStore (affiliate_rag/infrastructure/persistence/cached_store.py)
"""

from typing import Protocol, runtime_checkable

from affiliate_rag.domain.entities.record import CorpusType, Record


@runtime_checkable
class RecordStoreProtocol(Protocol):
    """
    Record Store Protocol

    Returns full corpora. Filtering and scoring happen in memory inside the
    ranking engine; pagination is the store's own concern.

    Methods:
        fetch_all: 코퍼스 전체 조회
        count: 코퍼스 레코드 수 조회
    """

    async def fetch_all(self, corpus_type: CorpusType) -> list[Record]:
        """
        코퍼스의 모든 레코드를 조회합니다.

        Args:
            corpus_type: 조회할 코퍼스

        Returns:
            저장소가 반환한 순서 그대로의 레코드 목록

        Raises:
            StoreUnavailable: 백엔드에 접근할 수 없을 때
        """
        ...

    async def count(self, corpus_type: CorpusType) -> int:
        """
        코퍼스의 레코드 수를 반환합니다.

        Raises:
            StoreUnavailable: 백엔드에 접근할 수 없을 때
        """
        ...
