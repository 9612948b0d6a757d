"""
Persistence Layer
=================
RecordStoreProtocol 구현체들

- SupabaseRecordStore: Supabase 백엔드 (프로덕션)
- JsonFileRecordStore: 로컬 JSON 파일 백엔드 (개발)
- InMemoryRecordStore: 메모리 고정 데이터 (테스트/데모)
- CachedRecordStore: TTL 캐시 래퍼
"""

from affiliate_rag.infrastructure.persistence.cached_store import CachedRecordStore
from affiliate_rag.infrastructure.persistence.json_store import JsonFileRecordStore
from affiliate_rag.infrastructure.persistence.memory_store import InMemoryRecordStore
from affiliate_rag.infrastructure.persistence.rows import record_from_row, records_from_rows
from affiliate_rag.infrastructure.persistence.supabase_store import SupabaseRecordStore

__all__ = [
    "CachedRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "SupabaseRecordStore",
    "record_from_row",
    "records_from_rows",
]
