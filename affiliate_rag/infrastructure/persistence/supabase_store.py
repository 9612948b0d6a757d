"""
Supabase Record Store
=====================
RecordStoreProtocol 구현 - Supabase(Postgres) 백엔드 (프로덕션)

campaigns / academy 테이블을 range() 페이지 단위로 모두 읽어옵니다.
"""

import asyncio
import logging

import httpx
from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import AsyncClient, create_async_client

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.exceptions import StoreUnavailable
from affiliate_rag.infrastructure.persistence.rows import TABLE_NAMES, records_from_rows

logger = logging.getLogger(__name__)

_CLIENT_ERRORS = (PostgrestAPIError, httpx.HTTPError, OSError)


class SupabaseRecordStore:
    """
    Supabase를 이용한 레코드 저장소

    클라이언트는 첫 조회 시 생성됩니다 (lazy). URL/키가 없으면 그 시점에
    StoreUnavailable이 발생합니다.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        page_size: int = 1000,
        client: AsyncClient | None = None,
    ):
        """
        Args:
            url: Supabase 프로젝트 URL
            key: anon 또는 service 키
            page_size: range() 페이지 크기
            client: 미리 생성된 클라이언트 (테스트용)
        """
        self.url = url
        self.key = key
        self.page_size = page_size
        self.client: AsyncClient | None = client
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        """Lazy load async client"""
        async with self._client_lock:
            if self.client is None:
                if not self.url or not self.key:
                    raise StoreUnavailable("Supabase URL and key are required")
                try:
                    self.client = await create_async_client(self.url, self.key)
                except _CLIENT_ERRORS as e:
                    raise StoreUnavailable(f"Cannot create Supabase client: {e}", cause=e) from e
        return self.client

    async def fetch_all(self, corpus_type: CorpusType) -> list[Record]:
        table = TABLE_NAMES.get(corpus_type)
        if table is None:
            return []

        client = await self._get_client()
        rows: list[dict] = []
        start = 0

        try:
            while True:
                response = await (
                    client.table(table)
                    .select("*")
                    .order("id")
                    .range(start, start + self.page_size - 1)
                    .execute()
                )
                page = response.data or []
                rows.extend(page)
                if len(page) < self.page_size:
                    break
                start += self.page_size
        except _CLIENT_ERRORS as e:
            logger.warning(f"Supabase fetch failed for {table}: {e}")
            raise StoreUnavailable(
                f"Failed to fetch {table}: {e}", corpus_type=corpus_type.value, cause=e
            ) from e

        records = records_from_rows(corpus_type, rows)
        logger.debug(f"Fetched {len(records)} rows from {table}")
        return records

    async def count(self, corpus_type: CorpusType) -> int:
        table = TABLE_NAMES.get(corpus_type)
        if table is None:
            return 0

        client = await self._get_client()
        try:
            response = await client.table(table).select("id", count="exact").limit(1).execute()
        except _CLIENT_ERRORS as e:
            raise StoreUnavailable(
                f"Failed to count {table}: {e}", corpus_type=corpus_type.value, cause=e
            ) from e
        return response.count or 0
