"""
Record Store Tests
==================
InMemoryRecordStore / JsonFileRecordStore / CachedRecordStore 테스트
"""

import json

import pytest

from affiliate_rag.domain.entities.record import CorpusType
from affiliate_rag.domain.exceptions import StoreUnavailable
from affiliate_rag.infrastructure.persistence.cached_store import CachedRecordStore
from affiliate_rag.infrastructure.persistence.json_store import JsonFileRecordStore
from affiliate_rag.infrastructure.persistence.memory_store import InMemoryRecordStore
from affiliate_rag.infrastructure.persistence.rows import SAMPLE_ROWS

# =========================================================================
# InMemoryRecordStore
# =========================================================================


class TestInMemoryRecordStore:
    @pytest.mark.asyncio
    async def test_sample_data(self):
        store = InMemoryRecordStore.with_sample_data()
        campaigns = await store.fetch_all(CorpusType.CAMPAIGN)
        assert [r.title for r in campaigns] == [
            "Summer Fashion Sale",
            "Tech Gadgets Promo",
            "Home & Garden",
        ]
        assert await store.count(CorpusType.ACADEMY) == 3

    @pytest.mark.asyncio
    async def test_unknown_corpus_is_empty(self):
        store = InMemoryRecordStore()
        assert await store.fetch_all(CorpusType.GENERAL) == []
        assert await store.count(CorpusType.GENERAL) == 0

    @pytest.mark.asyncio
    async def test_returns_copies(self, sample_store):
        first = await sample_store.fetch_all(CorpusType.CAMPAIGN)
        first.clear()
        assert len(await sample_store.fetch_all(CorpusType.CAMPAIGN)) == 3

    @pytest.mark.asyncio
    async def test_failure_injection(self, sample_store):
        sample_store.fail_with("backend down")
        with pytest.raises(StoreUnavailable) as exc_info:
            await sample_store.fetch_all(CorpusType.ACADEMY)
        assert exc_info.value.corpus_type == "academy"

        with pytest.raises(StoreUnavailable):
            await sample_store.count(CorpusType.CAMPAIGN)

    @pytest.mark.asyncio
    async def test_failure_cleared(self, sample_store):
        sample_store.fail_with("backend down")
        sample_store.fail_with(None)
        assert len(await sample_store.fetch_all(CorpusType.CAMPAIGN)) == 3

    @pytest.mark.asyncio
    async def test_fetch_count(self, sample_store):
        await sample_store.fetch_all(CorpusType.CAMPAIGN)
        await sample_store.fetch_all(CorpusType.ACADEMY)
        assert sample_store.fetch_count == 2


# =========================================================================
# JsonFileRecordStore
# =========================================================================


class TestJsonFileRecordStore:
    @pytest.fixture
    def data_dir(self, tmp_path):
        (tmp_path / "campaigns.json").write_text(
            json.dumps(SAMPLE_ROWS[CorpusType.CAMPAIGN]), encoding="utf-8"
        )
        return tmp_path

    @pytest.mark.asyncio
    async def test_fetch_all(self, data_dir):
        store = JsonFileRecordStore(data_dir)
        records = await store.fetch_all(CorpusType.CAMPAIGN)
        assert [r.id for r in records] == ["1", "2", "3"]
        assert records[0].attributes["commission_rate"] == 15
        assert records[0].body.startswith("High-converting")

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, data_dir):
        store = JsonFileRecordStore(data_dir)
        assert await store.fetch_all(CorpusType.ACADEMY) == []
        assert await store.count(CorpusType.ACADEMY) == 0

    @pytest.mark.asyncio
    async def test_general_has_no_table(self, data_dir):
        store = JsonFileRecordStore(data_dir)
        assert store.path_for(CorpusType.GENERAL) is None
        assert await store.fetch_all(CorpusType.GENERAL) == []

    @pytest.mark.asyncio
    async def test_count(self, data_dir):
        assert await JsonFileRecordStore(data_dir).count(CorpusType.CAMPAIGN) == 3

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "academy.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailable) as exc_info:
            await JsonFileRecordStore(tmp_path).fetch_all(CorpusType.ACADEMY)
        assert exc_info.value.corpus_type == "academy"

    @pytest.mark.asyncio
    async def test_non_list_raises(self, tmp_path):
        (tmp_path / "academy.json").write_text('{"id": 1}', encoding="utf-8")
        with pytest.raises(StoreUnavailable):
            await JsonFileRecordStore(tmp_path).fetch_all(CorpusType.ACADEMY)

    @pytest.mark.asyncio
    async def test_invalid_rows_skipped(self, tmp_path):
        rows = [{"id": 1, "title": "Ok"}, {"id": 2, "title": ""}, "garbage", {"title": "No id"}]
        (tmp_path / "academy.json").write_text(json.dumps(rows), encoding="utf-8")
        records = await JsonFileRecordStore(tmp_path).fetch_all(CorpusType.ACADEMY)
        assert [r.id for r in records] == ["1"]


# =========================================================================
# CachedRecordStore
# =========================================================================


class TestCachedRecordStore:
    @pytest.mark.asyncio
    async def test_caches_within_ttl(self, sample_store):
        store = CachedRecordStore(sample_store, ttl_seconds=60)
        await store.fetch_all(CorpusType.CAMPAIGN)
        await store.fetch_all(CorpusType.CAMPAIGN)
        assert sample_store.fetch_count == 1

    @pytest.mark.asyncio
    async def test_zero_ttl_always_refreshes(self, sample_store):
        store = CachedRecordStore(sample_store, ttl_seconds=0)
        await store.fetch_all(CorpusType.CAMPAIGN)
        await store.fetch_all(CorpusType.CAMPAIGN)
        assert sample_store.fetch_count == 2

    @pytest.mark.asyncio
    async def test_invalidate(self, sample_store):
        store = CachedRecordStore(sample_store)
        await store.fetch_all(CorpusType.CAMPAIGN)
        await store.fetch_all(CorpusType.ACADEMY)

        store.invalidate(CorpusType.CAMPAIGN)
        await store.fetch_all(CorpusType.CAMPAIGN)
        await store.fetch_all(CorpusType.ACADEMY)
        assert sample_store.fetch_count == 3

        store.invalidate()
        await store.fetch_all(CorpusType.ACADEMY)
        assert sample_store.fetch_count == 4

    @pytest.mark.asyncio
    async def test_failures_not_cached(self, sample_store):
        store = CachedRecordStore(sample_store)
        sample_store.fail_with("down")
        with pytest.raises(StoreUnavailable):
            await store.fetch_all(CorpusType.CAMPAIGN)

        sample_store.fail_with(None)
        assert len(await store.fetch_all(CorpusType.CAMPAIGN)) == 3

    @pytest.mark.asyncio
    async def test_count_delegates(self, sample_store):
        store = CachedRecordStore(sample_store)
        assert await store.count(CorpusType.CAMPAIGN) == 3
        assert sample_store.fetch_count == 0

    @pytest.mark.asyncio
    async def test_cached_list_is_copy(self, sample_store):
        store = CachedRecordStore(sample_store)
        first = await store.fetch_all(CorpusType.CAMPAIGN)
        first.clear()
        assert len(await store.fetch_all(CorpusType.CAMPAIGN)) == 3
