"""
In-Memory Record Store
======================
RecordStoreProtocol 구현 - 메모리 고정 데이터 (테스트/데모용)
"""

import logging
from typing import Any

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.exceptions import StoreUnavailable
from affiliate_rag.infrastructure.persistence.rows import SAMPLE_ROWS, records_from_rows

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """
    메모리 레코드 저장소

    fail_with()로 장애를 주입하면 이후 모든 조회가 StoreUnavailable을
    발생시킵니다.
    """

    def __init__(self, corpora: dict[CorpusType, list[Record]] | None = None):
        self._corpora: dict[CorpusType, list[Record]] = {
            corpus_type: list(records) for corpus_type, records in (corpora or {}).items()
        }
        self._failure: StoreUnavailable | None = None
        self.fetch_count = 0

    @classmethod
    def from_rows(cls, rows: dict[CorpusType, list[dict[str, Any]]]) -> "InMemoryRecordStore":
        """테이블 행(dict)으로 생성"""
        return cls(
            {corpus_type: records_from_rows(corpus_type, r) for corpus_type, r in rows.items()}
        )

    @classmethod
    def with_sample_data(cls) -> "InMemoryRecordStore":
        """데모 지식 베이스 (캠페인 3개, 아카데미 3개)"""
        return cls.from_rows(SAMPLE_ROWS)

    def fail_with(self, error: StoreUnavailable | str | None) -> None:
        """장애 주입 (None이면 해제)"""
        if isinstance(error, str):
            error = StoreUnavailable(error)
        self._failure = error

    def _check_available(self, corpus_type: CorpusType) -> None:
        if self._failure is not None:
            if self._failure.corpus_type is None:
                self._failure.corpus_type = corpus_type.value
            raise self._failure

    async def fetch_all(self, corpus_type: CorpusType) -> list[Record]:
        self._check_available(corpus_type)
        self.fetch_count += 1
        return list(self._corpora.get(corpus_type, []))

    async def count(self, corpus_type: CorpusType) -> int:
        self._check_available(corpus_type)
        return len(self._corpora.get(corpus_type, []))
