"""
Runtime Retrieval Metrics Collector
===================================
쿼리 처리 결과를 런타임에 집계합니다.

수집 메트릭:
- total_queries: 총 쿼리 수
- exact_match_rate: 엔티티 단일 매칭 비율
- fallback_rate: 저장소/스코어링 실패로 폴백된 비율
- empty_rate: 결과 없음 비율
- avg_confidence / avg_matched_records / avg_processing_time_ms
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from affiliate_rag.rag.models import QueryResult

logger = logging.getLogger(__name__)


@dataclass
class QueryRecord:
    """단일 쿼리 기록"""

    query: str
    matched_count: int
    is_exact_match: bool
    fallback_used: bool
    confidence: float
    processing_time_ms: float
    timestamp: float = field(default_factory=time.time)

    @property
    def is_empty(self) -> bool:
        return self.matched_count == 0 and not self.fallback_used


class RetrievalMetricsCollector:
    """
    런타임 검색 메트릭 수집기

    Usage:
        collector = RetrievalMetricsCollector()
        collector.record_query(result)
        metrics = collector.get_metrics()
    """

    def __init__(self, window_size: int = 100):
        """
        Args:
            window_size: 메트릭 계산에 사용할 최근 기록 수
        """
        self._records: deque[QueryRecord] = deque(maxlen=window_size)
        self._total_queries = 0
        self._window_size = window_size

    def record_query(self, result: QueryResult) -> None:
        """쿼리 결과 기록"""
        self._total_queries += 1
        record = QueryRecord(
            query=result.query,
            matched_count=len(result.matched_records),
            is_exact_match=result.is_exact_match,
            fallback_used=result.fallback_used,
            confidence=result.confidence,
            processing_time_ms=result.processing_time_ms,
        )
        self._records.append(record)

        logger.debug(
            f"Query metric recorded: matched={record.matched_count}, "
            f"exact={record.is_exact_match}, fallback={record.fallback_used}"
        )

    def get_metrics(self) -> dict[str, Any]:
        """집계 메트릭 반환"""
        records = list(self._records)
        n = len(records)
        if n == 0:
            return {
                "total_queries": self._total_queries,
                "window_size": self._window_size,
                "records_in_window": 0,
                "exact_match_rate": 0.0,
                "fallback_rate": 0.0,
                "empty_rate": 0.0,
                "avg_confidence": 0.0,
                "avg_matched_records": 0.0,
                "avg_processing_time_ms": 0.0,
                "recent_queries": [],
            }

        return {
            "total_queries": self._total_queries,
            "window_size": self._window_size,
            "records_in_window": n,
            "exact_match_rate": round(sum(r.is_exact_match for r in records) / n, 4),
            "fallback_rate": round(sum(r.fallback_used for r in records) / n, 4),
            "empty_rate": round(sum(r.is_empty for r in records) / n, 4),
            "avg_confidence": round(sum(r.confidence for r in records) / n, 4),
            "avg_matched_records": round(sum(r.matched_count for r in records) / n, 2),
            "avg_processing_time_ms": round(sum(r.processing_time_ms for r in records) / n, 2),
            "recent_queries": [r.query[:50] for r in records[-5:]],
        }

    def reset(self) -> None:
        """메트릭 초기화"""
        self._records.clear()
        self._total_queries = 0
