"""Tests for RetrievalMetricsCollector"""

import pytest

from affiliate_rag.monitoring.rag_metrics import QueryRecord, RetrievalMetricsCollector
from affiliate_rag.rag.models import QueryResult, ScoredRecord


def result(make_record, matched=0, exact=False, fallback=False, confidence=0.5, query="q"):
    return QueryResult(
        query=query,
        matched_records=[
            ScoredRecord(record=make_record(str(i), f"R{i}")) for i in range(matched)
        ],
        is_exact_match=exact,
        fallback_used=fallback,
        confidence=confidence,
        processing_time_ms=10.0,
    )


class TestQueryRecord:
    def test_is_empty(self):
        record = QueryRecord(
            query="q",
            matched_count=0,
            is_exact_match=False,
            fallback_used=False,
            confidence=0.2,
            processing_time_ms=1.0,
        )
        assert record.is_empty is True

    def test_fallback_not_counted_as_empty(self):
        record = QueryRecord(
            query="q",
            matched_count=0,
            is_exact_match=False,
            fallback_used=True,
            confidence=0.0,
            processing_time_ms=1.0,
        )
        assert record.is_empty is False


class TestRetrievalMetricsCollector:
    def test_empty_metrics(self):
        metrics = RetrievalMetricsCollector().get_metrics()
        assert metrics["total_queries"] == 0
        assert metrics["records_in_window"] == 0
        assert metrics["exact_match_rate"] == 0.0
        assert metrics["recent_queries"] == []

    def test_rates(self, make_record):
        collector = RetrievalMetricsCollector()
        collector.record_query(result(make_record, matched=1, exact=True, confidence=0.95))
        collector.record_query(result(make_record, matched=3, confidence=0.5))
        collector.record_query(result(make_record, confidence=0.2))
        collector.record_query(result(make_record, fallback=True, confidence=0.0))

        metrics = collector.get_metrics()
        assert metrics["total_queries"] == 4
        assert metrics["exact_match_rate"] == pytest.approx(0.25)
        assert metrics["fallback_rate"] == pytest.approx(0.25)
        assert metrics["empty_rate"] == pytest.approx(0.25)
        assert metrics["avg_confidence"] == pytest.approx(0.4125)
        assert metrics["avg_matched_records"] == pytest.approx(1.0)
        assert metrics["avg_processing_time_ms"] == pytest.approx(10.0)

    def test_window(self, make_record):
        collector = RetrievalMetricsCollector(window_size=2)
        for i in range(5):
            collector.record_query(result(make_record, query=f"query {i}"))

        metrics = collector.get_metrics()
        assert metrics["total_queries"] == 5
        assert metrics["records_in_window"] == 2
        assert metrics["recent_queries"] == ["query 3", "query 4"]

    def test_reset(self, make_record):
        collector = RetrievalMetricsCollector()
        collector.record_query(result(make_record))
        collector.reset()
        assert collector.get_metrics()["total_queries"] == 0
