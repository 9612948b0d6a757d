"""
Query Orchestrator
==================
쿼리 라우팅 및 하이브리드 랭킹 파이프라인의 진입점

## 상태 흐름
```
IDLE → PREPROCESSING → ENTITY_MATCHING ─┬─ EXACT_MATCH_FOUND ─┬─ COMBINING → FORMATTING → DONE
                                        └─ SCORING_FALLBACK ──┘
                         (어느 단계에서든) → ERROR
```

## 단계
1. **PREPROCESSING**: trim + 소문자화, 빈 쿼리는 EmptyQuery
2. **ENTITY_MATCHING**: campaign → academy 순서로 단일 레코드 지칭 여부 판정
3. **SCORING_FALLBACK**: 코퍼스별 키워드(토픽 의도 포함) ∥ 벡터 점수 (asyncio.gather)
4. **COMBINING**: 가중합 결합 후 result_limit로 절단
5. **FORMATTING**: 응답 포맷터 호출

저장소/스코어러 실패와 타임아웃은 예외로 전파하지 않고
fallback_used=True, confidence 0 결과로 변환합니다.

타임아웃은 조회~결합 단계에만 적용됩니다. 포맷팅은 별도 마감 시간(format_timeout)을
가지며, 포맷터가 실패하거나 마감을 넘기면 랭킹 결과는 유지한 채 템플릿 응답을 씁니다.

## 사용 예
```python
orchestrator = QueryOrchestrator(record_store=InMemoryRecordStore.with_sample_data())
result = await orchestrator.process_query("show me Summer Fashion Sale campaign details")
result.is_exact_match  # True
result.confidence      # 0.95
```
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.exceptions import EmptyQuery, QueryTimeout, StoreUnavailable
from affiliate_rag.domain.interfaces.formatter import ResponseFormatterProtocol
from affiliate_rag.domain.interfaces.record_store import RecordStoreProtocol
from affiliate_rag.domain.interfaces.vector_scorer import VectorScore, VectorScorerProtocol
from affiliate_rag.monitoring.logger import AssistantLogger
from affiliate_rag.monitoring.rag_metrics import RetrievalMetricsCollector
from affiliate_rag.rag.entity_matcher import EntityMatcher
from affiliate_rag.rag.hybrid_combiner import HybridCombiner, rerank
from affiliate_rag.rag.keyword_scorer import KeywordScorer
from affiliate_rag.rag.models import (
    EXACT_MATCH_SCORE,
    HybridWeights,
    QueryOptions,
    QueryResult,
    ScoredRecord,
)
from affiliate_rag.rag.response_formatter import TemplateResponseFormatter
from affiliate_rag.rag.vector_scorer import NullVectorScorer

logger = logging.getLogger(__name__)


class QueryState(str, Enum):
    """쿼리 처리 상태"""

    IDLE = "idle"
    PREPROCESSING = "preprocessing"
    ENTITY_MATCHING = "entity_matching"
    EXACT_MATCH_FOUND = "exact_match_found"
    SCORING_FALLBACK = "scoring_fallback"
    COMBINING = "combining"
    FORMATTING = "formatting"
    DONE = "done"
    ERROR = "error"


# 조회 대상 코퍼스 (general은 저장소 테이블이 없음)
SEARCHED_CORPORA: tuple[CorpusType, ...] = (CorpusType.CAMPAIGN, CorpusType.ACADEMY)

NO_RESULTS_CONFIDENCE = 0.2
MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.95


class QueryOrchestrator:
    """
    쿼리 오케스트레이터

    All collaborators are injected; defaults are the template formatter and
    the null vector scorer. One instance serves any number of queries and
    holds no per-query state.
    """

    def __init__(
        self,
        record_store: RecordStoreProtocol,
        vector_scorer: VectorScorerProtocol | None = None,
        formatter: ResponseFormatterProtocol | None = None,
        entity_matcher: EntityMatcher | None = None,
        keyword_scorer: KeywordScorer | None = None,
        combiner: HybridCombiner | None = None,
        metrics: RetrievalMetricsCollector | None = None,
        audit_logger: AssistantLogger | None = None,
        default_timeout: float = 10.0,
        format_timeout: float = 30.0,
        default_weights: HybridWeights | None = None,
        stub_weights: HybridWeights | None = None,
        default_result_limit: int = 5,
    ):
        """
        Args:
            record_store: 코퍼스 저장소
            vector_scorer: 벡터 스코어러 (기본: NullVectorScorer)
            formatter: 응답 포맷터 (기본: TemplateResponseFormatter)
            entity_matcher: 엔티티 매칭기
            keyword_scorer: 키워드 스코어러
            combiner: 하이브리드 결합기
            metrics: 런타임 메트릭 수집기 (선택)
            audit_logger: 감사 로거 (선택)
            default_timeout: 조회/스코어링 타임아웃, 옵션에 값이 없을 때 사용 (초)
            format_timeout: 응답 포맷팅 마감 시간 (초과 시 템플릿 응답)
            default_weights: 실제 벡터 스코어러 사용 시 가중치
            stub_weights: 스텁 벡터 스코어러 사용 시 가중치
            default_result_limit: 옵션이 없을 때 최대 결과 수
        """
        self.record_store = record_store
        self.vector_scorer = vector_scorer or NullVectorScorer()
        self.formatter = formatter or TemplateResponseFormatter()
        self.entity_matcher = entity_matcher or EntityMatcher()
        self.keyword_scorer = keyword_scorer or KeywordScorer()
        self.combiner = combiner or HybridCombiner()
        self.metrics = metrics
        self.audit_logger = audit_logger
        self.default_timeout = default_timeout
        self.format_timeout = format_timeout
        self._template_formatter = TemplateResponseFormatter()
        self.default_weights = default_weights or HybridWeights(0.7, 0.3)
        self.stub_weights = stub_weights or HybridWeights(0.3, 0.7)
        self.default_result_limit = default_result_limit

    # =========================================================================
    # 쿼리 처리
    # =========================================================================

    async def process_query(
        self, raw_query: str, options: QueryOptions | None = None
    ) -> QueryResult:
        """
        쿼리 처리

        Args:
            raw_query: 사용자 입력 원문
            options: 호출 옵션 (결과 수, 가중치, 타임아웃)

        Returns:
            QueryResult (저장소/스코어링 실패 시에도 예외 없이 폴백 결과)

        Raises:
            EmptyQuery: 빈 쿼리 또는 공백만 있는 쿼리
        """
        start = time.perf_counter()
        options = options or QueryOptions(result_limit=self.default_result_limit)
        states: list[QueryState] = [QueryState.IDLE]

        states.append(QueryState.PREPROCESSING)
        query = self._preprocess(raw_query)

        timeout = options.timeout_seconds or self.default_timeout
        audit_context = self._audit_request(raw_query)

        try:
            result = await asyncio.wait_for(
                self._retrieve(raw_query, query, options, states),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            error = QueryTimeout(f"Query timed out after {timeout}s", timeout_seconds=timeout)
            logger.warning(f"{error} (query='{raw_query[:50]}')")
            result = self._fallback_result(raw_query, error, states)
        except StoreUnavailable as e:
            logger.warning(f"Record store unavailable ({e.corpus_type}): {e}")
            result = self._fallback_result(raw_query, e, states)
        except Exception as e:
            logger.error(f"Query processing failed: {e}", exc_info=True)
            result = self._fallback_result(raw_query, e, states)

        if result.fallback_used:
            result.response = await self._format_response(result)
        else:
            states.append(QueryState.FORMATTING)
            result.response = await self._format_response(result)
            states.append(QueryState.DONE)

        result.processing_time_ms = (time.perf_counter() - start) * 1000
        result.metadata["states"] = [state.value for state in states]

        self._record_outcome(audit_context, result)
        return result

    def _preprocess(self, raw_query: str) -> str:
        query = (raw_query or "").strip().lower()
        if not query:
            raise EmptyQuery()
        return query

    async def _retrieve(
        self,
        raw_query: str,
        query: str,
        options: QueryOptions,
        states: list[QueryState],
    ) -> QueryResult:
        corpora = await self._fetch_corpora()

        states.append(QueryState.ENTITY_MATCHING)
        exact = self.entity_matcher.find_exact_match(query, corpora)

        if exact is not None:
            states.append(QueryState.EXACT_MATCH_FOUND)
            states.append(QueryState.COMBINING)
            result = QueryResult(
                query=raw_query,
                matched_records=[
                    ScoredRecord(
                        record=exact,
                        keyword_score=EXACT_MATCH_SCORE,
                        vector_score=None,
                        combined_score=EXACT_MATCH_SCORE,
                        rank=1,
                        source_index=corpora[exact.corpus_type].index(exact),
                    )
                ],
                is_exact_match=True,
                confidence=EXACT_MATCH_SCORE,
            )
            logger.info(f"Exact entity match: '{exact.title}' ({exact.corpus_type.value})")
        else:
            states.append(QueryState.SCORING_FALLBACK)
            weights = self._resolve_weights(options)
            keyword_results, vector_results = await self._score_corpora(query, corpora)

            states.append(QueryState.COMBINING)
            combined = self.combiner.combine(keyword_results, vector_results, weights)
            matched = rerank(combined, options.result_limit)

            result = QueryResult(
                query=raw_query,
                matched_records=matched,
                is_exact_match=False,
                confidence=self._confidence(matched),
                metadata={
                    "weights": {
                        "vector": weights.vector_weight,
                        "keyword": weights.keyword_weight,
                    },
                    "candidates": len(combined),
                    "topics": [
                        corpus_type.value
                        for corpus_type in corpora
                        if self.keyword_scorer.matches_topic(query, corpus_type)
                    ],
                },
            )
            logger.info(
                f"Hybrid ranking: {len(combined)} candidates, returning {len(matched)} "
                f"(confidence={result.confidence:.2f})"
            )

        return result

    async def _fetch_corpora(self) -> dict[CorpusType, list[Record]]:
        fetched = await asyncio.gather(
            *(self.record_store.fetch_all(corpus_type) for corpus_type in SEARCHED_CORPORA)
        )
        return dict(zip(SEARCHED_CORPORA, fetched))

    async def _score_corpora(
        self, query: str, corpora: dict[CorpusType, list[Record]]
    ) -> tuple[list[ScoredRecord], list[ScoredRecord]]:
        """모든 코퍼스에 대해 키워드 ∥ 벡터 점수를 동시에 계산"""
        per_corpus = await asyncio.gather(
            *(self._score_corpus(query, corpora[corpus_type]) for corpus_type in corpora)
        )

        keyword_results: list[ScoredRecord] = []
        vector_results: list[ScoredRecord] = []
        for keyword_part, vector_part in per_corpus:
            keyword_results.extend(keyword_part)
            vector_results.extend(vector_part)
        return keyword_results, vector_results

    async def _score_corpus(
        self, query: str, corpus: list[Record]
    ) -> tuple[list[ScoredRecord], list[ScoredRecord]]:
        keyword_results, vector_scores = await asyncio.gather(
            self._keyword_score(query, corpus),
            self.vector_scorer.embed_and_score(query, corpus),
        )
        return keyword_results, self._to_scored(vector_scores, corpus)

    async def _keyword_score(self, query: str, corpus: list[Record]) -> list[ScoredRecord]:
        return self.keyword_scorer.score(query, corpus)

    def _to_scored(self, scores: list[VectorScore], corpus: list[Record]) -> list[ScoredRecord]:
        positions = {record.id: i for i, record in enumerate(corpus)}
        scored: list[ScoredRecord] = []
        for score in scores:
            index = positions.get(score.record_id)
            if index is None:
                logger.debug(f"Vector score for unknown record id '{score.record_id}' ignored")
                continue
            scored.append(
                ScoredRecord(
                    record=corpus[index],
                    keyword_score=0.0,
                    vector_score=score.vector_score,
                    combined_score=score.vector_score,
                    source_index=index,
                )
            )
        return scored

    def _resolve_weights(self, options: QueryOptions) -> HybridWeights:
        base = self.stub_weights if self.vector_scorer.is_stub else self.default_weights
        return HybridWeights(
            vector_weight=(
                options.vector_weight if options.vector_weight is not None else base.vector_weight
            ),
            keyword_weight=(
                options.keyword_weight
                if options.keyword_weight is not None
                else base.keyword_weight
            ),
        )

    @staticmethod
    def _confidence(matched: list[ScoredRecord]) -> float:
        if not matched:
            return NO_RESULTS_CONFIDENCE
        mean = sum(scored.combined_score for scored in matched) / len(matched)
        return min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, mean))

    @staticmethod
    def _fallback_result(
        raw_query: str, error: Exception, states: list[QueryState]
    ) -> QueryResult:
        states.append(QueryState.ERROR)
        result = QueryResult(
            query=raw_query,
            matched_records=[],
            is_exact_match=False,
            confidence=0.0,
            fallback_used=True,
            error=f"{type(error).__name__}: {error}",
        )
        return result

    async def _format_response(self, result: QueryResult) -> str:
        """포맷터 호출 (자체 마감 시간, 실패하거나 초과하면 템플릿 응답)"""
        try:
            return await asyncio.wait_for(
                self.formatter.format(result), timeout=self.format_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Formatter timed out after {self.format_timeout}s, using template response"
            )
        except Exception as e:
            logger.warning(f"Formatter failed, using template response: {e}")
        return self._template_formatter.render(result)

    def _audit_request(self, raw_query: str) -> dict[str, Any] | None:
        if self.audit_logger is None:
            return None
        try:
            return self.audit_logger.query_request(raw_query)
        except Exception as e:
            logger.warning(f"Audit request logging failed: {e}")
            return None

    def _record_outcome(self, audit_context: dict[str, Any] | None, result: QueryResult) -> None:
        """메트릭 + 감사 로그 기록 (실패해도 결과는 반환)"""
        if self.metrics is not None:
            try:
                self.metrics.record_query(result)
            except Exception as e:
                logger.warning(f"Recording query metrics failed: {e}")
        if audit_context is not None and self.audit_logger is not None:
            try:
                self.audit_logger.query_response(audit_context, result)
            except Exception as e:
                logger.warning(f"Audit response logging failed: {e}")

    # =========================================================================
    # 상태 / 통계
    # =========================================================================

    async def health_check(self) -> dict[str, Any]:
        """
        구성 요소 상태 확인

        Returns:
            {"status": healthy|degraded|unhealthy, "services": {...}, "timestamp": ...}
        """
        store_ok = True
        try:
            await asyncio.gather(
                *(self.record_store.count(corpus_type) for corpus_type in SEARCHED_CORPORA)
            )
        except Exception as e:
            logger.warning(f"Health check: record store unreachable: {e}")
            store_ok = False

        services = {
            "record_store": store_ok,
            "vector_scorer": not self.vector_scorer.is_stub,
            "formatter": not self.formatter.is_stub,
        }

        if not store_ok:
            status = "unhealthy"
        elif all(services.values()):
            status = "healthy"
        else:
            status = "degraded"

        return {
            "status": status,
            "services": services,
            "timestamp": time.time(),
        }

    async def get_stats(self) -> dict[str, Any]:
        """
        코퍼스별 레코드 수 + 런타임 메트릭

        Raises:
            StoreUnavailable: 저장소에 접근할 수 없을 때
        """
        counts = await asyncio.gather(
            *(self.record_store.count(corpus_type) for corpus_type in SEARCHED_CORPORA)
        )
        documents = {
            corpus_type.value: count for corpus_type, count in zip(SEARCHED_CORPORA, counts)
        }
        return {
            "documents": documents,
            "total_documents": sum(counts),
            "vector_scorer": type(self.vector_scorer).__name__,
            "formatter": type(self.formatter).__name__,
            "metrics": self.metrics.get_metrics() if self.metrics is not None else None,
        }
