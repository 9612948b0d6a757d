"""
Ranking Models
==============
쿼리 처리 중에만 존재하는 결과 타입

- ScoredRecord: 레코드 + 키워드/벡터/결합 점수 + 순위
- QueryResult: 오케스트레이터 출력
- QueryOptions: 호출별 옵션 (결과 수, 가중치, 타임아웃)
- HybridWeights: 결합기 가중치
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from affiliate_rag.domain.entities.record import CorpusType, Record

EXACT_MATCH_SCORE = 0.95


@dataclass
class ScoredRecord:
    """Relevance scores of one record for one query."""

    record: Record
    keyword_score: float = 0.0
    vector_score: float | None = None
    combined_score: float = 0.0
    rank: int = 1
    source_index: int = 0  # position in the corpus as returned by the store

    @property
    def record_id(self) -> str:
        return self.record.id

    @property
    def record_key(self) -> tuple[CorpusType, str]:
        """Identity across corpora; ids are only unique within one corpus."""
        return (self.record.corpus_type, self.record.id)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환"""
        return {
            "id": self.record.id,
            "corpus_type": self.record.corpus_type.value,
            "title": self.record.title,
            "keyword_score": round(self.keyword_score, 4),
            "vector_score": round(self.vector_score, 4) if self.vector_score is not None else None,
            "combined_score": round(self.combined_score, 4),
            "rank": self.rank,
            "attributes": self.record.attributes,
        }


@dataclass(frozen=True)
class HybridWeights:
    """Weights applied to vector and keyword scores. Need not sum to 1."""

    vector_weight: float = 0.7
    keyword_weight: float = 0.3

    def __post_init__(self) -> None:
        if self.vector_weight < 0 or self.keyword_weight < 0:
            raise ValueError(
                f"weights must be non-negative: vector={self.vector_weight}, "
                f"keyword={self.keyword_weight}"
            )


class QueryOptions(BaseModel):
    """
    process_query 호출 옵션

    Attributes:
        result_limit: 반환할 최대 결과 수
        vector_weight: 벡터 점수 가중치 (None이면 오케스트레이터가 선택)
        keyword_weight: 키워드 점수 가중치 (None이면 오케스트레이터가 선택)
        timeout_seconds: 전체 처리 타임아웃 (None이면 설정 기본값)
    """

    result_limit: int = Field(default=5, ge=1, description="최대 결과 수")
    vector_weight: float | None = Field(default=None, ge=0, description="벡터 가중치")
    keyword_weight: float | None = Field(default=None, ge=0, description="키워드 가중치")
    timeout_seconds: float | None = Field(default=None, gt=0, description="타임아웃 (초)")


@dataclass
class QueryResult:
    """
    Output of QueryOrchestrator.process_query.

    Attributes:
        query: Original, untrimmed user input
        matched_records: Ranked records (never None, possibly empty)
        is_exact_match: True iff the entity matcher short-circuited
        confidence: Heuristic relevance estimate in [0, 1]
        fallback_used: True when retrieval failed and a degraded answer was produced
        response: Formatted display string
        error: Diagnostic message for failed queries
        processing_time_ms: Wall-clock processing time
        metadata: State trail, weights used and other diagnostics
    """

    query: str
    matched_records: list[ScoredRecord] = field(default_factory=list)
    is_exact_match: bool = False
    confidence: float = 0.0
    fallback_used: bool = False
    response: str = ""
    error: str | None = None
    processing_time_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def sources(self) -> list[str]:
        """Titles of matched records in rank order."""
        return [scored.record.title for scored in self.matched_records]

    @property
    def is_empty(self) -> bool:
        return not self.matched_records

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환"""
        return {
            "query": self.query,
            "response": self.response,
            "matched_records": [scored.to_dict() for scored in self.matched_records],
            "sources": self.sources,
            "is_exact_match": self.is_exact_match,
            "confidence": round(self.confidence, 3),
            "fallback_used": self.fallback_used,
            "error": self.error,
            "processing_time_ms": round(self.processing_time_ms, 1),
            "metadata": self.metadata,
        }
