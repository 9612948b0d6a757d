"""
Vector Scorer Protocol
======================
의미 기반(임베딩) 점수 계산기에 대한 추상 인터페이스

구현체:
- NullVectorScorer (affiliate_rag/rag/vector_scorer.py)
- EmbeddingVectorScorer (affiliate_rag/rag/vector_scorer.py)
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from affiliate_rag.domain.entities.record import Record


@dataclass(frozen=True)
class VectorScore:
    """Similarity of one record to the query, in [0, 1]."""

    record_id: str
    vector_score: float


@runtime_checkable
class VectorScorerProtocol(Protocol):
    """
    Vector Scorer Protocol

    An empty result means "no vector signal available"; the hybrid combiner
    then ranks on keyword scores alone.

    Attributes:
        is_stub: True when the scorer never produces a real signal
    """

    is_stub: bool

    async def embed_and_score(self, query: str, corpus: list[Record]) -> list[VectorScore]:
        """
        쿼리와 코퍼스 레코드 간 유사도를 계산합니다.

        Args:
            query: 전처리된 쿼리
            corpus: 한 코퍼스의 레코드 목록

        Returns:
            레코드별 유사도 목록 (신호가 없으면 빈 리스트)
        """
        ...
