"""
Hybrid Combiner
===============
키워드 점수와 벡터 점수를 가중합으로 통합하여 단일 순위 목록 생성

## 알고리즘
1. (코퍼스, 레코드 ID) 기준 맵 생성
2. 벡터 결과: combined = vector_score × vector_weight
3. 키워드 결과: 기존 항목이면 keyword_score × keyword_weight 가산, 없으면 삽입
4. combined 내림차순 정렬 (동점: campaign → academy → general, 저장소 순서)
5. rank 1..N 부여

입력 ScoredRecord는 변경하지 않고 새 객체를 반환합니다.
"""

import logging

from affiliate_rag.domain.entities.record import CorpusType, corpus_priority
from affiliate_rag.rag.models import HybridWeights, ScoredRecord

logger = logging.getLogger(__name__)


class HybridCombiner:
    """벡터 + 키워드 결과 결합기"""

    def combine(
        self,
        keyword_results: list[ScoredRecord],
        vector_results: list[ScoredRecord],
        weights: HybridWeights,
    ) -> list[ScoredRecord]:
        """
        두 스코어러 결과를 가중합으로 병합

        Args:
            keyword_results: 키워드 스코어러 결과
            vector_results: 벡터 스코어러 결과 (vector_score 필수)
            weights: 가중치

        Returns:
            combined_score 내림차순, rank가 1..N으로 재부여된 목록
        """
        merged: dict[tuple[CorpusType, str], ScoredRecord] = {}

        for result in vector_results:
            if result.record_key in merged:
                continue
            vector_score = result.vector_score or 0.0
            merged[result.record_key] = ScoredRecord(
                record=result.record,
                keyword_score=0.0,
                vector_score=vector_score,
                combined_score=vector_score * weights.vector_weight,
                source_index=result.source_index,
            )

        seen_keyword: set[tuple[CorpusType, str]] = set()
        for result in keyword_results:
            if result.record_key in seen_keyword:
                continue
            seen_keyword.add(result.record_key)

            contribution = result.keyword_score * weights.keyword_weight
            existing = merged.get(result.record_key)
            if existing is not None:
                existing.keyword_score = result.keyword_score
                existing.combined_score += contribution
            else:
                merged[result.record_key] = ScoredRecord(
                    record=result.record,
                    keyword_score=result.keyword_score,
                    vector_score=None,
                    combined_score=contribution,
                    source_index=result.source_index,
                )

        ranked = sorted(
            merged.values(),
            key=lambda s: (
                -s.combined_score,
                corpus_priority(s.record.corpus_type),
                s.source_index,
            ),
        )
        for rank, scored in enumerate(ranked, 1):
            scored.rank = rank

        logger.debug(
            f"Hybrid combine: vector={len(vector_results)}, keyword={len(keyword_results)}, "
            f"merged={len(ranked)} (weights v={weights.vector_weight}, k={weights.keyword_weight})"
        )
        return ranked


def rerank(results: list[ScoredRecord], limit: int | None = None) -> list[ScoredRecord]:
    """Truncate an already-sorted list and reassign contiguous ranks."""
    kept = results[:limit] if limit is not None else list(results)
    for rank, scored in enumerate(kept, 1):
        scored.rank = rank
    return kept
