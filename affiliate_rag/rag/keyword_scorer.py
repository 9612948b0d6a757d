"""
Keyword Scorer
==============
대소문자 무시 부분 문자열 매칭 + 토픽 의도 기반 점수 계산

- 포함 조건: query ⊂ title 또는 query ⊂ body (소문자 비교)
- 토픽 의도: 쿼리에 코퍼스 토픽 키워드가 있으면 코퍼스 전체 포함
  campaign: "campaign", "commission" / academy: "learn", "tutorial", "academy"
- 점수: 코퍼스별 기본 점수 - 감쇠 × 필터링 후 위치 (0 이상으로 clamp)
  campaign 0.80, academy 0.75, general 0.70 / 감쇠 0.05
"""

import logging
from collections.abc import Iterable, Mapping

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.rag.models import ScoredRecord

logger = logging.getLogger(__name__)


class KeywordScorer:
    """
    키워드 점수 계산기

    Base scores, decay and topic keywords are tunable; the defaults
    reproduce the production ranking.
    """

    DEFAULT_BASE_SCORES: dict[CorpusType, float] = {
        CorpusType.CAMPAIGN: 0.80,
        CorpusType.ACADEMY: 0.75,
        CorpusType.GENERAL: 0.70,
    }
    DEFAULT_DECAY = 0.05

    TOPIC_KEYWORDS: dict[CorpusType, tuple[str, ...]] = {
        CorpusType.CAMPAIGN: ("campaign", "commission"),
        CorpusType.ACADEMY: ("learn", "tutorial", "academy"),
    }

    def __init__(
        self,
        base_scores: dict[CorpusType, float] | None = None,
        decay: float = DEFAULT_DECAY,
        topic_keywords: Mapping[CorpusType, Iterable[str]] | None = None,
    ):
        """
        Args:
            base_scores: 코퍼스별 기본 점수 (누락된 코퍼스는 기본값 사용)
            decay: 필터링된 목록에서 위치당 감점
            topic_keywords: 코퍼스별 토픽 키워드 (None이면 기본값, 빈 매핑이면 비활성)
        """
        self.base_scores = {**self.DEFAULT_BASE_SCORES, **(base_scores or {})}
        self.decay = decay
        source = self.TOPIC_KEYWORDS if topic_keywords is None else topic_keywords
        self.topic_keywords: dict[CorpusType, tuple[str, ...]] = {
            corpus_type: tuple(k.lower() for k in keywords if k.strip())
            for corpus_type, keywords in source.items()
        }

    def matches_topic(self, query: str, corpus_type: CorpusType) -> bool:
        """쿼리가 코퍼스 전체를 묻는 토픽 질문인지 판정"""
        needle = query.lower()
        return any(keyword in needle for keyword in self.topic_keywords.get(corpus_type, ()))

    def score(self, query: str, corpus: list[Record]) -> list[ScoredRecord]:
        """
        코퍼스 레코드에 키워드 점수 부여

        Args:
            query: 쿼리 (내부에서 소문자 비교)
            corpus: 한 코퍼스의 레코드 (저장소 순서)

        Returns:
            매칭된 레코드의 ScoredRecord 목록 (점수 내림차순, rank 1..N)
        """
        needle = query.lower()
        if not needle.strip():
            return []

        topic_hits: dict[CorpusType, bool] = {}
        results: list[ScoredRecord] = []
        for source_index, record in enumerate(corpus):
            corpus_type = record.corpus_type
            if corpus_type not in topic_hits:
                topic_hits[corpus_type] = self.matches_topic(needle, corpus_type)

            name_match = needle in record.title.lower()
            body_match = needle in record.body.lower()
            if not (topic_hits[corpus_type] or name_match or body_match):
                continue

            position = len(results)
            keyword_score = self._score_at(corpus_type, position)
            results.append(
                ScoredRecord(
                    record=record,
                    keyword_score=keyword_score,
                    vector_score=None,
                    combined_score=keyword_score,
                    rank=position + 1,
                    source_index=source_index,
                )
            )

        if results:
            topics = [c.value for c, hit in topic_hits.items() if hit]
            logger.debug(
                f"Keyword matches: {len(results)}/{len(corpus)} "
                f"({results[0].record.corpus_type.value}, topic={topics or None})"
            )
        return results

    def _score_at(self, corpus_type: CorpusType, position: int) -> float:
        base = self.base_scores.get(corpus_type, self.DEFAULT_BASE_SCORES[CorpusType.GENERAL])
        return min(1.0, max(0.0, base - self.decay * position))
