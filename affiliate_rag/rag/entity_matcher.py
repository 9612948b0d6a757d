"""
Entity Matcher
==============
쿼리가 특정 레코드 하나를 지칭하는지 판정하는 모듈

## 판정 순서
1. 정규화 문자열 포함 여부 (소문자, 구두점 → 공백, 공백 압축)
2. 원문(소문자) 부분 문자열 포함 여부
3. 단어 단위 매칭 + 의도 구문(intent phrase) 동시 충족

3번은 의도 구문이 반드시 있어야 합니다. "compare fashion and garden campaigns"
처럼 제목의 단어가 우연히 모두 들어간 넓은 질문이 단일 레코드 응답으로
잘못 라우팅되는 것을 막습니다.

## 사용 예
```python
matcher = EntityMatcher()
matcher.matches("tell me about Home & Garden", "Home & Garden")  # True
matcher.find_exact_match(query, {CorpusType.CAMPAIGN: campaigns})
```
"""

import logging
import re
from collections.abc import Iterable, Mapping

from affiliate_rag.domain.entities.record import CORPUS_ORDER, CorpusType, Record

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[\W_]+")


def normalize(text: str) -> str:
    """Lowercase, replace punctuation runs with one space, collapse whitespace, trim."""
    return _NON_ALNUM.sub(" ", text.lower()).strip()


class EntityMatcher:
    """
    단일 엔티티(레코드) 매칭기

    Stateless; one instance can be shared across queries.
    """

    INTENT_PHRASES: tuple[str, ...] = (
        "show me",
        "details",
        "campaign",
        "tell me about",
        "what is",
        "information",
    )

    # Title words this short are treated as stopwords ("&", "of", "a")
    MIN_SIGNIFICANT_WORD_LENGTH = 3

    def __init__(self, intent_phrases: Iterable[str] | None = None):
        if intent_phrases is not None:
            self.intent_phrases = tuple(p.lower() for p in intent_phrases)
        else:
            self.intent_phrases = self.INTENT_PHRASES

    def matches(self, query: str, candidate_title: str) -> bool:
        """
        쿼리가 후보 제목을 명확히 지칭하는지 판정

        Args:
            query: 사용자 쿼리
            candidate_title: 레코드 제목

        Returns:
            매칭 여부
        """
        norm_query = normalize(query)
        norm_title = normalize(candidate_title)

        if norm_title and norm_title in norm_query:
            return True

        raw_title = candidate_title.lower().strip()
        if raw_title and raw_title in query.lower():
            return True

        if not self._word_level_match(norm_query, norm_title):
            return False

        return self._has_intent_phrase(norm_query)

    def _word_level_match(self, norm_query: str, norm_title: str) -> bool:
        significant = [
            word
            for word in norm_title.split()
            if len(word) >= self.MIN_SIGNIFICANT_WORD_LENGTH
        ]
        if not significant:
            return False

        query_words = norm_query.split()
        return all(
            any(title_word in query_word for query_word in query_words)
            for title_word in significant
        )

    def _has_intent_phrase(self, norm_query: str) -> bool:
        return any(phrase in norm_query for phrase in self.intent_phrases)

    def find_exact_match(
        self,
        query: str,
        corpora: Mapping[CorpusType, list[Record]],
    ) -> Record | None:
        """
        코퍼스 순서(campaign → academy → general)대로 첫 매칭 레코드 반환

        Args:
            query: 사용자 쿼리
            corpora: 코퍼스별 레코드 목록

        Returns:
            첫 번째 매칭 레코드 또는 None
        """
        first_hit: Record | None = None
        hit_count = 0

        for corpus_type in CORPUS_ORDER:
            for record in corpora.get(corpus_type, []):
                if self.matches(query, record.title):
                    hit_count += 1
                    if first_hit is None:
                        first_hit = record

        if hit_count > 1:
            logger.debug(
                f"Entity match ambiguous: {hit_count} candidates, "
                f"using first '{first_hit.title}'"
            )
        return first_hit
