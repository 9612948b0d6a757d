"""
Vector Scorers
==============
의미 기반 유사도 점수 계산기

- NullVectorScorer: 항상 빈 결과 (기본값, 벡터 신호 없음)
- EmbeddingVectorScorer: litellm 임베딩 + 코사인 유사도

HybridCombiner는 어느 구현이든 같은 계약으로 처리합니다.
"""

import logging

import numpy as np

from affiliate_rag.domain.entities.record import Record
from affiliate_rag.domain.exceptions import LLMAPIError, ScoringError
from affiliate_rag.domain.interfaces.vector_scorer import VectorScore
from affiliate_rag.rag.embedding_cache import (
    EmbeddingCacheProtocol,
    InMemoryEmbeddingCache,
    make_cache_key,
)
from affiliate_rag.shared.llm_retry import embedding_with_retry

logger = logging.getLogger(__name__)


class NullVectorScorer:
    """Vector scorer that reports no signal."""

    is_stub = True

    async def embed_and_score(self, query: str, corpus: list[Record]) -> list[VectorScore]:
        return []


class EmbeddingVectorScorer:
    """
    임베딩 기반 유사도 스코어러

    쿼리와 레코드(title + body)를 임베딩하고 코사인 유사도를 계산합니다.
    캐시에 없는 텍스트만 batch_size 단위로 임베딩 API를 호출합니다.

    사용 예:
        scorer = EmbeddingVectorScorer(model="text-embedding-3-small")
        scores = await scorer.embed_and_score("fashion deals", campaigns)
    """

    is_stub = False

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        cache: EmbeddingCacheProtocol | None = None,
        threshold: float = 0.7,
        limit: int = 10,
        batch_size: int = 10,
        api_key: str | None = None,
        max_retries: int = 3,
    ):
        """
        Args:
            model: 임베딩 모델명 (litellm 형식)
            cache: 임베딩 캐시 (기본: 메모리 캐시)
            threshold: 이 값 미만의 유사도는 제외
            limit: 코퍼스당 최대 결과 수
            batch_size: API 호출당 최대 텍스트 수
            api_key: API 키 (None이면 litellm 환경변수 사용)
            max_retries: 호출 재시도 횟수
        """
        self.model = model
        self.cache = cache or InMemoryEmbeddingCache()
        self.threshold = threshold
        self.limit = limit
        self.batch_size = batch_size
        self.api_key = api_key
        self.max_retries = max_retries

    async def embed_and_score(self, query: str, corpus: list[Record]) -> list[VectorScore]:
        if not query.strip() or not corpus:
            return []

        try:
            vectors = await self._embed_texts([query] + [record.content for record in corpus])
        except LLMAPIError as e:
            raise ScoringError(
                f"Embedding failed: {e}", scorer="embedding", details={"model": self.model}
            ) from e

        query_vector = vectors[0]
        if query_vector is None:
            return []

        scores: list[VectorScore] = []
        for record, record_vector in zip(corpus, vectors[1:]):
            if record_vector is None:
                continue
            similarity = cosine_similarity(query_vector, record_vector)
            if similarity >= self.threshold:
                scores.append(VectorScore(record_id=record.id, vector_score=similarity))

        scores.sort(key=lambda s: s.vector_score, reverse=True)
        logger.debug(
            f"Vector scores: {len(scores)}/{len(corpus)} above threshold {self.threshold}"
        )
        return scores[: self.limit]

    async def _embed_texts(self, texts: list[str]) -> list[list[float] | None]:
        """Embed texts, reusing cached vectors. Blank texts map to None."""
        vectors: list[list[float] | None] = [None] * len(texts)
        pending: list[tuple[int, str, str]] = []

        for i, text in enumerate(texts):
            if not text.strip():
                continue
            key = make_cache_key(self.model, text)
            cached = await self.cache.get(key)
            if cached is not None:
                vectors[i] = cached
            else:
                pending.append((i, text, key))

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start : start + self.batch_size]
            embedded = await embedding_with_retry(
                model=self.model,
                texts=[text for _, text, _ in batch],
                max_retries=self.max_retries,
                api_key=self.api_key,
            )
            for (i, _, key), vector in zip(batch, embedded):
                vectors[i] = vector
                await self.cache.put(key, vector)

        return vectors


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity clamped to [0, 1]. Zero vectors score 0."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(va, vb) / denom, 0.0, 1.0))
