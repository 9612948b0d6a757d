"""
Retrieval & Ranking Package
===========================

Query pipeline (composition, not inheritance):

    Query
     ├─ QueryOrchestrator     – 상태 머신, 타임아웃, 폴백 결과
     ├─ EntityMatcher         – 단일 레코드 지칭 판정 (exact short-circuit)
     │
     ├─ KeywordScorer         – 부분 문자열 매칭 점수 (코퍼스별 기본값 - 위치 감쇠)
     ├─ EmbeddingVectorScorer – litellm 임베딩 + 코사인 유사도 (NullVectorScorer 기본)
     ├─ HybridCombiner        – 벡터/키워드 가중합, 중복 제거, 순위 부여
     │
     └─ ResponseFormatter     – 템플릿 / LLM 응답 (ResponseTemplates 공유)
"""

# --- Stage 1: Routing ---
from .entity_matcher import EntityMatcher, normalize

# --- Stage 2: Scoring ---
from .embedding_cache import InMemoryEmbeddingCache, SQLiteEmbeddingCache
from .keyword_scorer import KeywordScorer
from .vector_scorer import EmbeddingVectorScorer, NullVectorScorer, cosine_similarity

# --- Stage 3: Combination ---
from .hybrid_combiner import HybridCombiner, rerank
from .models import HybridWeights, QueryOptions, QueryResult, ScoredRecord

# --- Stage 4: Response ---
from .response_formatter import LLMResponseFormatter, TemplateResponseFormatter
from .templates import ResponseTemplates

# --- Orchestration ---
from .query_orchestrator import QueryOrchestrator, QueryState

__all__ = [
    "EmbeddingVectorScorer",
    "EntityMatcher",
    "HybridCombiner",
    "HybridWeights",
    "InMemoryEmbeddingCache",
    "KeywordScorer",
    "LLMResponseFormatter",
    "NullVectorScorer",
    "QueryOptions",
    "QueryOrchestrator",
    "QueryResult",
    "QueryState",
    "ResponseTemplates",
    "SQLiteEmbeddingCache",
    "ScoredRecord",
    "TemplateResponseFormatter",
    "cosine_similarity",
    "normalize",
    "rerank",
]
