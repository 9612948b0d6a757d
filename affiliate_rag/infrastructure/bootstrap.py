"""
Application Bootstrap & Dependency Injection Container
======================================================
애플리케이션 부트스트랩 및 의존성 주입 컨테이너

설정과 피처 플래그에 따라 모든 구성 요소를 생성하고 연결합니다.
전역 인스턴스는 두지 않으며, 호출자가 컨테이너를 보관합니다.
"""

import logging
from dataclasses import dataclass

from affiliate_rag.domain.entities.record import CorpusType
from affiliate_rag.domain.interfaces.formatter import ResponseFormatterProtocol
from affiliate_rag.domain.interfaces.record_store import RecordStoreProtocol
from affiliate_rag.domain.interfaces.vector_scorer import VectorScorerProtocol
from affiliate_rag.infrastructure.config.config_manager import AppConfig
from affiliate_rag.infrastructure.feature_flags import FeatureFlags
from affiliate_rag.infrastructure.persistence import (
    CachedRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
    SupabaseRecordStore,
)
from affiliate_rag.monitoring.logger import AssistantLogger
from affiliate_rag.monitoring.rag_metrics import RetrievalMetricsCollector
from affiliate_rag.rag.embedding_cache import (
    EmbeddingCacheProtocol,
    InMemoryEmbeddingCache,
    SQLiteEmbeddingCache,
)
from affiliate_rag.rag.keyword_scorer import KeywordScorer
from affiliate_rag.rag.models import HybridWeights
from affiliate_rag.rag.query_orchestrator import QueryOrchestrator
from affiliate_rag.rag.response_formatter import LLMResponseFormatter, TemplateResponseFormatter
from affiliate_rag.rag.vector_scorer import EmbeddingVectorScorer, NullVectorScorer

logger = logging.getLogger(__name__)

DEFAULT_RECORD_CACHE_TTL = 60.0


@dataclass
class ApplicationContainer:
    """
    Application Dependency Container

    Usage:
        container = await ApplicationContainer.create()
        result = await container.orchestrator.process_query("summer campaigns")
        await container.close()
    """

    config: AppConfig
    flags: FeatureFlags
    record_store: RecordStoreProtocol
    vector_scorer: VectorScorerProtocol
    formatter: ResponseFormatterProtocol
    metrics: RetrievalMetricsCollector
    orchestrator: QueryOrchestrator
    audit_logger: AssistantLogger | None = None
    embedding_cache: EmbeddingCacheProtocol | None = None

    @classmethod
    async def create(
        cls,
        config: AppConfig | None = None,
        flags: FeatureFlags | None = None,
        enable_audit: bool = True,
    ) -> "ApplicationContainer":
        """
        Create and wire the application container.

        Args:
            config: 설정 (None이면 환경변수에서 로드 + 검증)
            flags: 피처 플래그 (None이면 config/feature_flags.json)
            enable_audit: 감사 로거 사용 여부

        Returns:
            Initialized ApplicationContainer
        """
        logger.info("Creating ApplicationContainer...")

        config = config or AppConfig.from_env_validated(fail_fast=True)
        flags = flags or FeatureFlags(config.config_path / "feature_flags.json")

        record_store = build_record_store(config, flags)
        embedding_cache = build_embedding_cache(config, flags)
        vector_scorer = build_vector_scorer(config, flags, embedding_cache)
        formatter = build_formatter(config, flags)
        metrics = RetrievalMetricsCollector()
        audit_logger = AssistantLogger(log_dir=config.logs_path) if enable_audit else None

        ranking = config.ranking
        orchestrator = QueryOrchestrator(
            record_store=record_store,
            vector_scorer=vector_scorer,
            formatter=formatter,
            keyword_scorer=KeywordScorer(
                base_scores={
                    CorpusType.CAMPAIGN: ranking.campaign_base_score,
                    CorpusType.ACADEMY: ranking.academy_base_score,
                    CorpusType.GENERAL: ranking.general_base_score,
                },
                decay=ranking.keyword_decay,
                topic_keywords={
                    CorpusType.CAMPAIGN: ranking.campaign_topic_keywords,
                    CorpusType.ACADEMY: ranking.academy_topic_keywords,
                },
            ),
            metrics=metrics,
            audit_logger=audit_logger,
            default_timeout=config.query_timeout_seconds,
            format_timeout=config.format_timeout_seconds,
            default_weights=HybridWeights(ranking.vector_weight, ranking.keyword_weight),
            stub_weights=HybridWeights(ranking.stub_vector_weight, ranking.stub_keyword_weight),
            default_result_limit=config.result_limit,
        )

        logger.info(
            f"ApplicationContainer created: store={type(record_store).__name__}, "
            f"vector_scorer={type(vector_scorer).__name__}, formatter={type(formatter).__name__}"
        )
        return cls(
            config=config,
            flags=flags,
            record_store=record_store,
            vector_scorer=vector_scorer,
            formatter=formatter,
            metrics=metrics,
            orchestrator=orchestrator,
            audit_logger=audit_logger,
            embedding_cache=embedding_cache,
        )

    async def close(self) -> None:
        """리소스 정리"""
        if self.embedding_cache is not None:
            await self.embedding_cache.close()


def build_record_store(config: AppConfig, flags: FeatureFlags) -> RecordStoreProtocol:
    """DATA_SOURCE에 따른 저장소 생성 (필요 시 TTL 캐시로 감쌈)"""
    if config.data_source == "supabase":
        store: RecordStoreProtocol = SupabaseRecordStore(
            url=config.supabase_url, key=config.supabase_key
        )
    elif config.data_source == "json":
        store = JsonFileRecordStore(config.data_path)
    elif config.data_source == "memory":
        store = InMemoryRecordStore.with_sample_data()
    else:
        raise ValueError(f"Unknown data source: {config.data_source}")

    if flags.use_record_cache() or config.record_cache_ttl_seconds > 0:
        ttl = config.record_cache_ttl_seconds or DEFAULT_RECORD_CACHE_TTL
        store = CachedRecordStore(store, ttl_seconds=ttl)
    return store


def build_embedding_cache(
    config: AppConfig, flags: FeatureFlags
) -> EmbeddingCacheProtocol | None:
    if not flags.use_embedding_scorer():
        return None
    if flags.use_sqlite_embedding_cache():
        return SQLiteEmbeddingCache(db_path=config.data_path / "embedding_cache.db")
    return InMemoryEmbeddingCache()


def build_vector_scorer(
    config: AppConfig,
    flags: FeatureFlags,
    cache: EmbeddingCacheProtocol | None = None,
) -> VectorScorerProtocol:
    if not flags.use_embedding_scorer():
        return NullVectorScorer()
    if not config.openai_api_key:
        logger.warning("Embedding scorer enabled but OPENAI_API_KEY is missing; using null scorer")
        return NullVectorScorer()
    return EmbeddingVectorScorer(
        model=config.embedding_model,
        cache=cache,
        threshold=config.ranking.vector_threshold,
        limit=config.ranking.vector_limit,
        api_key=config.openai_api_key,
    )


def build_formatter(config: AppConfig, flags: FeatureFlags) -> ResponseFormatterProtocol:
    if flags.use_llm_formatter():
        return LLMResponseFormatter(model=config.llm_model, api_key=config.openai_api_key)
    return TemplateResponseFormatter()
