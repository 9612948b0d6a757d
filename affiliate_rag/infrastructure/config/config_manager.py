"""
Centralized Configuration Manager
=================================
모든 설정을 중앙에서 관리합니다.

주요 기능:
- 환경변수 및 JSON 파일(config/ranking.json)에서 설정 로드
- 시작 시 설정 검증 (validate)
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DATA_SOURCES = ("memory", "json", "supabase")


@dataclass
class RankingSettings:
    """
    랭킹 튜닝 값 (config/ranking.json)

    기본값은 운영 중인 랭킹 동작과 동일합니다.
    """

    campaign_base_score: float = 0.80
    academy_base_score: float = 0.75
    general_base_score: float = 0.70
    keyword_decay: float = 0.05
    vector_weight: float = 0.7
    keyword_weight: float = 0.3
    stub_vector_weight: float = 0.3
    stub_keyword_weight: float = 0.7
    vector_threshold: float = 0.7
    vector_limit: int = 10
    campaign_topic_keywords: list[str] = field(
        default_factory=lambda: ["campaign", "commission"]
    )
    academy_topic_keywords: list[str] = field(
        default_factory=lambda: ["learn", "tutorial", "academy"]
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RankingSettings":
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"[Config Warning] ranking.json: unknown keys ignored: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def weights(self) -> list[float]:
        return [
            self.vector_weight,
            self.keyword_weight,
            self.stub_vector_weight,
            self.stub_keyword_weight,
        ]


@dataclass
class AppConfig:
    """
    애플리케이션 설정

    환경변수와 설정 파일에서 로드합니다.
    """

    # Paths
    base_path: Path = field(default_factory=lambda: Path.cwd())
    data_path: Path = field(default_factory=lambda: Path.cwd() / "data")
    logs_path: Path = field(default_factory=lambda: Path.cwd() / "logs")
    config_path: Path = field(default_factory=lambda: Path.cwd() / "config")

    # Data source
    data_source: str = "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None

    # LLM / embeddings
    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-3-small"
    llm_model: str = "gpt-4o-mini"

    # Query processing
    result_limit: int = 5
    query_timeout_seconds: float = 10.0
    format_timeout_seconds: float = 30.0
    record_cache_ttl_seconds: float = 0.0

    # Ranking (from config/ranking.json)
    ranking: RankingSettings = field(default_factory=RankingSettings)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경변수에서 설정 로드"""
        config = cls()

        config.data_source = os.environ.get("DATA_SOURCE", "memory").strip().lower()
        config.supabase_url = os.environ.get("SUPABASE_URL")
        config.supabase_key = os.environ.get("SUPABASE_ANON_KEY")
        config.openai_api_key = os.environ.get("OPENAI_API_KEY")
        config.embedding_model = os.environ.get("EMBEDDING_MODEL", config.embedding_model)
        config.llm_model = os.environ.get("LLM_MODEL", config.llm_model)

        if os.environ.get("DATA_PATH"):
            config.data_path = Path(os.environ["DATA_PATH"])
        if os.environ.get("LOGS_PATH"):
            config.logs_path = Path(os.environ["LOGS_PATH"])
        if os.environ.get("CONFIG_PATH"):
            config.config_path = Path(os.environ["CONFIG_PATH"])

        config.result_limit = int(os.environ.get("RESULT_LIMIT", "5"))
        config.query_timeout_seconds = float(os.environ.get("QUERY_TIMEOUT_SECONDS", "10.0"))
        config.format_timeout_seconds = float(os.environ.get("FORMAT_TIMEOUT_SECONDS", "30.0"))
        config.record_cache_ttl_seconds = float(os.environ.get("RECORD_CACHE_TTL_SECONDS", "0"))

        # Load from config files
        config._load_ranking()

        return config

    def _load_ranking(self) -> None:
        """ranking.json 로드"""
        ranking_path = self.config_path / "ranking.json"
        if ranking_path.exists():
            with open(ranking_path, encoding="utf-8") as f:
                data = json.load(f)
            self.ranking = RankingSettings.from_dict(data.get("ranking", data))

    def validate(self) -> list[str]:
        """설정 검증

        필수/선택 설정의 유효성을 검사하고, 오류 목록을 반환합니다.
        빈 리스트 반환 시 모든 검증 통과.

        Returns:
            오류 메시지 목록 (빈 리스트 = 정상)
        """
        errors: list[str] = []
        warnings: list[str] = []

        # === 데이터 소스 검증 ===
        if self.data_source not in DATA_SOURCES:
            errors.append(
                f"DATA_SOURCE 오류: {', '.join(DATA_SOURCES)} 중 하나 필요, 현재 {self.data_source}"
            )
        elif self.data_source == "supabase" and not (self.supabase_url and self.supabase_key):
            errors.append("DATA_SOURCE=supabase 이지만 SUPABASE_URL/SUPABASE_ANON_KEY가 없습니다")
        elif self.data_source == "json" and not self.data_path.exists():
            warnings.append(f"data 디렉토리가 없습니다: {self.data_path}")

        # === 쿼리 처리 검증 ===
        if self.result_limit < 1:
            errors.append(f"RESULT_LIMIT은 1 이상이어야 합니다, 현재 {self.result_limit}")
        if self.query_timeout_seconds <= 0:
            errors.append(
                f"QUERY_TIMEOUT_SECONDS는 0보다 커야 합니다, 현재 {self.query_timeout_seconds}"
            )
        if self.format_timeout_seconds <= 0:
            errors.append(
                f"FORMAT_TIMEOUT_SECONDS는 0보다 커야 합니다, 현재 {self.format_timeout_seconds}"
            )
        if self.record_cache_ttl_seconds < 0:
            errors.append("RECORD_CACHE_TTL_SECONDS는 음수일 수 없습니다")

        # === 랭킹 검증 ===
        if any(w < 0 for w in self.ranking.weights()):
            errors.append("ranking.json: 가중치는 음수일 수 없습니다")
        if not 0.0 <= self.ranking.vector_threshold <= 1.0:
            errors.append("ranking.json: vector_threshold는 0~1 범위여야 합니다")
        for name in ("campaign_topic_keywords", "academy_topic_keywords"):
            keywords = getattr(self.ranking, name)
            if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
                errors.append(f"ranking.json: {name}는 문자열 목록이어야 합니다")

        # === 선택 설정 (경고만) ===
        if not self.openai_api_key:
            warnings.append("OPENAI_API_KEY가 없어 임베딩/LLM 응답을 사용할 수 없습니다")

        for w in warnings:
            logger.warning(f"[Config Warning] {w}")

        return errors

    @classmethod
    def from_env_validated(cls, fail_fast: bool = True) -> "AppConfig":
        """환경변수에서 설정 로드 + 검증

        Args:
            fail_fast: True면 설정 오류 시 RuntimeError 발생.
                       False면 오류만 로깅하고 config 반환.

        Raises:
            RuntimeError: fail_fast=True이고 설정 오류가 있을 때
        """
        config = cls.from_env()
        errors = config.validate()

        if errors:
            error_msg = "설정 검증 실패:\n" + "\n".join(f"  - {e}" for e in errors)
            if fail_fast:
                raise RuntimeError(error_msg)
            else:
                logger.error(error_msg)

        return config

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환 (비밀 값 제외)"""
        return {
            "data_path": str(self.data_path),
            "logs_path": str(self.logs_path),
            "data_source": self.data_source,
            "supabase_configured": bool(self.supabase_url and self.supabase_key),
            "openai_configured": bool(self.openai_api_key),
            "embedding_model": self.embedding_model,
            "llm_model": self.llm_model,
            "result_limit": self.result_limit,
            "query_timeout_seconds": self.query_timeout_seconds,
            "format_timeout_seconds": self.format_timeout_seconds,
            "record_cache_ttl_seconds": self.record_cache_ttl_seconds,
        }
