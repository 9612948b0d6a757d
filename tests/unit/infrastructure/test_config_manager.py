"""
ConfigManager (AppConfig) 단위 테스트
"""

import json
from pathlib import Path

import pytest

from affiliate_rag.infrastructure.config.config_manager import AppConfig, RankingSettings

_ENV_KEYS = (
    "DATA_SOURCE",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "OPENAI_API_KEY",
    "EMBEDDING_MODEL",
    "LLM_MODEL",
    "DATA_PATH",
    "LOGS_PATH",
    "CONFIG_PATH",
    "RESULT_LIMIT",
    "QUERY_TIMEOUT_SECONDS",
    "FORMAT_TIMEOUT_SECONDS",
    "RECORD_CACHE_TTL_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """설정 관련 환경변수 제거 + 빈 config 디렉토리 사용"""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path))
    return monkeypatch


# =============================================================================
# AppConfig 기본 생성 테스트
# =============================================================================


class TestAppConfigDefaults:
    """AppConfig 기본값 테스트"""

    def test_default_values(self):
        config = AppConfig()
        assert config.data_source == "memory"
        assert config.openai_api_key is None
        assert config.result_limit == 5
        assert config.query_timeout_seconds == 10.0
        assert config.format_timeout_seconds == 30.0
        assert config.record_cache_ttl_seconds == 0.0
        assert config.ranking == RankingSettings()

    def test_default_paths(self):
        config = AppConfig()
        assert isinstance(config.base_path, Path)
        assert config.data_path.name == "data"
        assert config.config_path.name == "config"


# =============================================================================
# from_env 테스트
# =============================================================================


class TestAppConfigFromEnv:
    """AppConfig.from_env 테스트"""

    def test_defaults_without_env(self, clean_env):
        config = AppConfig.from_env()
        assert config.data_source == "memory"
        assert config.supabase_url is None
        assert config.embedding_model == "text-embedding-3-small"

    def test_loads_values(self, clean_env):
        clean_env.setenv("DATA_SOURCE", " Supabase ")
        clean_env.setenv("SUPABASE_URL", "https://example.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "anon-key")  # pragma: allowlist secret
        clean_env.setenv("OPENAI_API_KEY", "sk-test123")  # pragma: allowlist secret
        clean_env.setenv("RESULT_LIMIT", "3")
        clean_env.setenv("QUERY_TIMEOUT_SECONDS", "2.5")
        clean_env.setenv("FORMAT_TIMEOUT_SECONDS", "4")
        clean_env.setenv("RECORD_CACHE_TTL_SECONDS", "30")

        config = AppConfig.from_env()

        assert config.data_source == "supabase"
        assert config.supabase_url == "https://example.supabase.co"
        assert config.openai_api_key == "sk-test123"  # pragma: allowlist secret
        assert config.result_limit == 3
        assert config.query_timeout_seconds == 2.5
        assert config.format_timeout_seconds == 4.0
        assert config.record_cache_ttl_seconds == 30.0

    def test_paths_from_env(self, clean_env, tmp_path):
        clean_env.setenv("DATA_PATH", str(tmp_path / "d"))
        clean_env.setenv("LOGS_PATH", str(tmp_path / "l"))
        config = AppConfig.from_env()
        assert config.data_path == tmp_path / "d"
        assert config.logs_path == tmp_path / "l"
        assert config.config_path == tmp_path

    def test_loads_ranking_file(self, clean_env, tmp_path):
        (tmp_path / "ranking.json").write_text(
            json.dumps({"ranking": {"vector_weight": 0.6, "keyword_decay": 0.1}})
        )
        config = AppConfig.from_env()
        assert config.ranking.vector_weight == 0.6
        assert config.ranking.keyword_decay == 0.1
        assert config.ranking.keyword_weight == 0.3

    def test_flat_ranking_file_and_unknown_keys(self, clean_env, tmp_path):
        (tmp_path / "ranking.json").write_text(
            json.dumps({"campaign_base_score": 0.9, "mystery": 1})
        )
        config = AppConfig.from_env()
        assert config.ranking.campaign_base_score == 0.9

    def test_topic_keywords_from_ranking_file(self, clean_env, tmp_path):
        (tmp_path / "ranking.json").write_text(
            json.dumps({"ranking": {"campaign_topic_keywords": ["deals", "payout"]}})
        )
        config = AppConfig.from_env()
        assert config.ranking.campaign_topic_keywords == ["deals", "payout"]
        assert config.ranking.academy_topic_keywords == ["learn", "tutorial", "academy"]


# =============================================================================
# validate 테스트
# =============================================================================


class TestAppConfigValidate:
    """AppConfig.validate 테스트"""

    def test_valid_default(self):
        assert AppConfig().validate() == []

    def test_unknown_data_source(self):
        errors = AppConfig(data_source="mongo").validate()
        assert len(errors) == 1
        assert "DATA_SOURCE" in errors[0]

    def test_supabase_requires_credentials(self):
        errors = AppConfig(data_source="supabase", supabase_url="https://x").validate()
        assert any("SUPABASE" in e for e in errors)

        config = AppConfig(data_source="supabase", supabase_url="https://x", supabase_key="k")
        assert config.validate() == []

    def test_missing_json_dir_is_warning(self, tmp_path):
        config = AppConfig(data_source="json", data_path=tmp_path / "missing")
        assert config.validate() == []

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"result_limit": 0},
            {"query_timeout_seconds": 0},
            {"format_timeout_seconds": 0},
            {"record_cache_ttl_seconds": -1},
            {"ranking": RankingSettings(vector_weight=-0.1)},
            {"ranking": RankingSettings(vector_threshold=1.5)},
            {"ranking": RankingSettings(campaign_topic_keywords="campaign")},
            {"ranking": RankingSettings(academy_topic_keywords=["learn", 3])},
        ],
    )
    def test_invalid_values(self, kwargs):
        assert len(AppConfig(**kwargs).validate()) == 1

    def test_from_env_validated_fail_fast(self, clean_env):
        clean_env.setenv("RESULT_LIMIT", "0")
        with pytest.raises(RuntimeError, match="설정 검증 실패"):
            AppConfig.from_env_validated(fail_fast=True)

    def test_from_env_validated_lenient(self, clean_env):
        clean_env.setenv("RESULT_LIMIT", "0")
        config = AppConfig.from_env_validated(fail_fast=False)
        assert config.result_limit == 0


class TestAppConfigToDict:
    def test_secrets_excluded(self):
        config = AppConfig(
            openai_api_key="sk-secret",  # pragma: allowlist secret
            supabase_url="https://x",
            supabase_key="anon",  # pragma: allowlist secret
        )
        data = config.to_dict()
        assert data["openai_configured"] is True
        assert data["supabase_configured"] is True
        assert "sk-secret" not in json.dumps(data)
        assert "anon" not in json.dumps(data)
