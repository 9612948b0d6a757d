from affiliate_rag.infrastructure.config.config_manager import AppConfig, RankingSettings

__all__ = ["AppConfig", "RankingSettings"]
