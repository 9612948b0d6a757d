"""Feature Flags for optional retrieval components.

Supports three levels of override (highest priority first):
1. Environment variable: FF_{SECTION}_{KEY} (e.g., FF_SCORING_USE_EMBEDDING_SCORER=true)
2. JSON config file: config/feature_flags.json
3. Default value passed to get_flag()

Usage:
    from affiliate_rag.infrastructure.feature_flags import FeatureFlags

    flags = FeatureFlags()
    if flags.use_embedding_scorer():
        # embedding similarity
    else:
        # keyword-only ranking
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")


class FeatureFlags:
    """Feature flag reader with ENV > JSON > default precedence."""

    def __init__(self, config_path: str | Path | None = None) -> None:
        self._config_path = Path(config_path) if config_path else Path("config/feature_flags.json")
        self._config: dict[str, dict[str, Any]] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load JSON config file. Uses empty config if file missing or unreadable."""
        self._config = {}
        if not self._config_path.exists():
            return
        try:
            with open(self._config_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable feature flag file {self._config_path}: {e}")
            return
        if isinstance(data, dict):
            self._config = data

    def reload(self) -> None:
        """Reload config from disk."""
        self._load_config()

    def get_flag(self, section: str, key: str, default: bool = False) -> bool:
        """Get a feature flag value with ENV > JSON > default precedence.

        Args:
            section: Config section (e.g., "scoring", "store")
            key: Flag key (e.g., "use_embedding_scorer")
            default: Default value if not found anywhere

        Returns:
            Boolean flag value
        """
        # 1. Check environment variable (highest priority)
        env_key = f"FF_{section.upper()}_{key.upper()}"
        env_val = os.environ.get(env_key)
        if env_val is not None:
            return env_val.strip().lower() in _TRUE_VALUES

        # 2. Check JSON config
        section_config = self._config.get(section, {})
        if isinstance(section_config, dict) and key in section_config:
            return bool(section_config[key])

        # 3. Return default
        return default

    # ── Convenience methods ──────────────────────────────────────────

    def use_embedding_scorer(self) -> bool:
        """Whether to score with embeddings instead of the null vector scorer."""
        return self.get_flag("scoring", "use_embedding_scorer", default=False)

    def use_llm_formatter(self) -> bool:
        """Whether to generate responses with the LLM formatter."""
        return self.get_flag("formatter", "use_llm_formatter", default=False)

    def use_record_cache(self) -> bool:
        """Whether to wrap the record store in a TTL cache."""
        return self.get_flag("store", "use_record_cache", default=False)

    def use_sqlite_embedding_cache(self) -> bool:
        """Whether to use SQLite-backed embedding cache (vs in-memory dict)."""
        return self.get_flag("cache", "use_sqlite_embedding_cache", default=False)

    def to_dict(self) -> dict[str, bool]:
        return {
            "scoring.use_embedding_scorer": self.use_embedding_scorer(),
            "formatter.use_llm_formatter": self.use_llm_formatter(),
            "store.use_record_cache": self.use_record_cache(),
            "cache.use_sqlite_embedding_cache": self.use_sqlite_embedding_cache(),
        }
