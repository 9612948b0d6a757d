"""
Infrastructure Layer
====================
외부 서비스, 데이터베이스와의 통합을 담당합니다.
Domain의 Protocol들을 구현합니다.

구조:
- config/: 설정 관리
- persistence/: 레코드 저장소 구현 (Supabase, JSON, 메모리)
- feature_flags.py: 선택 구성 요소 토글
- bootstrap.py: DI Container
"""

from affiliate_rag.infrastructure.config.config_manager import AppConfig, RankingSettings

__all__ = ["AppConfig", "RankingSettings"]
