import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.infrastructure.persistence.memory_store import InMemoryRecordStore
from affiliate_rag.infrastructure.persistence.rows import SAMPLE_ROWS, records_from_rows


def pytest_configure(config):
    """테스트 시작 전 환경 설정 로드"""
    project_root = Path(__file__).parent.parent

    main_env_path = project_root / ".env"
    if main_env_path.exists():
        load_dotenv(main_env_path, override=False)
        print(f"\n[conftest] Loaded base environment from: {main_env_path}")

    env_file = os.environ.get("ENV_FILE", ".env.test")
    env_path = project_root / env_file

    if env_path.exists():
        load_dotenv(env_path, override=True)
        print(f"[conftest] Applied test overrides from: {env_path}")
    else:
        print(f"[conftest] No {env_file} found, using base environment only")


@pytest.fixture
def make_record():
    """테스트용 Record 생성 팩토리"""

    def _make(
        record_id: str,
        title: str,
        body: str = "",
        corpus_type: CorpusType = CorpusType.CAMPAIGN,
        **attributes,
    ) -> Record:
        return Record(
            id=record_id,
            corpus_type=corpus_type,
            title=title,
            body=body,
            attributes=attributes,
        )

    return _make


@pytest.fixture
def campaigns() -> list[Record]:
    """데모 캠페인 3개 (Summer Fashion Sale, Tech Gadgets Promo, Home & Garden)"""
    return records_from_rows(CorpusType.CAMPAIGN, SAMPLE_ROWS[CorpusType.CAMPAIGN])


@pytest.fixture
def academy() -> list[Record]:
    """데모 아카데미 아티클 3개"""
    return records_from_rows(CorpusType.ACADEMY, SAMPLE_ROWS[CorpusType.ACADEMY])


@pytest.fixture
def corpora(campaigns, academy) -> dict[CorpusType, list[Record]]:
    return {CorpusType.CAMPAIGN: campaigns, CorpusType.ACADEMY: academy}


@pytest.fixture
def sample_store() -> InMemoryRecordStore:
    return InMemoryRecordStore.with_sample_data()
