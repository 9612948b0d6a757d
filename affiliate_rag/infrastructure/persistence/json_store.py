"""
JSON File Record Store
======================
RecordStoreProtocol 구현 - 로컬 JSON 파일 백엔드

<data_dir>/campaigns.json, <data_dir>/academy.json 에 테이블 행 목록을
저장합니다. 로컬 개발용으로 사용됩니다.
"""

import asyncio
import json
import logging
from pathlib import Path

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.exceptions import StoreUnavailable
from affiliate_rag.infrastructure.persistence.rows import TABLE_NAMES, records_from_rows

logger = logging.getLogger(__name__)


def _read_json(path):
    """동기 JSON 읽기 (to_thread에서 사용)"""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class JsonFileRecordStore:
    """
    JSON 파일을 이용한 레코드 저장소

    파일이 없으면 빈 코퍼스, 읽을 수 없거나 형식이 잘못되면 StoreUnavailable.
    """

    def __init__(self, data_dir: Path | str | None = None):
        self.data_dir = Path(data_dir) if data_dir else Path("./data")

    def path_for(self, corpus_type: CorpusType) -> Path | None:
        table = TABLE_NAMES.get(corpus_type)
        return self.data_dir / f"{table}.json" if table else None

    async def fetch_all(self, corpus_type: CorpusType) -> list[Record]:
        path = self.path_for(corpus_type)
        if path is None or not path.exists():
            return []

        try:
            rows = await asyncio.to_thread(_read_json, path)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailable(
                f"Cannot read {path}: {e}", corpus_type=corpus_type.value, cause=e
            ) from e

        if not isinstance(rows, list):
            raise StoreUnavailable(
                f"{path} must contain a list of rows", corpus_type=corpus_type.value
            )

        records = records_from_rows(corpus_type, [row for row in rows if isinstance(row, dict)])
        logger.debug(f"Loaded {len(records)} {corpus_type.value} records from {path}")
        return records

    async def count(self, corpus_type: CorpusType) -> int:
        return len(await self.fetch_all(corpus_type))
