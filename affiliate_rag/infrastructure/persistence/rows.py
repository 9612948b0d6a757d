"""
Row Mapping
===========
저장소 테이블 행(dict) → Record 변환

테이블 스키마:
- campaigns: id, name, description, commission_rate, performance_metrics, created_at, updated_at
- academy:   id, title, content, category, url, created_at, updated_at

제목 컬럼(name/title)과 본문 컬럼(description/content)을 제외한 나머지는
attributes로 전달됩니다.
"""

import logging
from typing import Any

from pydantic import ValidationError

from affiliate_rag.domain.entities.record import CorpusType, Record

logger = logging.getLogger(__name__)

TABLE_NAMES: dict[CorpusType, str] = {
    CorpusType.CAMPAIGN: "campaigns",
    CorpusType.ACADEMY: "academy",
}

# corpus → (title column, body column)
_COLUMN_MAP: dict[CorpusType, tuple[str, str]] = {
    CorpusType.CAMPAIGN: ("name", "description"),
    CorpusType.ACADEMY: ("title", "content"),
    CorpusType.GENERAL: ("title", "body"),
}

_META_COLUMNS = ("id", "created_at", "updated_at")


def record_from_row(corpus_type: CorpusType, row: dict[str, Any]) -> Record | None:
    """
    테이블 행을 Record로 변환

    Args:
        corpus_type: 행이 속한 코퍼스
        row: 컬럼명 → 값

    Returns:
        Record, 또는 id/제목이 없거나 유효하지 않은 행이면 None
    """
    title_col, body_col = _COLUMN_MAP[corpus_type]
    title = row.get(title_col)

    if row.get("id") is None or not isinstance(title, str) or not title.strip():
        logger.warning(f"Skipping {corpus_type.value} row without id/title: id={row.get('id')}")
        return None

    attributes = {
        key: value
        for key, value in row.items()
        if key not in _META_COLUMNS and key not in (title_col, body_col)
    }

    try:
        return Record(
            id=str(row["id"]),
            corpus_type=corpus_type,
            title=title,
            body=row.get(body_col) or "",
            attributes=attributes,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
    except ValidationError as e:
        logger.warning(f"Skipping invalid {corpus_type.value} row {row.get('id')}: {e}")
        return None


def records_from_rows(corpus_type: CorpusType, rows: list[dict[str, Any]]) -> list[Record]:
    """행 목록 변환 (유효하지 않은 행은 건너뜀, 순서 유지)"""
    records = []
    for row in rows:
        record = record_from_row(corpus_type, row)
        if record is not None:
            records.append(record)
    return records


# =============================================================================
# 데모 지식 베이스
# =============================================================================

SAMPLE_ROWS: dict[CorpusType, list[dict[str, Any]]] = {
    CorpusType.CAMPAIGN: [
        {
            "id": "1",
            "name": "Summer Fashion Sale",
            "description": "High-converting fashion campaign targeting summer trends",
            "commission_rate": 15,
            "performance_metrics": {"performance": "+23%"},
        },
        {
            "id": "2",
            "name": "Tech Gadgets Promo",
            "description": "Electronics and gadgets with excellent conversion rates",
            "commission_rate": 12,
            "performance_metrics": {"performance": "+18%"},
        },
        {
            "id": "3",
            "name": "Home & Garden",
            "description": "Home improvement and gardening products",
            "commission_rate": 10,
            "performance_metrics": {"performance": "+8%"},
        },
    ],
    CorpusType.ACADEMY: [
        {
            "id": "1",
            "title": "Affiliate Marketing Basics",
            "content": "Learn the fundamentals of affiliate marketing",
            "category": "basics",
            "url": "/academy/basics",
        },
        {
            "id": "2",
            "title": "Conversion Optimization",
            "content": "Advanced techniques to boost your conversion rates",
            "category": "optimization",
            "url": "/academy/optimization",
        },
        {
            "id": "3",
            "title": "Traffic Generation",
            "content": "Proven methods to drive quality traffic to your offers",
            "category": "traffic",
            "url": "/academy/traffic",
        },
    ],
}
