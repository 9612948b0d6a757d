"""
Record Domain Entities
======================
검색 대상 코퍼스 레코드: CorpusType, Record

Campaigns and academy articles are loaded from the record store and handed
to the ranking engine read-only. Scoring never mutates a Record.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class CorpusType(str, Enum):
    """검색 코퍼스 종류"""

    CAMPAIGN = "campaign"
    ACADEMY = "academy"
    GENERAL = "general"


# Fixed iteration / tie-break order across corpora
CORPUS_ORDER: tuple[CorpusType, ...] = (
    CorpusType.CAMPAIGN,
    CorpusType.ACADEMY,
    CorpusType.GENERAL,
)


def corpus_priority(corpus_type: CorpusType) -> int:
    """Position of a corpus in the fixed corpus order."""
    return CORPUS_ORDER.index(corpus_type)


class Record(BaseModel):
    """
    코퍼스 레코드 엔티티

    Attributes:
        id: 스토어가 부여한 고유 ID
        corpus_type: 소속 코퍼스 (생성 후 변경 불가)
        title: 표시 이름 (엔티티 매칭 대상, 비어 있으면 안 됨)
        body: 설명/본문 (키워드 매칭 보조 필드)
        attributes: 코퍼스별 구조화 필드 (commission_rate, url 등)
        created_at: 생성 시각 (정보용)
        updated_at: 수정 시각 (정보용)
    """

    id: str = Field(..., description="레코드 ID")
    corpus_type: CorpusType = Field(..., description="코퍼스 종류")
    title: str = Field(..., description="표시 이름")
    body: str = Field(default="", description="설명/본문")
    attributes: dict[str, Any] = Field(default_factory=dict, description="코퍼스별 속성")
    created_at: datetime | None = Field(default=None, description="생성 시각")
    updated_at: datetime | None = Field(default=None, description="수정 시각")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "1",
                "corpus_type": "campaign",
                "title": "Summer Fashion Sale",
                "body": "High-converting fashion campaign targeting summer trends",
                "attributes": {"commission_rate": 15, "performance": "+23%"},
            }
        },
    }

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("title must not be empty")
        return value

    @field_validator("body", mode="before")
    @classmethod
    def _body_none_to_empty(cls, value: Any) -> str:
        return "" if value is None else value

    @property
    def content(self) -> str:
        """Title and body joined, as used for embeddings and LLM context."""
        if not self.body:
            return self.title
        return f"{self.title}\n{self.body}"
