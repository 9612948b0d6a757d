"""
Domain Interfaces
=================
랭킹 엔진이 의존하는 외부 협력자 Protocol 모음

- RecordStoreProtocol: 코퍼스 조회
- VectorScorerProtocol: 임베딩 유사도
- ResponseFormatterProtocol: 응답 포맷팅
"""

from affiliate_rag.domain.interfaces.formatter import ResponseFormatterProtocol
from affiliate_rag.domain.interfaces.record_store import RecordStoreProtocol
from affiliate_rag.domain.interfaces.vector_scorer import VectorScore, VectorScorerProtocol

__all__ = [
    "RecordStoreProtocol",
    "ResponseFormatterProtocol",
    "VectorScore",
    "VectorScorerProtocol",
]
