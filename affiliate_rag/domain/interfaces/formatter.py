"""
Response Formatter Protocol
===========================
검색 결과를 사용자 표시용 문자열로 변환하는 인터페이스

구현체:
- TemplateResponseFormatter (affiliate_rag/rag/response_formatter.py)
- LLMResponseFormatter (affiliate_rag/rag/response_formatter.py)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from affiliate_rag.rag.models import QueryResult


@runtime_checkable
class ResponseFormatterProtocol(Protocol):
    """
    Response Formatter Protocol

    Purely presentational: implementations may call an LLM but must not
    change the shape of the QueryResult they receive.

    Attributes:
        is_stub: True for template-only formatters
    """

    is_stub: bool

    async def format(self, result: QueryResult) -> str:
        """
        QueryResult를 표시용 문자열로 변환합니다.

        Args:
            result: 오케스트레이터가 만든 결과

        Returns:
            사용자에게 보여줄 응답 문자열
        """
        ...
