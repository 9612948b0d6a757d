"""
Affiliate Assistant 커스텀 예외 타입

Concrete exception types used across the retrieval engine. Store and
scoring failures are recovered at the QueryOrchestrator boundary and turned
into fallback results; only EmptyQuery reaches the caller.

사용 예:
    from affiliate_rag.domain.exceptions import StoreUnavailable

    try:
        records = await store.fetch_all(CorpusType.CAMPAIGN)
    except StoreUnavailable as e:
        logger.warning(f"Store down for {e.corpus_type}: {e}")
"""

from typing import Any, Optional


class AssistantError(Exception):
    """
    Base exception for all assistant errors.

    모든 커스텀 예외의 기본 클래스입니다.
    """


class StoreUnavailable(AssistantError):
    """
    Corpus fetch failed (network, auth or backend outage).

    Attributes:
        corpus_type: 조회하던 코퍼스 (알 수 없으면 None)
        cause: 원본 예외

    Example:
        raise StoreUnavailable(
            "campaigns table unreachable",
            corpus_type="campaign",
            cause=exc,
        )
    """

    def __init__(
        self,
        message: str,
        corpus_type: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.corpus_type = corpus_type
        self.cause = cause


class EmptyQuery(AssistantError, ValueError):
    """
    Empty or whitespace-only query.

    Raised before any scoring is attempted.
    """

    def __init__(self, message: str = "Query must not be empty"):
        super().__init__(message)


class QueryTimeout(AssistantError):
    """
    Query processing exceeded its time limit.

    Attributes:
        timeout_seconds: 적용된 타임아웃 (초)
    """

    def __init__(self, message: str, timeout_seconds: Optional[float] = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds


class ScoringError(AssistantError):
    """
    A scorer (keyword, vector) failed while scoring a corpus.

    Attributes:
        scorer: 실패한 스코어러 이름 (예: "embedding")
        details: 추가 정보
    """

    def __init__(
        self,
        message: str,
        scorer: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.scorer = scorer
        self.details = details or {}


class LLMAPIError(AssistantError):
    """
    LLM / embedding API errors (rate limit, invalid response, authentication).

    Attributes:
        model: 사용한 모델명 (예: "gpt-4o-mini")
        is_retryable: 재시도 가능 여부
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.model = model
        self.is_retryable = is_retryable
