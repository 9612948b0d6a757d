"""Tests for affiliate_rag.domain.exceptions."""

import pytest

from affiliate_rag.domain.exceptions import (
    AssistantError,
    EmptyQuery,
    LLMAPIError,
    QueryTimeout,
    ScoringError,
    StoreUnavailable,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            StoreUnavailable("down"),
            EmptyQuery(),
            QueryTimeout("slow"),
            ScoringError("bad"),
            LLMAPIError("api"),
        ],
    )
    def test_all_inherit_from_base(self, exc):
        assert isinstance(exc, AssistantError)
        assert isinstance(exc, Exception)

    def test_empty_query_is_value_error(self):
        assert isinstance(EmptyQuery(), ValueError)
        assert str(EmptyQuery()) == "Query must not be empty"


class TestAttributes:
    def test_store_unavailable(self):
        cause = ConnectionError("refused")
        exc = StoreUnavailable("campaigns unreachable", corpus_type="campaign", cause=cause)
        assert exc.corpus_type == "campaign"
        assert exc.cause is cause
        assert str(exc) == "campaigns unreachable"

    def test_store_unavailable_defaults(self):
        exc = StoreUnavailable("down")
        assert exc.corpus_type is None
        assert exc.cause is None

    def test_query_timeout(self):
        exc = QueryTimeout("timed out", timeout_seconds=2.5)
        assert exc.timeout_seconds == 2.5

    def test_scoring_error(self):
        exc = ScoringError("embedding failed", scorer="embedding", details={"model": "m"})
        assert exc.scorer == "embedding"
        assert exc.details == {"model": "m"}

    def test_scoring_error_default_details(self):
        assert ScoringError("x").details == {}

    def test_llm_api_error(self):
        exc = LLMAPIError("rate limited", model="gpt-4o-mini", is_retryable=True)
        assert exc.model == "gpt-4o-mini"
        assert exc.is_retryable is True
