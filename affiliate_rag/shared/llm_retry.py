"""
LLM / Embedding Retry Helper
============================
공통 LLM·임베딩 호출 재시도 로직 (지수 백오프 + 호출별 타임아웃)

Retries belong to these peripheral clients only; the ranking engine itself
never retries.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from litellm import acompletion, aembedding

from affiliate_rag.domain.exceptions import LLMAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    call: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_retries: int = 3,
    timeout: float = 30.0,
    base_delay: float = 1.0,
) -> T:
    """
    비동기 호출을 지수 백오프로 재시도

    Args:
        call: 매 시도마다 새 코루틴을 만드는 팩토리
        label: 로그용 이름 (모델명 등)
        max_retries: 최대 시도 횟수
        timeout: 단일 호출 타임아웃 (초)
        base_delay: 첫 재시도 대기 (초), 이후 2배씩 증가

    Returns:
        호출 결과

    Raises:
        LLMAPIError: 모든 시도 실패 시
    """
    last_error: Exception | None = None
    for attempt in range(max_retries):
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except asyncio.TimeoutError:
            last_error = TimeoutError(f"{label} call timed out after {timeout}s")
            logger.warning(f"{label} timeout (attempt {attempt + 1}/{max_retries})")
        except Exception as e:
            last_error = e
            logger.warning(f"{label} error (attempt {attempt + 1}/{max_retries}): {e}")

        if attempt < max_retries - 1:
            await asyncio.sleep(base_delay * (2**attempt))

    raise LLMAPIError(
        f"All {max_retries} attempts failed for {label}: {last_error}",
        model=label,
        is_retryable=False,
    ) from last_error


async def llm_completion_with_retry(
    *,
    model: str,
    messages: list[dict[str, str]],
    max_tokens: int = 1000,
    temperature: float = 0.7,
    top_p: float = 0.9,
    max_retries: int = 3,
    timeout: float = 30.0,
    api_key: str | None = None,
) -> Any:
    """Chat completion through litellm with retry."""
    return await call_with_retry(
        lambda: acompletion(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
            api_key=api_key,
        ),
        label=model,
        max_retries=max_retries,
        timeout=timeout,
    )


async def embedding_with_retry(
    *,
    model: str,
    texts: list[str],
    max_retries: int = 3,
    timeout: float = 30.0,
    api_key: str | None = None,
) -> list[list[float]]:
    """
    Embed a batch of texts through litellm with retry.

    Returns:
        One vector per input text, in input order
    """
    response = await call_with_retry(
        lambda: aembedding(model=model, input=texts, api_key=api_key),
        label=model,
        max_retries=max_retries,
        timeout=timeout,
    )

    vectors: list[list[float]] = []
    for item in response.data:
        embedding = item["embedding"] if isinstance(item, dict) else item.embedding
        vectors.append(list(embedding))

    if len(vectors) != len(texts):
        raise LLMAPIError(
            f"Embedding response size mismatch: expected {len(texts)}, got {len(vectors)}",
            model=model,
        )
    return vectors
