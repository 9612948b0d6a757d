"""
Response Formatters
===================
QueryResult → 사용자 표시 문자열

- TemplateResponseFormatter: 고정 템플릿 기반 (기본값)
- LLMResponseFormatter: litellm 호출 기반, 실패 시 템플릿으로 폴백

## 사용 예
```python
formatter = TemplateResponseFormatter()
text = await formatter.format(result)
```
"""

import logging
from collections import Counter
from typing import Any

from affiliate_rag.domain.entities.record import CorpusType, Record
from affiliate_rag.domain.exceptions import LLMAPIError
from affiliate_rag.rag.models import QueryResult
from affiliate_rag.rag.templates import ResponseTemplates
from affiliate_rag.shared.llm_retry import llm_completion_with_retry

logger = logging.getLogger(__name__)


def _format_commission(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text[:-1] if text.endswith("%") else text


def _performance_of(record: Record) -> str | None:
    attrs = record.attributes
    if attrs.get("performance"):
        return str(attrs["performance"])
    metrics = attrs.get("performance_metrics")
    if isinstance(metrics, dict):
        for key in ("performance", "growth", "conversion_rate"):
            if metrics.get(key) is not None:
                return str(metrics[key])
    return None


class TemplateResponseFormatter:
    """템플릿 기반 응답 생성기"""

    is_stub = True

    def __init__(self, templates: type[ResponseTemplates] = ResponseTemplates):
        self.templates = templates

    async def format(self, result: QueryResult) -> str:
        return self.render(result)

    def render(self, result: QueryResult) -> str:
        """동기 렌더링 (LLM 포맷터 폴백에서도 사용)"""
        if result.fallback_used:
            return self.templates.FALLBACK_APOLOGY
        if result.is_empty:
            return self.templates.NO_RESULTS
        if result.is_exact_match:
            return self._render_single(result.matched_records[0].record)
        return self._render_list([scored.record for scored in result.matched_records])

    def _render_single(self, record: Record) -> str:
        t = self.templates
        if record.corpus_type == CorpusType.CAMPAIGN:
            commission = _format_commission(
                record.attributes.get("commission_rate", record.attributes.get("commission"))
            )
            performance = _performance_of(record)
            text = t.CAMPAIGN_DETAIL.format(
                title=record.title,
                commission_clause=(
                    t.CAMPAIGN_COMMISSION_CLAUSE.format(commission=commission)
                    if commission
                    else ""
                ),
                performance_clause=(
                    t.CAMPAIGN_PERFORMANCE_CLAUSE.format(performance=performance)
                    if performance
                    else ""
                ),
            )
            if record.body:
                text += f" {record.body}"
            return text

        text = t.ACADEMY_DETAIL.format(title=record.title, body=record.body).rstrip()
        if record.attributes.get("url"):
            text += t.ACADEMY_LINK.format(url=record.attributes["url"])
        return text

    def _render_list(self, records: list[Record]) -> str:
        t = self.templates
        sections: list[str] = []

        campaigns = [r for r in records if r.corpus_type == CorpusType.CAMPAIGN]
        academy = [r for r in records if r.corpus_type == CorpusType.ACADEMY]
        other = [r for r in records if r.corpus_type == CorpusType.GENERAL]

        if campaigns:
            lines = [t.CAMPAIGNS_HEADER]
            for record in campaigns:
                commission = _format_commission(record.attributes.get("commission_rate"))
                if commission:
                    lines.append(t.CAMPAIGN_BULLET.format(title=record.title, commission=commission))
                else:
                    lines.append(t.CAMPAIGN_BULLET_NO_COMMISSION.format(title=record.title))
            sections.append("\n".join(lines))

        if academy:
            lines = [t.ACADEMY_HEADER]
            for record in academy:
                lines.append(t.ACADEMY_BULLET.format(title=record.title, snippet=t.snippet(record.body)))
            sections.append("\n".join(lines))

        if other:
            lines = [t.OTHER_HEADER]
            lines.extend(t.GENERIC_BULLET.format(title=record.title) for record in other)
            sections.append("\n".join(lines))

        return "\n\n".join(sections)


class LLMResponseFormatter:
    """
    LLM 기반 응답 생성기

    검색된 레코드를 "[Source i] title\\nbody" 컨텍스트로 묶어 프롬프트를
    구성하고, 주된 코퍼스에 맞는 시스템 프롬프트를 선택합니다.
    API 키가 없거나 호출이 실패하면 템플릿 포맷터로 폴백합니다.
    """

    is_stub = False

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: str | None = None,
        fallback: TemplateResponseFormatter | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        max_retries: int = 3,
        timeout: float = 30.0,
    ):
        self.model = model
        self.api_key = api_key
        self.fallback = fallback or TemplateResponseFormatter()
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_retries = max_retries
        self.timeout = timeout

    async def format(self, result: QueryResult) -> str:
        if result.fallback_used or result.is_empty:
            return self.fallback.render(result)

        if not self.api_key:
            logger.warning("No API key configured for LLM formatter, using template response")
            return self.fallback.render(result)

        system_prompt, temperature = self._select_system_prompt(result)
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": self.build_user_prompt(result)},
        ]

        try:
            response = await llm_completion_with_retry(
                model=self.model,
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=temperature,
                max_retries=self.max_retries,
                timeout=self.timeout,
                api_key=self.api_key,
            )
            text = response.choices[0].message.content
        except (LLMAPIError, AttributeError, IndexError) as e:
            logger.warning(f"LLM formatting failed, using template response: {e}")
            return self.fallback.render(result)

        if not text or not text.strip():
            logger.warning("LLM returned empty response, using template response")
            return self.fallback.render(result)
        return text.strip()

    def build_context(self, result: QueryResult) -> str:
        """검색 결과를 프롬프트 컨텍스트로 변환"""
        return "\n\n".join(
            ResponseTemplates.SOURCE_BLOCK.format(
                index=i, title=scored.record.title, body=scored.record.body
            ).rstrip()
            for i, scored in enumerate(result.matched_records, 1)
        )

    def build_user_prompt(self, result: QueryResult) -> str:
        return ResponseTemplates.USER_PROMPT.format(
            query=result.query.strip(), context=self.build_context(result)
        )

    def _select_system_prompt(self, result: QueryResult) -> tuple[str, float]:
        counts = Counter(scored.record.corpus_type for scored in result.matched_records)
        dominant, _ = counts.most_common(1)[0]
        if len(counts) == 1 and dominant == CorpusType.CAMPAIGN:
            # factual campaign answers get a lower temperature
            return ResponseTemplates.CAMPAIGN_SYSTEM_PROMPT, min(self.temperature, 0.5)
        if len(counts) == 1 and dominant == CorpusType.ACADEMY:
            return ResponseTemplates.ACADEMY_SYSTEM_PROMPT, min(self.temperature, 0.6)
        return ResponseTemplates.DEFAULT_SYSTEM_PROMPT, self.temperature
