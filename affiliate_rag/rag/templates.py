"""
Response Templates
어시스턴트 응답 템플릿 및 LLM 프롬프트

템플릿 포맷터와 LLM 포맷터가 같은 문구를 공유합니다.
"""


class ResponseTemplates:
    """응답 템플릿"""

    # =========================================================================
    # 고정 응답
    # =========================================================================

    NO_RESULTS = (
        "I couldn't find any information related to your question. "
        "Please try rephrasing it, or ask about a specific campaign, "
        "commission rates, or academy resources."
    )

    FALLBACK_APOLOGY = (
        "I'm sorry, I encountered an issue processing your query. "
        "Please try rephrasing your question."
    )

    # =========================================================================
    # 단일 레코드 (exact match)
    # =========================================================================

    CAMPAIGN_DETAIL = "The **{title}** campaign{commission_clause}{performance_clause}."
    CAMPAIGN_COMMISSION_CLAUSE = " offers a **{commission}% commission rate**"
    CAMPAIGN_PERFORMANCE_CLAUSE = " with a performance change of **{performance}**"

    ACADEMY_DETAIL = "**{title}**\n{body}"
    ACADEMY_LINK = "\nLearn more: {url}"

    # =========================================================================
    # 목록 응답
    # =========================================================================

    CAMPAIGNS_HEADER = "**Available Campaigns:**"
    ACADEMY_HEADER = "**Academy Resources:**"
    OTHER_HEADER = "**Related Information:**"

    CAMPAIGN_BULLET = "• {title}: {commission}% commission"
    CAMPAIGN_BULLET_NO_COMMISSION = "• {title}"
    ACADEMY_BULLET = "• {title}: {snippet}"
    GENERIC_BULLET = "• {title}"

    SNIPPET_LENGTH = 100

    # =========================================================================
    # LLM 프롬프트
    # =========================================================================

    DEFAULT_SYSTEM_PROMPT = """You are an AI assistant specialized in affiliate marketing. You help users with:

1. Campaign information and optimization
2. Commission rates and performance metrics
3. Educational content and best practices
4. Marketing strategies and tips

Always provide accurate, helpful, and actionable advice. When you have specific data about campaigns or academy content, use it to give detailed responses. Be conversational but professional.

If you don't have enough information to answer a question completely, acknowledge this and provide what information you can, along with suggestions for getting more specific help."""

    CAMPAIGN_SYSTEM_PROMPT = """You are an AI assistant specialized in affiliate marketing campaigns.
Provide detailed, accurate information about campaigns including commission rates,
performance metrics, and optimization strategies. Use the provided campaign data
to give specific, actionable advice."""

    ACADEMY_SYSTEM_PROMPT = """You are an educational AI assistant for affiliate marketing.
Help users learn and understand affiliate marketing concepts, strategies, and best practices.
Provide step-by-step guidance and practical examples based on the academy content provided."""

    USER_PROMPT = """User Query: {query}

Relevant Information:
{context}

Please provide a comprehensive response based on the above information and your knowledge of affiliate marketing.
Be specific and cite the relevant sources when appropriate."""

    SOURCE_BLOCK = "[Source {index}] {title}\n{body}"

    @classmethod
    def snippet(cls, text: str) -> str:
        """본문 앞부분 요약"""
        text = text.strip()
        if len(text) <= cls.SNIPPET_LENGTH:
            return text
        return text[: cls.SNIPPET_LENGTH] + "..."
