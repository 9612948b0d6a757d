"""
Monitoring and observability modules
"""

from .logger import AssistantLogger, SensitiveDataFilter
from .rag_metrics import RetrievalMetricsCollector

__all__ = [
    "AssistantLogger",
    "RetrievalMetricsCollector",
    "SensitiveDataFilter",
]
