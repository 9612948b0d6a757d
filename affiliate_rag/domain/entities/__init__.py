"""
Domain Entities
===============
"""

from affiliate_rag.domain.entities.record import CORPUS_ORDER, CorpusType, Record, corpus_priority

__all__ = ["CORPUS_ORDER", "CorpusType", "Record", "corpus_priority"]
