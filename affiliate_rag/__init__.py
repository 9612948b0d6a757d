"""
Affiliate Assistant retrieval engine.

Query routing, keyword/vector hybrid ranking and response formatting for
the affiliate marketing community assistant.
"""

__version__ = "0.1.0"
