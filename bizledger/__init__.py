"""
bizledger - Source Package

Client-side state engine for a small business finance tracker: a locally
cached, consistent view of categorized income and expense transactions,
kept in step with a remote REST store under optimistic mutation,
pagination, filtering and search.

DESIGN PRINCIPLES:
1. The remote store is the authority; the local view is a cache
2. Every failure degrades to "state unchanged" or "state rolled back"
3. Summaries are derived, never stored
4. Every fetch and write is auditable
5. The remote store is swappable
"""

__version__ = "1.0.0"
