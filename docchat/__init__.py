"""
DocChat backend.

Document ingestion and conversational query orchestration over external
storage, processing and inference backends.
"""

__version__ = "0.1.0"
