"""
Database models package.

Exports:
  - DocumentModel: Document metadata ORM model

Dependencies: sqlalchemy, docchat.boundary.db.base
System role: Database model definitions for domain entities
"""

from docchat.boundary.db.models.document_model import DocumentModel

__all__ = ["DocumentModel"]
