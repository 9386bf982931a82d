"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, CreatedAtMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), dispose_engine(): Async connection management
  - DocumentModel: Document metadata entity
  - document_crud: CRUD operation singleton

Dependencies: sqlalchemy, docchat.configs
System role: Metadata store adapter
"""

from docchat.boundary.db.base import Base, CreatedAtMixin, UUIDMixin
from docchat.boundary.db.connection import (
    dispose_engine,
    get_async_engine,
    get_async_session_factory,
)
from docchat.boundary.db.models.document_model import DocumentModel
from docchat.boundary.db.CRUD import BaseCRUD, DocumentCRUD, document_crud

__all__ = [
    "Base",
    "CreatedAtMixin",
    "UUIDMixin",
    "dispose_engine",
    "get_async_engine",
    "get_async_session_factory",
    "DocumentModel",
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
]
