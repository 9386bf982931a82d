"""
CRUD operations for database models.

Usage:
    from docchat.boundary.db.CRUD import document_crud

    documents = await document_crud.get_by_owner(db, owner_id)
"""

from docchat.boundary.db.CRUD.base_crud import BaseCRUD
from docchat.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
]
