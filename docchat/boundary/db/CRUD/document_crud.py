"""
Document CRUD operations.

Provides Create, Read, Delete operations for DocumentModel with
owner-scoped queries. Documents are never updated in place.

Dependencies: sqlalchemy, docchat.boundary.db.models.document_model
System role: Document persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.boundary.db.CRUD.base_crud import BaseCRUD
from docchat.boundary.db.models.document_model import DocumentModel


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with owner-scoped queries.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve all documents for an owner, newest first.

        Args:
            session: Async database session
            owner_id: Owner identity
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels belonging to the owner
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.owner_id == owner_id)
            .order_by(DocumentModel.created_at.desc(), DocumentModel.file_path.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_for_owner(
        self,
        session: AsyncSession,
        id: UUID,
        owner_id: str,
    ) -> DocumentModel | None:
        """
        Retrieve a document only if it belongs to the owner.

        Args:
            session: Async database session
            id: Document UUID
            owner_id: Owner identity

        Returns:
            DocumentModel if found and owned, None otherwise
        """
        stmt = select(DocumentModel).where(
            DocumentModel.id == id,
            DocumentModel.owner_id == owner_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


document_crud = DocumentCRUD()
