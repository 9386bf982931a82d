"""
Storage gateway.

Puts the object store (raw bytes) and the metadata store (document rows)
behind one contract. There is no transaction spanning both stores:
callers write bytes before metadata, and deletions remove bytes before the
row, reporting partial failures explicitly.

Dependencies: boto3/botocore, sqlalchemy, docchat.boundary.aws, docchat.boundary.db
System role: Uniform persistence contract for documents
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from uuid import UUID

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docchat.boundary.aws.s3_client import S3DocumentClient
from docchat.boundary.db.CRUD.document_crud import document_crud
from docchat.core.exceptions import (
    DeleteFailed,
    DocumentNotFoundError,
    DuplicateId,
    MetadataUnavailable,
    StoreUnavailable,
)
from docchat.core.storage_paths import derive_storage_path
from docchat.models.document import Document

logger = logging.getLogger(__name__)

_S3_ERRORS = (ClientError, BotoCoreError)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageGateway:
    """
    Object store + metadata store behind one contract.

    All reads are scoped to an owner; the gateway never returns another
    owner's documents.
    """

    def __init__(
        self,
        s3_client: S3DocumentClient,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Args:
            s3_client: Object store client
            session_factory: Async session factory for the metadata store
            clock: Source of creation instants when the caller supplies none
        """
        self._s3 = s3_client
        self._session_factory = session_factory
        self._clock = clock

    async def put(
        self,
        owner_id: str,
        display_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        created_at: datetime | None = None,
    ) -> str:
        """
        Write bytes at a freshly derived path.

        Args:
            owner_id: Owner identity
            display_name: Original file name
            data: File contents
            content_type: Declared media type
            created_at: Creation instant used for the path (now if None)

        Returns:
            str: Storage path of the written object

        Raises:
            StoreUnavailable: On object store transport or backend error
        """
        path = derive_storage_path(owner_id, created_at or self._clock(), display_name)
        try:
            await asyncio.to_thread(
                self._s3.put_object,
                path,
                data,
                content_type,
                {"owner_id": owner_id},
            )
        except _S3_ERRORS as e:
            raise StoreUnavailable(
                f"Object store write failed: {type(e).__name__}", path=path
            ) from e

        logger.info(
            "Stored document bytes",
            extra={"owner_id": owner_id, "file_path": path, "size_bytes": len(data)},
        )
        return path

    async def remove_bytes(self, path: str) -> None:
        """
        Remove one object.

        Raises:
            StoreUnavailable: If the store fails or reports the key as not deleted
        """
        try:
            failed = await asyncio.to_thread(self._s3.remove, [path])
        except _S3_ERRORS as e:
            raise StoreUnavailable(
                f"Object store remove failed: {type(e).__name__}", path=path
            ) from e
        if failed:
            raise StoreUnavailable("Object store refused to remove object", path=path)

    async def record_metadata(self, document: Document) -> Document:
        """
        Insert the metadata row for stored bytes.

        Args:
            document: Fully populated document record

        Returns:
            Document: The persisted record

        Raises:
            DuplicateId: If the identifier already exists
            MetadataUnavailable: On metadata store error
        """
        try:
            async with self._session_factory() as session:
                if await document_crud.exists(session, document.id):
                    raise DuplicateId(str(document.id))
                row = await document_crud.create(
                    session,
                    id=document.id,
                    owner_id=document.owner_id,
                    file_name=document.file_name,
                    file_path=document.file_path,
                    file_size=document.file_size,
                    file_type=document.file_type,
                    created_at=document.created_at,
                )
                await session.commit()
        except IntegrityError as e:
            if await self._id_taken(document.id):
                raise DuplicateId(str(document.id)) from e
            raise MetadataUnavailable(
                "Metadata insert violated a constraint",
                details={"document_id": str(document.id), "file_path": document.file_path},
            ) from e
        except SQLAlchemyError as e:
            raise MetadataUnavailable(
                f"Metadata store insert failed: {type(e).__name__}",
                details={"document_id": str(document.id)},
            ) from e

        logger.info(
            "Recorded document metadata",
            extra={"owner_id": document.owner_id, "document_id": str(document.id)},
        )
        return Document.model_validate(row)

    async def _id_taken(self, document_id: UUID) -> bool:
        try:
            async with self._session_factory() as session:
                return await document_crud.exists(session, document_id)
        except SQLAlchemyError:
            return False

    async def list_by_owner(self, owner_id: str) -> list[Document]:
        """
        List an owner's documents, newest first.

        Raises:
            MetadataUnavailable: On metadata store error
        """
        try:
            async with self._session_factory() as session:
                rows = await document_crud.get_by_owner(session, owner_id)
        except SQLAlchemyError as e:
            raise MetadataUnavailable(
                f"Metadata store query failed: {type(e).__name__}",
                details={"owner_id": owner_id},
            ) from e
        return [Document.model_validate(row) for row in rows]

    async def get_for_owner(self, owner_id: str, document_id: UUID) -> Document:
        """
        Fetch one document owned by owner_id.

        Raises:
            DocumentNotFoundError: If missing or owned by someone else
            MetadataUnavailable: On metadata store error
        """
        try:
            async with self._session_factory() as session:
                row = await document_crud.get_for_owner(session, document_id, owner_id)
        except SQLAlchemyError as e:
            raise MetadataUnavailable(
                f"Metadata store query failed: {type(e).__name__}",
                details={"document_id": str(document_id)},
            ) from e
        if row is None:
            raise DocumentNotFoundError(str(document_id))
        return Document.model_validate(row)

    async def delete_pair(self, document: Document) -> None:
        """
        Remove a document's bytes, then its metadata row.

        Raises:
            DeleteFailed: partial=False if nothing was removed, partial=True if
                the bytes are gone but the row remains (retry delete_metadata)
        """
        try:
            await self.remove_bytes(document.file_path)
        except StoreUnavailable as e:
            raise DeleteFailed(
                "Could not remove document bytes; nothing was deleted",
                partial=False,
                document_id=str(document.id),
            ) from e

        await self.delete_metadata(document.id)
        logger.info(
            "Deleted document",
            extra={"owner_id": document.owner_id, "document_id": str(document.id)},
        )

    async def delete_metadata(self, document_id: UUID) -> bool:
        """
        Remove only the metadata row.

        Used by delete_pair and by callers retrying after a partial delete.

        Returns:
            bool: True if a row was removed, False if it was already gone

        Raises:
            DeleteFailed: partial=True on metadata store error
        """
        try:
            async with self._session_factory() as session:
                removed = await document_crud.delete_by_id(session, document_id)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Metadata removal failed; row orphaned until retried",
                extra={"document_id": str(document_id), "error_type": type(e).__name__},
            )
            raise DeleteFailed(
                "Document bytes removed but metadata row remains",
                partial=True,
                document_id=str(document_id),
            ) from e
        return removed
