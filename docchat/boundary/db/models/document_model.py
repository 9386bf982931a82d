"""
Document ORM model.

Metadata row for an uploaded document. A row exists if and only if the
document's bytes exist in the object store at file_path.

Dependencies: sqlalchemy, docchat.boundary.db.base
System role: Document metadata persistence
"""

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from docchat.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class DocumentModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Document ORM model.

    Attributes:
        id: UUID primary key (caller-generated)
        owner_id: Identity of the uploading user; all reads filter on it
        file_name: Original display name (255 char limit)
        file_path: Object store key, unique (1024 char limit)
        file_size: Size in bytes
        file_type: Declared media type
        created_at: Upload timestamp (UTC)
    """

    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_owner_created", "owner_id", "created_at"),)

    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)

    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    file_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
        doc="Object store key for raw document",
    )

    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)

    file_type: Mapped[str] = mapped_column(String(255), nullable=False)
