"""
Document domain models and schemas.

The immutable Document record shared by the storage gateway and the
ingestion coordinator, plus request/response schemas for document routes.

Dependencies: pydantic
System role: Document contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(size: int) -> str:
    """
    Human readable size, base 1024, at most two decimals.

    Examples: 0 -> "0 Bytes", 1536 -> "1.5 KB", 2097152 -> "2 MB"
    """
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


class Document(BaseModel):
    """
    One uploaded artifact.

    Created once as {bytes stored, row persisted}; never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    owner_id: str = Field(min_length=1, max_length=255)
    file_name: str = Field(min_length=1, max_length=255, description="Display name")
    file_path: str = Field(min_length=1, description="Object store key")
    file_size: int = Field(ge=0, description="Size in bytes")
    file_type: str = Field(description="Declared media type")
    created_at: datetime


class DocumentResponse(BaseModel):
    """Response schema for a single document."""

    id: uuid.UUID
    file_name: str
    file_path: str
    file_size: int
    file_type: str
    created_at: datetime
    size_display: str

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            file_name=document.file_name,
            file_path=document.file_path,
            file_size=document.file_size,
            file_type=document.file_type,
            created_at=document.created_at,
            size_display=format_file_size(document.file_size),
        )


class DocumentListResponse(BaseModel):
    """Document list for one owner, newest first."""

    documents: list[DocumentResponse]
    total: int


class UploadResponse(BaseModel):
    """Terminal result of one upload attempt."""

    outcome: str = Field(description="accepted | rejected-validation | failed-storage | failed-metadata")
    message: str
    reason: str | None = Field(default=None, description="Validation rejection reason")
    document: DocumentResponse | None = None


class DeleteErrorResponse(BaseModel):
    """Body returned when deleting a document pair fails."""

    detail: str
    kind: str
    partial: bool
