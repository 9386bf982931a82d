"""
Exception hierarchy for DocChat.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocChatException(Exception):
    """Base exception for all DocChat application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocChatException):
    """Raised when an upload candidate is rejected by the validation policy."""

    def __init__(
        self,
        reason: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            reason: Rejection reason ("unsupported-type", "too-large" or "invalid-name")
            message: Error message, derived from reason if omitted
            details: Additional context
        """
        details = details or {}
        details["reason"] = reason
        self.reason = reason
        super().__init__(message or f"Upload rejected: {reason}", details)


class StorageError(DocChatException):
    """Base exception for object store and metadata store failures."""

    kind = "storage-error"


class StoreUnavailable(StorageError):
    """Raised when the object store rejects or cannot complete an operation."""

    kind = "store-unavailable"

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)


class MetadataUnavailable(StorageError):
    """Raised when the metadata store cannot complete an operation."""

    kind = "metadata-unavailable"


class DuplicateId(StorageError):
    """Raised when a document identifier already exists in the metadata store."""

    kind = "duplicate-id"

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document already exists: {document_id}", details)


class DeleteFailed(StorageError):
    """
    Raised when removing a document pair fails.

    partial=True means the bytes are gone but the metadata row remains; the
    caller should retry the metadata removal only.
    """

    kind = "delete-failed"

    def __init__(
        self,
        message: str,
        partial: bool,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["partial"] = partial
        if document_id:
            details["document_id"] = document_id
        self.partial = partial
        super().__init__(message, details)


class DocumentNotFoundError(StorageError):
    """Raised when a document does not exist for the requesting owner."""

    kind = "not-found"

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class NotificationError(DocChatException):
    """Raised when the processing webhook is unreachable or answers non-2xx."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class InferenceError(DocChatException):
    """Raised when the inference backend times out, fails or returns garbage."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details)


class ChatSessionNotFoundError(DocChatException):
    """Raised when a chat session cannot be found for the owner."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["session_id"] = session_id
        super().__init__(f"Chat session not found: {session_id}", details)


class SessionBusyError(DocChatException):
    """Raised when a query is submitted while the session awaits a response."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["session_id"] = session_id
        super().__init__(f"Chat session is awaiting a response: {session_id}", details)
