"""
Ingestion coordinator.

Runs one upload end to end: validate, store bytes, record metadata, then
notify the processing backend in the background. The returned outcome
depends only on validation and durable storage; the notification can fail
without affecting it.

Dependencies: docchat.core, docchat.boundary.storage_gateway, docchat.boundary.webhooks
System role: Upload orchestration with compensating cleanup
"""

import asyncio
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Protocol

import pydantic

from docchat.boundary.storage_gateway import StorageGateway
from docchat.core.exceptions import StorageError, StoreUnavailable, ValidationError
from docchat.core.validation_policy import Accepted, ValidationPolicy
from docchat.models.document import Document
from docchat.models.upload import IngestionResult, UploadOutcome
from docchat.observability.error_sink import ErrorSink, LoggingErrorSink
from docchat.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)


class ProcessingNotifier(Protocol):
    """Anything that can tell the processing backend about a new document."""

    async def notify_uploaded(self, file_name: str, file_path: str, user_id: str) -> int:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestionCoordinator:
    """
    Orchestrates document uploads.

    Concurrent ingest() calls are independent; no lock is taken. Each call
    reaches exactly one terminal UploadOutcome.
    """

    def __init__(
        self,
        policy: ValidationPolicy,
        gateway: StorageGateway,
        notifier: ProcessingNotifier | None = None,
        error_sink: ErrorSink | None = None,
        cleanup_timeout: float = 5.0,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        """
        Args:
            policy: Upload validation policy
            gateway: Object + metadata store gateway
            notifier: Processing webhook client; notifications skipped if None
            error_sink: Receives swallowed notification and cleanup failures
            cleanup_timeout: Upper bound in seconds for orphan cleanup
            clock: Source of creation instants
            id_factory: Source of document identifiers
        """
        self.policy = policy
        self.gateway = gateway
        self.notifier = notifier
        self.error_sink = error_sink or LoggingErrorSink()
        self.cleanup_timeout = cleanup_timeout
        self._clock = clock
        self._id_factory = id_factory
        self._notifications: set[asyncio.Task] = set()

    @property
    def pending_notifications(self) -> int:
        """Number of notification tasks still running."""
        return len(self._notifications)

    def precheck(
        self,
        owner_id: str,
        file_name: str,
        media_type: str | None,
        byte_size: int,
    ) -> IngestionResult | None:
        """
        Run validation from declared values, without touching storage.

        Lets the HTTP layer refuse an oversized upload before reading its body.

        Returns:
            The rejected-validation result, or None if the candidate passes
        """
        verdict = self._screen(owner_id, file_name, media_type, byte_size)
        return verdict if isinstance(verdict, IngestionResult) else None

    def _screen(
        self,
        owner_id: str,
        file_name: str,
        media_type: str | None,
        byte_size: int,
    ) -> Accepted | IngestionResult:
        try:
            self.policy.check_names(owner_id, file_name)
        except ValidationError as e:
            reason, message = e.reason, e.message
        else:
            verdict = self.policy.validate(media_type, byte_size)
            if isinstance(verdict, Accepted):
                return verdict
            reason, message = verdict.reason.value, verdict.message

        logger.info(
            "Upload rejected by validation policy",
            extra={
                "owner_id": safe_log_value(owner_id),
                "file_name": safe_log_value(file_name),
                "size_bytes": byte_size,
                "reason": reason,
            },
        )
        return IngestionResult(
            outcome=UploadOutcome.REJECTED_VALIDATION,
            message=message,
            reason=reason,
        )

    async def ingest(
        self,
        owner_id: str,
        file_name: str,
        media_type: str | None,
        data: bytes,
    ) -> IngestionResult:
        """
        Validate, persist and announce one uploaded file.

        Args:
            owner_id: Authenticated user identity
            file_name: Original display name
            media_type: Declared MIME type
            data: File contents

        Returns:
            IngestionResult: accepted, rejected-validation, failed-storage or failed-metadata
        """
        verdict = self._screen(owner_id, file_name, media_type, len(data))
        if isinstance(verdict, IngestionResult):
            return verdict

        log_ctx = {"owner_id": owner_id, "file_name": file_name, "size_bytes": len(data)}
        created_at = self._clock()
        try:
            path = await self.gateway.put(
                owner_id, file_name, data, verdict.media_type, created_at=created_at
            )
        except StoreUnavailable as e:
            logger.error(
                "Upload failed: object store unavailable",
                extra={**log_ctx, "error_type": type(e).__name__},
            )
            return IngestionResult(
                outcome=UploadOutcome.FAILED_STORAGE,
                message="The file could not be stored. Please try again later.",
            )

        try:
            document = Document(
                id=self._id_factory(),
                owner_id=owner_id,
                file_name=file_name,
                file_path=path,
                file_size=len(data),
                file_type=verdict.media_type,
                created_at=created_at,
            )
            document = await self.gateway.record_metadata(document)
        except (StorageError, pydantic.ValidationError) as e:
            logger.error(
                "Upload failed: metadata not recorded, removing orphaned bytes",
                extra={**log_ctx, "file_path": path, "error_type": type(e).__name__},
            )
            cleaned = await self._cleanup_orphan(path, owner_id)
            return IngestionResult(
                outcome=UploadOutcome.FAILED_METADATA,
                message="The file could not be registered. Please try again later.",
                cleanup_succeeded=cleaned,
            )

        self._schedule_notification(document)

        logger.info(
            "Upload accepted",
            extra={**log_ctx, "document_id": str(document.id), "file_path": path},
        )
        return IngestionResult(
            outcome=UploadOutcome.ACCEPTED,
            message=f'File "{file_name}" uploaded successfully',
            document=document,
        )

    async def _cleanup_orphan(self, path: str, owner_id: str) -> bool:
        """One bounded attempt to remove bytes whose metadata was never recorded."""
        try:
            await asyncio.wait_for(self.gateway.remove_bytes(path), timeout=self.cleanup_timeout)
        except (StoreUnavailable, asyncio.TimeoutError) as e:
            self.error_sink.report(
                "orphan_cleanup", e, owner_id=owner_id, file_path=path
            )
            return False
        logger.info("Removed orphaned document bytes", extra={"file_path": path})
        return True

    def _schedule_notification(self, document: Document) -> None:
        if self.notifier is None:
            logger.debug(
                "No processing notifier configured",
                extra={"document_id": str(document.id)},
            )
            return
        task = asyncio.create_task(
            self._notify(document), name=f"notify-processing-{document.id}"
        )
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _notify(self, document: Document) -> None:
        """Detached notification; every failure goes to the error sink only."""
        try:
            status = await self.notifier.notify_uploaded(
                file_name=document.file_name,
                file_path=document.file_path,
                user_id=document.owner_id,
            )
        except Exception as e:
            self.error_sink.report(
                "processing_notification",
                e,
                document_id=str(document.id),
                file_path=document.file_path,
            )
            return
        logger.info(
            "Processing backend notified",
            extra={"document_id": str(document.id), "status_code": status},
        )

    async def drain(self, timeout: float | None = None) -> None:
        """
        Wait for in-flight notifications, e.g. on shutdown.

        Tasks still running after the timeout are cancelled.
        """
        if not self._notifications:
            return
        tasks = list(self._notifications)
        done, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                "Cancelled unfinished processing notifications",
                extra={"cancelled": len(pending)},
            )
