"""
Test suite for IngestionCoordinator.

Runs the real StorageGateway over the S3 fake and in-memory SQLite; the
processing notifier is mocked.

System role: Verification of upload orchestration and compensation
"""

import asyncio
import uuid
from unittest.mock import AsyncMock

import pytest

from docchat.application.services.ingestion_service import IngestionCoordinator
from docchat.boundary.db.base import Base
from docchat.core.exceptions import NotificationError
from docchat.core.storage_paths import derive_storage_path
from docchat.core.validation_policy import ValidationPolicy
from docchat.models.upload import UploadOutcome

MB = 1024 * 1024


@pytest.fixture
def policy() -> ValidationPolicy:
    return ValidationPolicy({"application/pdf": "PDF", "text/plain": "Text"}, max_bytes=50 * MB)


@pytest.fixture
def notifier() -> AsyncMock:
    notifier = AsyncMock()
    notifier.notify_uploaded = AsyncMock(return_value=200)
    return notifier


@pytest.fixture
def coordinator(policy, storage_gateway, notifier, error_sink, clock) -> IngestionCoordinator:
    return IngestionCoordinator(
        policy=policy,
        gateway=storage_gateway,
        notifier=notifier,
        error_sink=error_sink,
        cleanup_timeout=1.0,
        clock=clock,
    )


async def _drop_tables(session_factory) -> None:
    async with session_factory.kw["bind"].begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


class TestAccepted:
    @pytest.mark.asyncio
    async def test_two_megabyte_text_file_is_accepted(
        self, coordinator, storage_gateway, fake_s3, notifier
    ) -> None:
        # Arrange
        data = b"a" * (2 * MB)

        # Act
        result = await coordinator.ingest("alice", "notes.txt", "text/plain", data)
        await coordinator.drain()

        # Assert
        assert result.outcome is UploadOutcome.ACCEPTED
        assert result.accepted
        assert result.message == 'File "notes.txt" uploaded successfully'
        assert result.document.file_size == 2097152
        assert result.document.file_type == "text/plain"
        assert fake_s3.objects[result.document.file_path]["Body"] == data

        listed = await storage_gateway.list_by_owner("alice")
        assert [d.id for d in listed] == [result.document.id]

        notifier.notify_uploaded.assert_awaited_once_with(
            file_name="notes.txt",
            file_path=result.document.file_path,
            user_id="alice",
        )

    @pytest.mark.asyncio
    async def test_ingest_does_not_wait_for_notification(self, coordinator, notifier) -> None:
        # Arrange
        release = asyncio.Event()

        async def slow_notify(**kwargs) -> int:
            await release.wait()
            return 200

        notifier.notify_uploaded.side_effect = slow_notify

        # Act
        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        # Assert
        assert result.outcome is UploadOutcome.ACCEPTED
        assert coordinator.pending_notifications == 1
        release.set()
        await coordinator.drain()
        assert coordinator.pending_notifications == 0

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_change_outcome(
        self, coordinator, notifier, error_sink
    ) -> None:
        notifier.notify_uploaded.side_effect = NotificationError("webhook down", status_code=503)

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")
        await coordinator.drain()

        assert result.outcome is UploadOutcome.ACCEPTED
        assert [e.operation for e in error_sink.errors] == ["processing_notification"]
        assert error_sink.errors[0].context["document_id"] == str(result.document.id)

    @pytest.mark.asyncio
    async def test_concurrent_uploads_get_distinct_paths(self, policy, clock) -> None:
        # Arrange: gateway stub so the uploads interleave freely
        gateway = AsyncMock()

        async def put(owner_id, display_name, data, content_type, created_at=None):
            await asyncio.sleep(0)
            return derive_storage_path(owner_id, created_at, display_name)

        async def record_metadata(document):
            await asyncio.sleep(0)
            return document

        gateway.put.side_effect = put
        gateway.record_metadata.side_effect = record_metadata
        coordinator = IngestionCoordinator(policy=policy, gateway=gateway, clock=clock)

        # Act
        results = await asyncio.gather(
            *(coordinator.ingest("alice", "same.pdf", "application/pdf", b"%PDF") for _ in range(5))
        )

        # Assert
        assert all(r.accepted for r in results)
        assert len({r.document.file_path for r in results}) == 5
        assert len({r.document.id for r in results}) == 5

    @pytest.mark.asyncio
    async def test_without_notifier_upload_still_succeeds(self, policy, storage_gateway, clock) -> None:
        coordinator = IngestionCoordinator(policy=policy, gateway=storage_gateway, clock=clock)

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        assert result.accepted
        assert coordinator.pending_notifications == 0


class TestRejected:
    @pytest.mark.asyncio
    async def test_unsupported_type_stores_nothing(self, coordinator, fake_s3, notifier) -> None:
        result = await coordinator.ingest("alice", "pic.png", "image/png", b"\x89PNG")

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "unsupported-type"
        assert fake_s3.calls == []
        notifier.notify_uploaded.assert_not_called()

    @pytest.mark.asyncio
    async def test_too_large_stores_nothing(self, policy, storage_gateway, fake_s3, clock) -> None:
        small = ValidationPolicy(policy.allowed_types, max_bytes=10)
        coordinator = IngestionCoordinator(policy=small, gateway=storage_gateway, clock=clock)

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"x" * 11)

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "too-large"
        assert fake_s3.objects == {}

    @pytest.mark.asyncio
    async def test_blank_file_name_is_rejected_before_storage(
        self, coordinator, fake_s3, storage_gateway
    ) -> None:
        result = await coordinator.ingest("alice", "", "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "invalid-name"
        assert fake_s3.calls == []
        assert await storage_gateway.list_by_owner("alice") == []

    @pytest.mark.asyncio
    async def test_owner_with_separator_is_rejected_before_storage(self, coordinator, fake_s3) -> None:
        result = await coordinator.ingest("a/b", "notes.pdf", "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "invalid-name"
        assert fake_s3.calls == []

    @pytest.mark.asyncio
    async def test_name_too_long_for_metadata_row_is_rejected(self, coordinator, fake_s3) -> None:
        long_name = "n" * 300 + ".pdf"

        result = await coordinator.ingest("alice", long_name, "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "invalid-name"
        assert fake_s3.objects == {}


class TestPrecheck:
    def test_declared_oversize_is_rejected(self, policy) -> None:
        gateway = AsyncMock()
        coordinator = IngestionCoordinator(policy=policy, gateway=gateway)

        result = coordinator.precheck("alice", "big.pdf", "application/pdf", 51 * MB)

        assert result.outcome is UploadOutcome.REJECTED_VALIDATION
        assert result.reason == "too-large"
        gateway.put.assert_not_called()

    def test_acceptable_candidate_passes(self, policy) -> None:
        coordinator = IngestionCoordinator(policy=policy, gateway=AsyncMock())

        assert coordinator.precheck("alice", "a.pdf", "application/pdf", MB) is None


class TestFailures:
    @pytest.mark.asyncio
    async def test_object_store_failure(self, coordinator, fake_s3, storage_gateway, notifier) -> None:
        fake_s3.fail_on.add("put_object")

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.FAILED_STORAGE
        assert result.document is None
        assert await storage_gateway.list_by_owner("alice") == []
        notifier.notify_uploaded.assert_not_called()

    @pytest.mark.asyncio
    async def test_metadata_failure_removes_orphaned_bytes(
        self, coordinator, fake_s3, session_factory, notifier
    ) -> None:
        # Arrange
        await _drop_tables(session_factory)

        # Act
        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        # Assert
        assert result.outcome is UploadOutcome.FAILED_METADATA
        assert result.cleanup_succeeded is True
        assert fake_s3.objects == {}
        notifier.notify_uploaded.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_cleanup_is_reported(
        self, coordinator, fake_s3, session_factory, error_sink
    ) -> None:
        await _drop_tables(session_factory)
        fake_s3.fail_on.add("delete_objects")

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.FAILED_METADATA
        assert result.cleanup_succeeded is False
        assert [e.operation for e in error_sink.errors] == ["orphan_cleanup"]
        assert len(fake_s3.objects) == 1

    @pytest.mark.asyncio
    async def test_hanging_cleanup_is_bounded_by_timeout(
        self, policy, storage_gateway, session_factory, error_sink, clock, monkeypatch
    ) -> None:
        # Arrange
        async def hang(path: str) -> None:
            await asyncio.Event().wait()

        monkeypatch.setattr(storage_gateway, "remove_bytes", hang)
        await _drop_tables(session_factory)
        coordinator = IngestionCoordinator(
            policy=policy,
            gateway=storage_gateway,
            error_sink=error_sink,
            cleanup_timeout=0.1,
            clock=clock,
        )
        loop = asyncio.get_running_loop()
        started = loop.time()

        # Act
        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        # Assert
        assert loop.time() - started < 1.0
        assert result.outcome is UploadOutcome.FAILED_METADATA
        assert result.cleanup_succeeded is False
        assert [e.operation for e in error_sink.errors] == ["orphan_cleanup"]

    @pytest.mark.asyncio
    async def test_unbuildable_record_removes_stored_bytes(
        self, policy, storage_gateway, fake_s3, clock
    ) -> None:
        coordinator = IngestionCoordinator(
            policy=policy, gateway=storage_gateway, clock=clock, id_factory=lambda: "not-a-uuid"
        )

        result = await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        assert result.outcome is UploadOutcome.FAILED_METADATA
        assert result.cleanup_succeeded is True
        assert fake_s3.objects == {}


class TestDrain:
    @pytest.mark.asyncio
    async def test_drain_cancels_notifications_past_timeout(self, coordinator, notifier) -> None:
        async def never_returns(**kwargs) -> int:
            await asyncio.Event().wait()
            return 200

        notifier.notify_uploaded.side_effect = never_returns
        await coordinator.ingest("alice", "a.pdf", "application/pdf", b"%PDF")

        await coordinator.drain(timeout=0.05)

        assert coordinator.pending_notifications == 0


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_rejected_row_leaves_no_listing_and_no_bytes(
        self, policy, storage_gateway, fake_s3, clock
    ) -> None:
        # Arrange: a reused identifier makes the second metadata insert fail
        fixed_id = uuid.uuid4()
        coordinator = IngestionCoordinator(
            policy=policy, gateway=storage_gateway, clock=clock, id_factory=lambda: fixed_id
        )
        first = await coordinator.ingest("alice", "one.pdf", "application/pdf", b"first")

        # Act
        second = await coordinator.ingest("alice", "two.pdf", "application/pdf", b"second")

        # Assert
        assert first.accepted
        assert second.outcome is UploadOutcome.FAILED_METADATA
        assert second.cleanup_succeeded is True
        listed = await storage_gateway.list_by_owner("alice")
        assert [d.file_name for d in listed] == ["one.pdf"]
        assert list(fake_s3.objects) == [first.document.file_path]
