"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory metadata store, fake S3 backend, storage gateway,
error sink recorder
Dependencies: pytest, sqlalchemy, aiosqlite, botocore
System role: Test infrastructure and fixture management
"""

from datetime import datetime, timedelta, timezone

import pytest
from botocore.exceptions import ClientError


class FakeS3:
    """
    In-memory stand-in for a boto3 S3 client.

    Names in fail_on ("put_object", "delete_objects") raise a ClientError; keys in refuse_delete are reported
    under Errors by delete_objects.
    """

    def __init__(self) -> None:
        self.objects: dict[str, dict] = {}
        self.fail_on: set[str] = set()
        self.refuse_delete: set[str] = set()
        self.calls: list[str] = []

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise ClientError(
                {"Error": {"Code": "ServiceUnavailable", "Message": "injected failure"}},
                operation,
            )

    def put_object(self, Bucket, Key, Body, ContentType, Metadata):
        self._maybe_fail("put_object")
        self.objects[Key] = {"Body": bytes(Body), "ContentType": ContentType, "Metadata": Metadata}
        return {}

    def delete_objects(self, Bucket, Delete):
        self._maybe_fail("delete_objects")
        errors = []
        for entry in Delete["Objects"]:
            key = entry["Key"]
            if key in self.refuse_delete:
                errors.append({"Key": key, "Code": "AccessDenied", "Message": "denied"})
            else:
                self.objects.pop(key, None)
        return {"Errors": errors} if errors else {}


class SteppingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def fake_s3() -> FakeS3:
    """Provide in-memory S3 backend."""
    return FakeS3()


@pytest.fixture
def s3_document_client(fake_s3: FakeS3):
    """Provide S3DocumentClient bound to the fake backend."""
    from docchat.boundary.aws.s3_client import S3DocumentClient

    return S3DocumentClient(bucket="test-documents", client=fake_s3)


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from docchat.boundary.db.base import Base
    from docchat.boundary.db.models import DocumentModel  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    """Provide a single session for CRUD-level tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def storage_gateway(s3_document_client, session_factory, clock):
    """Provide StorageGateway over the fake S3 backend and in-memory database."""
    from docchat.boundary.storage_gateway import StorageGateway

    return StorageGateway(s3_document_client, session_factory, clock=clock)


@pytest.fixture
def error_sink():
    """Provide an error sink that records reported failures."""
    from docchat.observability.error_sink import RecordingErrorSink

    return RecordingErrorSink()
