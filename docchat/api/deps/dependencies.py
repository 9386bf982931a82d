"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived collaborators
(clients, gateway, coordinator, chat registry) are built lazily once per
process and shared across requests.

Dependencies: docchat.configs, docchat.application, docchat.boundary
System role: DI container for service injection
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from docchat.application.services import ChatService, IngestionCoordinator, QueryDispatcher
from docchat.boundary.aws.s3_client import S3DocumentClient
from docchat.boundary.db.connection import get_async_session_factory
from docchat.boundary.storage_gateway import StorageGateway
from docchat.boundary.webhooks import InferenceClient, ProcessingWebhookClient
from docchat.configs import Settings, get_settings
from docchat.core.validation_policy import ValidationPolicy
from docchat.observability.error_sink import ErrorSink, LoggingErrorSink

MAX_USER_ID_LENGTH = 255


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings
        self._error_sink = None
        self._s3_client = None
        self._storage_gateway = None
        self._validation_policy = None
        self._ingestion_coordinator = None
        self._query_dispatcher = None
        self._chat_service = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def error_sink(self) -> ErrorSink:
        """Get cached error sink."""
        if self._error_sink is None:
            self._error_sink = LoggingErrorSink()
        return self._error_sink

    @property
    def s3_client(self) -> S3DocumentClient:
        """Get cached S3 document client."""
        if self._s3_client is None:
            s3_settings = self.settings.s3_documents
            self._s3_client = S3DocumentClient(
                bucket=s3_settings.bucket,
                region=s3_settings.region,
                endpoint_url=s3_settings.endpoint_url,
            )
        return self._s3_client

    @property
    def storage_gateway(self) -> StorageGateway:
        """Get cached storage gateway."""
        if self._storage_gateway is None:
            self._storage_gateway = StorageGateway(
                s3_client=self.s3_client,
                session_factory=get_async_session_factory(),
            )
        return self._storage_gateway

    @property
    def validation_policy(self) -> ValidationPolicy:
        """Get cached validation policy."""
        if self._validation_policy is None:
            policy_settings = self.settings.upload_policy
            self._validation_policy = ValidationPolicy(
                allowed_types=policy_settings.allowed_types,
                max_bytes=policy_settings.max_bytes,
            )
        return self._validation_policy

    @property
    def ingestion_coordinator(self) -> IngestionCoordinator:
        """Get cached ingestion coordinator."""
        if self._ingestion_coordinator is None:
            backends = self.settings.backends
            self._ingestion_coordinator = IngestionCoordinator(
                policy=self.validation_policy,
                gateway=self.storage_gateway,
                notifier=ProcessingWebhookClient(
                    url=backends.upload_document_url,
                    timeout=backends.notification_timeout,
                ),
                error_sink=self.error_sink,
            )
        return self._ingestion_coordinator

    @property
    def query_dispatcher(self) -> QueryDispatcher:
        """Get cached query dispatcher."""
        if self._query_dispatcher is None:
            backends = self.settings.backends
            self._query_dispatcher = QueryDispatcher(
                backend=InferenceClient(url=backends.chat_url, timeout=backends.response_timeout),
                timeout=backends.response_timeout,
                apology_message=backends.apology_message,
                error_sink=self.error_sink,
            )
        return self._query_dispatcher

    @property
    def chat_service(self) -> ChatService:
        """Get cached chat service."""
        if self._chat_service is None:
            self._chat_service = ChatService(dispatcher=self.query_dispatcher)
        return self._chat_service

    async def aclose(self) -> None:
        """Let background notifications finish, then drop cached instances."""
        if self._ingestion_coordinator is not None:
            await self._ingestion_coordinator.drain(
                timeout=self.settings.backends.notification_timeout
            )
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._error_sink = None
        self._s3_client = None
        self._storage_gateway = None
        self._validation_policy = None
        self._ingestion_coordinator = None
        self._query_dispatcher = None
        self._chat_service = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_storage_gateway() -> StorageGateway:
    """
    Get storage gateway instance.

    Returns:
        StorageGateway: Shared object + metadata store gateway
    """
    return get_service_cache().storage_gateway


def get_ingestion_coordinator() -> IngestionCoordinator:
    """
    Get ingestion coordinator instance.

    Returns:
        IngestionCoordinator: Shared coordinator (tracks background notifications)
    """
    return get_service_cache().ingestion_coordinator


def get_chat_service() -> ChatService:
    """
    Get chat service instance.

    Returns:
        ChatService: Process-wide chat session registry
    """
    return get_service_cache().chat_service


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """
    Authenticated user identity.

    The identity provider authenticates the request upstream and forwards
    the user id in the X-User-ID header.

    Raises:
        HTTPException(401): Header missing or blank
        HTTPException(400): Identity unusable as an owner key
    """
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authenticated user",
        )
    user_id = x_user_id.strip()
    if len(user_id) > MAX_USER_ID_LENGTH or "/" in user_id or "\\" in user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid user identity",
        )
    return user_id
