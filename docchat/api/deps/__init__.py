"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_chat_service,
    get_current_user_id,
    get_ingestion_coordinator,
    get_service_cache,
    get_storage_gateway,
)

__all__ = [
    "get_chat_service",
    "get_current_user_id",
    "get_ingestion_coordinator",
    "get_service_cache",
    "get_storage_gateway",
]
