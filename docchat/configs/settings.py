"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from docchat.configs.backends import BackendSettings
from docchat.configs.base import BaseSettings
from docchat.configs.database import DatabaseSettings
from docchat.configs.s3_documents import S3DocumentsSettings
from docchat.configs.upload_policy import UploadPolicySettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    s3_documents: S3DocumentsSettings = Field(default_factory=S3DocumentsSettings)
    upload_policy: UploadPolicySettings = Field(default_factory=UploadPolicySettings)
    backends: BackendSettings = Field(default_factory=BackendSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from docchat.configs import get_settings
        settings = get_settings()
    """
    return Settings()
