"""
External backend configuration.

Base URLs for the document processing webhook and the inference endpoint,
plus timeouts and the user-facing fallback answer.

Dependencies: pydantic_settings
System role: Configuration for processing and inference clients
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_APOLOGY_MESSAGE = (
    "Sorry, I can't answer your question right now. "
    "Please check your connection and try again."
)


class BackendSettings(BaseSettings):
    """Settings for the processing and inference backends."""

    model_config = SettingsConfigDict(
        env_prefix="BACKENDS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    production_base_url: str = Field(
        default="http://localhost:5678/webhook",
        description="Base URL for production webhooks",
    )
    test_base_url: str = Field(
        default="http://localhost:5678/webhook-test",
        description="Base URL for test webhooks",
    )
    test_mode: bool = Field(
        default=False,
        description="Route backend calls to the test base URL",
    )
    response_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Inference response timeout in seconds",
    )
    notification_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Processing webhook timeout in seconds",
    )
    apology_message: str = Field(
        default=DEFAULT_APOLOGY_MESSAGE,
        description="Assistant text used when no answer can be produced",
    )

    @property
    def base_url(self) -> str:
        """Active base URL, without trailing slash."""
        base = self.test_base_url if self.test_mode else self.production_base_url
        return base.rstrip("/")

    @property
    def upload_document_url(self) -> str:
        return f"{self.base_url}/upload-document"

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}/chat"
