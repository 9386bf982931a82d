"""
Upload validation configuration.

Allow-list of accepted media types and the upload size ceiling.

Dependencies: pydantic_settings
System role: Configuration for ValidationPolicy
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class UploadPolicySettings(BaseSettings):
    """Settings for upload validation."""

    model_config = SettingsConfigDict(
        env_prefix="UPLOAD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    allowed_types: dict[str, str] = Field(
        default_factory=lambda: {"application/pdf": "PDF"},
        description="Media type -> accepted label (JSON object in env)",
    )
    max_bytes: int = Field(
        default=DEFAULT_MAX_BYTES,
        ge=0,
        description="Maximum upload size in bytes",
    )
