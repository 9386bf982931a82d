"""
Upload validation policy.

Classifies an upload candidate as accepted or rejected from its declared
media type and byte size. Type is checked before size; exactly one reason
is reported per rejection. check_names guards the owner id and display
name a document is stored under.

Dependencies: None (pure domain layer)
System role: Gatekeeper for IngestionCoordinator
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from docchat.core.exceptions import ValidationError

MAX_NAME_LENGTH = 255


class RejectionReason(str, Enum):
    """Why an upload candidate was rejected."""

    UNSUPPORTED_TYPE = "unsupported-type"
    TOO_LARGE = "too-large"
    INVALID_NAME = "invalid-name"


@dataclass(frozen=True)
class Accepted:
    """Validation passed; label is the allow-list's name for the media type."""

    media_type: str
    label: str

    @property
    def accepted(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    """Validation failed for exactly one reason."""

    reason: RejectionReason
    message: str

    @property
    def accepted(self) -> bool:
        return False


ValidationResult = Accepted | Rejected


class ValidationPolicy:
    """
    Allow-list and size ceiling for uploads.

    Instances are immutable; validate() has no side effects and may be
    called any number of times in any order.
    """

    def __init__(self, allowed_types: Mapping[str, str], max_bytes: int) -> None:
        if max_bytes < 0:
            raise ValueError("max_bytes must be non-negative")
        self._allowed = MappingProxyType(
            {media_type.lower(): label for media_type, label in allowed_types.items()}
        )
        self._max_bytes = max_bytes

    @property
    def allowed_types(self) -> Mapping[str, str]:
        return self._allowed

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, media_type: str | None, byte_size: int) -> ValidationResult:
        """
        Classify an upload candidate.

        Args:
            media_type: Declared MIME type (parameters such as charset ignored)
            byte_size: Size of the payload in bytes

        Returns:
            Accepted or Rejected(reason)
        """
        normalized = _normalize_media_type(media_type)
        label = self._allowed.get(normalized)
        if label is None:
            return Rejected(
                RejectionReason.UNSUPPORTED_TYPE,
                f"Unsupported file type '{media_type}'. "
                f"Allowed: {', '.join(sorted(self._allowed.values()))}",
            )
        if byte_size > self._max_bytes:
            return Rejected(
                RejectionReason.TOO_LARGE,
                f"File is {byte_size} bytes; the limit is {self._max_bytes} bytes",
            )
        return Accepted(media_type=normalized, label=label)

    def check_names(self, owner_id: str, file_name: str) -> None:
        """
        Check the identity and display name an upload will be stored under.

        Raises:
            ValidationError: reason "invalid-name" if the owner id is not a
                single path segment, or the name is blank or too long
        """
        if (
            not owner_id
            or len(owner_id) > MAX_NAME_LENGTH
            or "/" in owner_id
            or "\\" in owner_id
        ):
            raise ValidationError(
                RejectionReason.INVALID_NAME.value,
                f"Owner identity must be a single path segment of at most {MAX_NAME_LENGTH} characters",
            )
        if not file_name.strip():
            raise ValidationError(RejectionReason.INVALID_NAME.value, "File name must not be empty")
        if len(file_name) > MAX_NAME_LENGTH:
            raise ValidationError(
                RejectionReason.INVALID_NAME.value,
                f"File name is longer than {MAX_NAME_LENGTH} characters",
            )


def _normalize_media_type(media_type: str | None) -> str:
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()
