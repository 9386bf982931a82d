"""
Upload outcome models.

Transient values describing the terminal result of one ingestion attempt.
Not persisted; reported once to the caller.

Dependencies: None
System role: IngestionCoordinator result contract
"""

from dataclasses import dataclass
from enum import Enum

from docchat.models.document import Document


class UploadOutcome(str, Enum):
    """Terminal state of one ingest() call."""

    ACCEPTED = "accepted"
    REJECTED_VALIDATION = "rejected-validation"
    FAILED_STORAGE = "failed-storage"
    FAILED_METADATA = "failed-metadata"


@dataclass(frozen=True)
class IngestionResult:
    """
    Outcome plus what the caller needs to report it.

    Attributes:
        outcome: Terminal state
        message: Human-readable summary
        document: The persisted document when accepted
        reason: Rejection reason for REJECTED_VALIDATION
        cleanup_succeeded: For FAILED_METADATA, whether orphaned bytes were removed
    """

    outcome: UploadOutcome
    message: str
    document: Document | None = None
    reason: str | None = None
    cleanup_succeeded: bool | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is UploadOutcome.ACCEPTED
