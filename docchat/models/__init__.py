"""
Domain records and API schemas.

Dependencies: pydantic
"""

from docchat.models.document import Document, format_file_size
from docchat.models.upload import IngestionResult, UploadOutcome

__all__ = ["Document", "IngestionResult", "UploadOutcome", "format_file_size"]
