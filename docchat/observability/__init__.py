"""
Observability module.

Provides structured logging, correlation ID tracking, request middleware
and the error sink used for absorbed backend failures.
"""

from docchat.observability.error_sink import ErrorSink, LoggingErrorSink, RecordingErrorSink
from docchat.observability.logger import configure_logging

__all__ = [
    "ErrorSink",
    "LoggingErrorSink",
    "RecordingErrorSink",
    "configure_logging",
]
