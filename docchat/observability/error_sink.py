"""
Error sink for absorbed backend failures.

Failures that never reach the caller (webhook notification, inference turn)
are reported here so they stay observable.

Dependencies: logging (stdlib)
System role: Observability sink for swallowed errors
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from docchat.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class ErrorSink(Protocol):
    """Receives technical errors that are converted into safe defaults."""

    def report(self, operation: str, error: BaseException, **context: Any) -> None:
        ...


class LoggingErrorSink:
    """Default sink: logs the error with its context at WARNING level."""

    def __init__(self, sink_logger: logging.Logger | None = None) -> None:
        self._logger = sink_logger or logger

    def report(self, operation: str, error: BaseException, **context: Any) -> None:
        log_exception_with_context(
            self._logger,
            f"{operation} failed",
            error,
            level=logging.WARNING,
            operation=operation,
            **context,
        )


@dataclass
class ReportedError:
    """One error captured by RecordingErrorSink."""

    operation: str
    error: BaseException
    context: dict[str, Any] = field(default_factory=dict)


class RecordingErrorSink:
    """Keeps reported errors in memory; also forwards them to a logging sink."""

    def __init__(self) -> None:
        self.errors: list[ReportedError] = []
        self._logging_sink = LoggingErrorSink()

    def report(self, operation: str, error: BaseException, **context: Any) -> None:
        self.errors.append(ReportedError(operation, error, dict(context)))
        self._logging_sink.report(operation, error, **context)
