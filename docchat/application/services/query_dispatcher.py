"""
Query dispatcher.

Sends one user query to the inference backend and always produces exactly
one assistant message. Timeouts, transport errors, bad statuses and
malformed bodies become the fixed apology text; the technical error goes
to the error sink, never to the user.

Dependencies: docchat.boundary.webhooks.inference_client, docchat.core.chat_session
System role: Request/response correlation with the inference backend
"""

import asyncio
import logging
import time
from typing import Protocol

from docchat.core.chat_session import ChatMessage
from docchat.core.exceptions import InferenceError
from docchat.observability.error_sink import ErrorSink, LoggingErrorSink

logger = logging.getLogger(__name__)


class InferenceBackend(Protocol):
    async def chat(self, query: str, user_id: str) -> str:
        ...


class QueryDispatcher:
    """Turns a query into an assistant message; never raises."""

    def __init__(
        self,
        backend: InferenceBackend,
        timeout: float,
        apology_message: str,
        error_sink: ErrorSink | None = None,
    ) -> None:
        """
        Args:
            backend: Inference client
            timeout: Total time allowed for one answer, in seconds
            apology_message: Fixed assistant text used on any failure
            error_sink: Receives the technical error behind each apology
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.backend = backend
        self.timeout = timeout
        self.apology_message = apology_message
        self.error_sink = error_sink or LoggingErrorSink()

    async def ask(
        self, owner_id: str, query_text: str, session_generation: int
    ) -> ChatMessage:
        """
        Ask the inference backend one question.

        Args:
            owner_id: Authenticated user identity
            query_text: The user's question
            session_generation: Generation of the asking session, stamped on
                the reply so the session can drop stale answers

        Returns:
            ChatMessage: Assistant message with the answer or the apology text
        """
        started = time.monotonic()
        try:
            answer = await asyncio.wait_for(
                self.backend.chat(query_text, owner_id), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            error = InferenceError(
                f"Inference backend did not answer within {self.timeout}s"
            )
            return self._apology(error, owner_id, session_generation, started)
        except Exception as e:
            return self._apology(e, owner_id, session_generation, started)

        logger.info(
            "Inference answer received",
            extra={
                "owner_id": owner_id,
                "generation": session_generation,
                "latency_ms": round((time.monotonic() - started) * 1000, 2),
            },
        )
        return ChatMessage.assistant(answer, generation=session_generation)

    def _apology(
        self,
        error: BaseException,
        owner_id: str,
        session_generation: int,
        started: float,
    ) -> ChatMessage:
        self.error_sink.report(
            "inference",
            error,
            owner_id=owner_id,
            generation=session_generation,
            latency_ms=round((time.monotonic() - started) * 1000, 2),
        )
        return ChatMessage.assistant(self.apology_message, generation=session_generation)
