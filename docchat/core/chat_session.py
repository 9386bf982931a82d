"""
Chat session state machine.

An append-only, in-memory message log for one conversation with a
single-flight rule: at most one query to the inference backend is
outstanding per session. Every accepted user message is followed by
exactly one assistant message of the same generation.

Dependencies: None (pure domain layer)
System role: Message ordering and stale-answer suppression for chat
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """
    One turn in a conversation.

    Attributes:
        role: user or assistant
        content: Message text
        timestamp: Creation instant (UTC)
        generation: Session generation the message belongs to
    """

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=utc_now)
    generation: int = 0

    @classmethod
    def user(cls, content: str, generation: int = 0) -> "ChatMessage":
        return cls(MessageRole.USER, content, generation=generation)

    @classmethod
    def assistant(cls, content: str, generation: int = 0) -> "ChatMessage":
        return cls(MessageRole.ASSISTANT, content, generation=generation)


class SessionState(str, Enum):
    """Chat session lifecycle states."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


@dataclass(frozen=True)
class PendingQuery:
    """A user query accepted by the session and not yet answered."""

    query_text: str
    generation: int


class AnswerSource(Protocol):
    """Anything that turns a query into exactly one assistant message."""

    async def ask(
        self, owner_id: str, query_text: str, session_generation: int
    ) -> ChatMessage:
        ...


class ChatSession:
    """
    Ordered, append-only log of one conversation.

    State transitions:
        IDLE -> AWAITING_RESPONSE on begin_turn (user message appended first)
        AWAITING_RESPONSE -> IDLE when complete_turn appends the answer
        any -> IDLE on clear(), which also bumps the generation counter

    Answers carrying an older generation than the session's current one
    are discarded so a cleared conversation never shows a stale reply.
    """

    def __init__(
        self,
        owner_id: str,
        session_id: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.owner_id = owner_id
        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = clock()
        self._clock = clock
        self._messages: list[ChatMessage] = []
        self._state = SessionState.IDLE
        self._generation = 0

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_awaiting_response(self) -> bool:
        return self._state is SessionState.AWAITING_RESPONSE

    def __len__(self) -> int:
        return len(self._messages)

    def begin_turn(self, query_text: str) -> PendingQuery | None:
        """
        Append the user's message and enter AWAITING_RESPONSE.

        Returns None (log unchanged) when the session is already awaiting a
        response or the query is blank.
        """
        if self.is_awaiting_response:
            logger.info(
                "Submission ignored: session awaiting response",
                extra={"session_id": self.session_id, "generation": self._generation},
            )
            return None
        text = query_text.strip()
        if not text:
            return None

        self._messages.append(
            ChatMessage(MessageRole.USER, text, self._clock(), self._generation)
        )
        self._state = SessionState.AWAITING_RESPONSE
        return PendingQuery(query_text=text, generation=self._generation)

    def complete_turn(self, pending: PendingQuery, reply: ChatMessage) -> bool:
        """
        Append the assistant answer for a pending query.

        Returns:
            bool: False when the answer belongs to a cleared generation and was
            discarded, True when it was appended
        """
        if pending.generation != self._generation:
            logger.info(
                "Discarding stale answer from a cleared conversation",
                extra={
                    "session_id": self.session_id,
                    "stale_generation": pending.generation,
                    "generation": self._generation,
                },
            )
            return False
        if reply.role is not MessageRole.ASSISTANT:
            raise ValueError("A turn can only be completed by an assistant message")

        self._messages.append(
            ChatMessage(MessageRole.ASSISTANT, reply.content, reply.timestamp, self._generation)
        )
        self._state = SessionState.IDLE
        return True

    async def submit(self, query_text: str, source: AnswerSource) -> ChatMessage | None:
        """
        Run one full conversation turn.

        Args:
            query_text: The user's question
            source: Answer provider, normally QueryDispatcher

        Returns:
            The appended assistant message, or None when the submission was
            ignored or its answer went stale
        """
        pending = self.begin_turn(query_text)
        if pending is None:
            return None
        return await self.answer(pending, source)

    async def answer(self, pending: PendingQuery, source: AnswerSource) -> ChatMessage | None:
        """Fetch and append the answer for a turn opened by begin_turn."""
        reply = await source.ask(self.owner_id, pending.query_text, pending.generation)
        if self.complete_turn(pending, reply):
            return self._messages[-1]
        return None

    def clear(self) -> None:
        """Discard the log and return to IDLE; in-flight answers become stale."""
        self._generation += 1
        self._messages.clear()
        self._state = SessionState.IDLE
        logger.info(
            "Chat session cleared",
            extra={"session_id": self.session_id, "generation": self._generation},
        )
