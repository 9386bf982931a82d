"""
Chat service for document-grounded conversations.

Keeps the in-memory chat sessions of each owner and runs conversation
turns through QueryDispatcher. Sessions live for the process lifetime
only and are never visible to other owners.

Dependencies: docchat.core.chat_session, docchat.application.services.query_dispatcher
System role: Chat session registry and turn orchestration
"""

import asyncio
import logging
from collections import OrderedDict

from docchat.application.services.query_dispatcher import QueryDispatcher
from docchat.core.chat_session import ChatMessage, ChatSession
from docchat.core.exceptions import ChatSessionNotFoundError, SessionBusyError

logger = logging.getLogger(__name__)


class ChatService:
    """
    Registry of chat sessions keyed by owner.

    When an owner exceeds max_sessions_per_owner, the oldest idle session
    is evicted.
    """

    def __init__(self, dispatcher: QueryDispatcher, max_sessions_per_owner: int = 20) -> None:
        self.dispatcher = dispatcher
        self.max_sessions_per_owner = max_sessions_per_owner
        self._sessions: dict[str, OrderedDict[str, ChatSession]] = {}

    def create_session(self, owner_id: str) -> ChatSession:
        """Open a new, empty session for the owner."""
        sessions = self._sessions.setdefault(owner_id, OrderedDict())
        session = ChatSession(owner_id)
        sessions[session.session_id] = session
        self._evict(owner_id, sessions, keep=session.session_id)
        logger.info(
            "Chat session created",
            extra={"owner_id": owner_id, "session_id": session.session_id},
        )
        return session

    def _evict(
        self, owner_id: str, sessions: OrderedDict[str, ChatSession], keep: str
    ) -> None:
        while len(sessions) > self.max_sessions_per_owner:
            victim = next(
                (
                    s
                    for s in sessions.values()
                    if s.session_id != keep and not s.is_awaiting_response
                ),
                None,
            )
            if victim is None:
                return
            del sessions[victim.session_id]
            logger.info(
                "Evicted oldest chat session",
                extra={"owner_id": owner_id, "session_id": victim.session_id},
            )

    def get_session(self, owner_id: str, session_id: str) -> ChatSession:
        """
        Look up a session of this owner.

        Raises:
            ChatSessionNotFoundError: Unknown id, or the id belongs to another owner
        """
        session = self._sessions.get(owner_id, {}).get(session_id)
        if session is None:
            raise ChatSessionNotFoundError(session_id)
        return session

    def list_sessions(self, owner_id: str) -> list[ChatSession]:
        return list(self._sessions.get(owner_id, {}).values())

    async def send_message(
        self, owner_id: str, session_id: str, query: str
    ) -> ChatMessage | None:
        """
        Run one turn in a session.

        The turn is shielded from caller cancellation so a dropped request
        still leaves the session answered and IDLE.

        Returns:
            The assistant message, or None if the query was blank or the
            answer was discarded because the session was cleared meanwhile

        Raises:
            ChatSessionNotFoundError: Unknown session
            SessionBusyError: The session is awaiting a previous answer
        """
        session = self.get_session(owner_id, session_id)
        if session.is_awaiting_response:
            raise SessionBusyError(session_id)
        pending = session.begin_turn(query)
        if pending is None:
            return None
        return await asyncio.shield(session.answer(pending, self.dispatcher))

    def clear_session(self, owner_id: str, session_id: str) -> ChatSession:
        """Reset a session's log; answers still in flight are dropped."""
        session = self.get_session(owner_id, session_id)
        session.clear()
        return session

    def delete_session(self, owner_id: str, session_id: str) -> None:
        """Forget a session entirely."""
        session = self.get_session(owner_id, session_id)
        session.clear()
        del self._sessions[owner_id][session_id]
