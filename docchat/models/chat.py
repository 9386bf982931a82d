"""
Chat domain models and schemas.

Request/response schemas for chat operations.

Dependencies: pydantic
System role: Chat API contracts
"""

from datetime import datetime

from pydantic import BaseModel, Field

from docchat.core.chat_session import ChatMessage, ChatSession


class ChatRequest(BaseModel):
    """Request schema for chat messages."""

    query: str = Field(description="User question; blank queries are ignored")


class ChatMessageResponse(BaseModel):
    """Single chat message in history."""

    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str = Field(description="Message content")
    timestamp: datetime

    @classmethod
    def from_message(cls, message: ChatMessage) -> "ChatMessageResponse":
        return cls(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp,
        )


class ChatSessionResponse(BaseModel):
    """Chat session summary with its message log."""

    session_id: str
    state: str
    generation: int
    created_at: datetime
    messages: list[ChatMessageResponse]
    total: int = Field(description="Total number of messages")

    @classmethod
    def from_session(cls, session: ChatSession) -> "ChatSessionResponse":
        messages = [ChatMessageResponse.from_message(m) for m in session.messages]
        return cls(
            session_id=session.session_id,
            state=session.state.value,
            generation=session.generation,
            created_at=session.created_at,
            messages=messages,
            total=len(messages),
        )


class ChatResponse(BaseModel):
    """Response schema for one conversation turn."""

    answer: ChatMessageResponse | None = Field(
        description="Assistant message; null when the answer went stale after a reset"
    )
    session: ChatSessionResponse
