"""
Chat API endpoints.

Routes:
- POST /chat/sessions - Open a chat session
- GET /chat/sessions - List the caller's chat sessions
- GET /chat/sessions/{session_id} - Read a session and its message log
- POST /chat/sessions/{session_id}/messages - Ask a question
- DELETE /chat/sessions/{session_id}/messages - Reset the conversation
- DELETE /chat/sessions/{session_id} - Close a session

Dependencies: docchat.application.services.chat_service, docchat.models.chat
System role: Conversational query HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from docchat.api.deps import get_chat_service, get_current_user_id
from docchat.application.services.chat_service import ChatService
from docchat.core.exceptions import ChatSessionNotFoundError, SessionBusyError
from docchat.models.chat import (
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
    ChatSessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat/sessions", tags=["chat"])


@router.post("", response_model=ChatSessionResponse, status_code=201)
async def create_chat_session(
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatSessionResponse:
    """Open an empty chat session for the caller."""
    session = chat_service.create_session(user_id)
    return ChatSessionResponse.from_session(session)


@router.get("", response_model=list[ChatSessionResponse])
async def list_chat_sessions(
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> list[ChatSessionResponse]:
    return [ChatSessionResponse.from_session(s) for s in chat_service.list_sessions(user_id)]


@router.get("/{session_id}", response_model=ChatSessionResponse)
async def get_chat_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatSessionResponse:
    """
    Read a session with its ordered message log.

    Raises:
        HTTPException(404): Session not found for this user
    """
    try:
        session = chat_service.get_session(user_id, session_id)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return ChatSessionResponse.from_session(session)


@router.post("/{session_id}/messages", response_model=ChatResponse)
async def send_chat_message(
    session_id: str,
    request: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Ask one question in a session.

    The answer is either the inference backend's reply or the fixed apology
    text. A blank query is ignored and answer is null; answer is also null
    when the session was reset while the question was in flight.

    Args:
        session_id: Chat session id
        request: ChatRequest with the query text
        user_id: Authenticated user identity
        chat_service: Injected ChatService

    Returns:
        ChatResponse: The assistant message and the updated session

    Raises:
        HTTPException(404): Session not found for this user
        HTTPException(409): Session is still awaiting the previous answer
    """
    logger.info(
        "Chat message received",
        extra={"owner_id": user_id, "session_id": session_id, "query_length": len(request.query)},
    )
    try:
        answer = await chat_service.send_message(user_id, session_id, request.query)
        session = chat_service.get_session(user_id, session_id)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    except SessionBusyError:
        raise HTTPException(
            status_code=409, detail="Please wait for the previous answer before asking again"
        )

    return ChatResponse(
        answer=ChatMessageResponse.from_message(answer) if answer else None,
        session=ChatSessionResponse.from_session(session),
    )


@router.delete("/{session_id}/messages", response_model=ChatSessionResponse)
async def clear_chat_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatSessionResponse:
    """
    Reset a session's conversation.

    Answers still in flight for the old conversation are discarded.

    Raises:
        HTTPException(404): Session not found for this user
    """
    try:
        session = chat_service.clear_session(user_id, session_id)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return ChatSessionResponse.from_session(session)


@router.delete("/{session_id}", status_code=204)
async def delete_chat_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> None:
    """
    Close a session.

    Raises:
        HTTPException(404): Session not found for this user
    """
    try:
        chat_service.delete_session(user_id, session_id)
    except ChatSessionNotFoundError:
        raise HTTPException(status_code=404, detail="Chat session not found")
