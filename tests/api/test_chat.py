from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from docchat.api.deps.dependencies import get_chat_service
from docchat.api.main import create_app
from docchat.application.services.chat_service import ChatService
from docchat.core.chat_session import ChatMessage

ALICE = {"X-User-ID": "alice"}
BOB = {"X-User-ID": "bob"}


@pytest.fixture
def mock_dispatcher():
    dispatcher = AsyncMock()

    async def ask(owner_id, query_text, session_generation):
        return ChatMessage.assistant(f"answer: {query_text}", generation=session_generation)

    dispatcher.ask.side_effect = ask
    return dispatcher


@pytest.fixture
def chat_service(mock_dispatcher):
    return ChatService(dispatcher=mock_dispatcher)


@pytest.fixture
def client(chat_service):
    app = create_app()
    client = TestClient(app)
    client.app.dependency_overrides[get_chat_service] = lambda: chat_service
    return client


def _create_session(client, headers=ALICE) -> str:
    response = client.post("/api/v1/chat/sessions", headers=headers)
    assert response.status_code == 201
    return response.json()["session_id"]


def test_create_session(client):
    response = client.post("/api/v1/chat/sessions", headers=ALICE)

    assert response.status_code == 201
    data = response.json()
    assert data["state"] == "idle"
    assert data["messages"] == []
    assert data["generation"] == 0


def test_send_message(client, mock_dispatcher):
    session_id = _create_session(client)

    response = client.post(
        f"/api/v1/chat/sessions/{session_id}/messages",
        json={"query": "What is in week 3?"},
        headers=ALICE,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["answer"]["role"] == "assistant"
    assert data["answer"]["content"] == "answer: What is in week 3?"
    assert [m["role"] for m in data["session"]["messages"]] == ["user", "assistant"]
    assert data["session"]["state"] == "idle"
    mock_dispatcher.ask.assert_awaited_once_with("alice", "What is in week 3?", 0)


def test_blank_message_is_ignored(client, mock_dispatcher):
    session_id = _create_session(client)

    response = client.post(
        f"/api/v1/chat/sessions/{session_id}/messages",
        json={"query": "   "},
        headers=ALICE,
    )

    assert response.status_code == 200
    assert response.json()["answer"] is None
    assert response.json()["session"]["total"] == 0
    mock_dispatcher.ask.assert_not_awaited()


def test_busy_session_returns_conflict(client, chat_service):
    session_id = _create_session(client)
    chat_service.get_session("alice", session_id).begin_turn("still waiting")

    response = client.post(
        f"/api/v1/chat/sessions/{session_id}/messages",
        json={"query": "another"},
        headers=ALICE,
    )

    assert response.status_code == 409


def test_session_of_other_user_is_not_found(client):
    session_id = _create_session(client, headers=ALICE)

    assert client.get(f"/api/v1/chat/sessions/{session_id}", headers=BOB).status_code == 404
    response = client.post(
        f"/api/v1/chat/sessions/{session_id}/messages",
        json={"query": "hi"},
        headers=BOB,
    )
    assert response.status_code == 404


def test_get_session_returns_log(client):
    session_id = _create_session(client)
    client.post(f"/api/v1/chat/sessions/{session_id}/messages", json={"query": "q1"}, headers=ALICE)

    response = client.get(f"/api/v1/chat/sessions/{session_id}", headers=ALICE)

    assert response.status_code == 200
    assert [m["content"] for m in response.json()["messages"]] == ["q1", "answer: q1"]


def test_list_sessions(client):
    _create_session(client)
    _create_session(client)
    _create_session(client, headers=BOB)

    response = client.get("/api/v1/chat/sessions", headers=ALICE)

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_clear_session(client):
    session_id = _create_session(client)
    client.post(f"/api/v1/chat/sessions/{session_id}/messages", json={"query": "q1"}, headers=ALICE)

    response = client.delete(f"/api/v1/chat/sessions/{session_id}/messages", headers=ALICE)

    assert response.status_code == 200
    assert response.json()["messages"] == []
    assert response.json()["generation"] == 1


def test_delete_session(client):
    session_id = _create_session(client)

    assert client.delete(f"/api/v1/chat/sessions/{session_id}", headers=ALICE).status_code == 204
    assert client.get(f"/api/v1/chat/sessions/{session_id}", headers=ALICE).status_code == 404


def test_chat_requires_identity(client):
    assert client.post("/api/v1/chat/sessions").status_code == 401
