"""
Unit tests for the chat API endpoints.

Tests cover:
- owner header handling and error status mapping
- non-streaming chat turns
- conversation history, detail, pop last message and clear
- the SSE stream endpoint, called directly to consume its event generator
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sse_starlette.sse import EventSourceResponse

from assistant_army.agent_core.errors import UpstreamFailure
from assistant_army.agent_core.schemas.domain import OwnerContext
from assistant_army.server.api.v1 import chat as chat_api
from assistant_army.server.core.config import settings
from assistant_army.server.schemas import ChatRequest
from assistant_army.server.services.deps import get_chat_service

BASE = "/api/v1/chat"
OWNER_HEADERS = {"X-Owner-Id": "1", "X-Model-Api-Key": "sk-test"}


@pytest.fixture(autouse=True)
def _seed(seeded_agents):
    return seeded_agents


async def _chat(client: AsyncClient, message: str = "Hello", **extra) -> dict:
    response = await client.post(f"{BASE}/support", json={"message": message, **extra}, headers=OWNER_HEADERS)
    assert response.status_code == 200
    return response.json()


class TestChatTurn:
    async def test_missing_owner_header(self, client: AsyncClient):
        response = await client.post(f"{BASE}/support", json={"message": "Hello"})

        assert response.status_code == 401

    async def test_unknown_agent(self, client: AsyncClient):
        response = await client.post(f"{BASE}/missing", json={"message": "Hello"}, headers=OWNER_HEADERS)

        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFoundError"

    async def test_blank_message(self, client: AsyncClient):
        response = await client.post(f"{BASE}/support", json={"message": "  "}, headers=OWNER_HEADERS)

        assert response.status_code == 400
        assert response.json()["error_type"] == "ValidationError"

    async def test_missing_api_key(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", None)

        response = await client.post(f"{BASE}/support", json={"message": "Hello"}, headers={"X-Owner-Id": "1"})

        assert response.status_code == 400

    async def test_chat_returns_answer(self, client: AsyncClient):
        data = await _chat(client)

        assert data["message"] == "Hi there"
        assert isinstance(data["conversation_id"], int)

    async def test_continue_conversation(self, client: AsyncClient, scripted_engine):
        first = await _chat(client)

        second = await _chat(client, "More please", conversation_id=first["conversation_id"])

        assert second["conversation_id"] == first["conversation_id"]
        assert len(scripted_engine.calls[1]["history"]) == 2

    async def test_upstream_failure_maps_to_bad_gateway(self, client: AsyncClient, scripted_engine):
        scripted_engine.error = UpstreamFailure("provider down")

        response = await client.post(f"{BASE}/support", json={"message": "Hello"}, headers=OWNER_HEADERS)

        assert response.status_code == 502
        assert response.json()["detail"] == "provider down"

    async def test_stream_errors_before_opening(self, client: AsyncClient):
        response = await client.post(f"{BASE}/missing/stream", json={"message": "Hello"}, headers=OWNER_HEADERS)

        assert response.status_code == 404


class TestConversations:
    async def test_history(self, client: AsyncClient):
        first = await _chat(client, "First question")

        response = await client.get(f"{BASE}/support/history", headers=OWNER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == [first["conversation_id"]]
        assert data[0]["title"] == "First question"

    async def test_history_is_per_owner(self, client: AsyncClient):
        await _chat(client)

        response = await client.get(f"{BASE}/other/history", headers={"X-Owner-Id": "2"})

        assert response.status_code == 200
        assert response.json() == []

    async def test_conversation_detail(self, client: AsyncClient, seeded_agents):
        cid = (await _chat(client))["conversation_id"]

        response = await client.get(f"{BASE}/support/conversation/{cid}", headers=OWNER_HEADERS)

        assert response.status_code == 200
        data = response.json()
        assert data["conversation"]["id"] == cid
        assert [(m["role"], m["content"]) for m in data["messages"]] == [
            ("user", "Hello"),
            ("assistant", "Hi there"),
        ]
        assert data["messages"][1]["agent_id"] == seeded_agents["support"].id
        assert data["messages"][1]["raw_data"]["kind"] == "response"

    async def test_conversation_of_another_owner(self, client: AsyncClient):
        cid = (await _chat(client))["conversation_id"]

        response = await client.get(f"{BASE}/support/conversation/{cid}", headers={"X-Owner-Id": "2"})

        assert response.status_code == 404

    async def test_pop_last_message(self, client: AsyncClient):
        cid = (await _chat(client))["conversation_id"]
        url = f"{BASE}/conversation/{cid}/messages/last"

        popped_answer = (await client.delete(url, headers=OWNER_HEADERS)).json()
        popped_question = (await client.delete(url, headers=OWNER_HEADERS)).json()
        empty = await client.delete(url, headers=OWNER_HEADERS)

        assert (popped_answer["role"], popped_answer["content"]) == ("assistant", "Hi there")
        assert (popped_question["role"], popped_question["content"]) == ("user", "Hello")
        assert empty.status_code == 200
        assert empty.json() is None

    async def test_clear_conversation(self, client: AsyncClient):
        cid = (await _chat(client))["conversation_id"]

        response = await client.delete(f"{BASE}/conversation/{cid}/messages", headers=OWNER_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"conversation_id": cid, "status": "cleared"}
        detail = await client.get(f"{BASE}/support/conversation/{cid}", headers=OWNER_HEADERS)
        assert detail.json()["messages"] == []

    async def test_clear_unknown_conversation(self, client: AsyncClient):
        response = await client.delete(f"{BASE}/conversation/999/messages", headers=OWNER_HEADERS)

        assert response.status_code == 404


class TestStreamEndpoint:
    """The stream endpoint is called directly so its event generator can be consumed."""

    @pytest.fixture
    def service(self, db_session, scripted_engine):
        return get_chat_service(session=db_session, engine=scripted_engine)

    @pytest.fixture
    def mock_request(self):
        request = AsyncMock()
        request.is_disconnected = AsyncMock(return_value=False)
        return request

    async def _frames(self, response: EventSourceResponse) -> list:
        return [json.loads(chunk) async for chunk in response.body_iterator]

    async def test_stream_frames(self, service, mock_request):
        owner = OwnerContext(owner_id=1, api_key="sk-test")

        response = await chat_api.stream_chat("support", ChatRequest(message="Hello"), mock_request, owner, service)

        assert isinstance(response, EventSourceResponse)
        frames = await self._frames(response)
        assert [f["type"] for f in frames] == ["init", "agent_update", "started", "text", "text", "stopped", "done"]
        assert frames[1] == {"type": "agent_update", "agent": {"name": "Support"}}
        assert frames[3] == {"type": "text", "content": "Hi"}

        _, messages = await service.get_conversation(owner, "support", frames[0]["conversation_id"])
        assert [m.content for m in messages] == ["Hello", "Hi there"]

    async def test_stream_error_frame(self, service, mock_request, scripted_engine):
        scripted_engine.error = UpstreamFailure("provider down")
        owner = OwnerContext(owner_id=1, api_key="sk-test")

        response = await chat_api.stream_chat("support", ChatRequest(message="Hello"), mock_request, owner, service)
        frames = await self._frames(response)

        assert frames[0]["type"] == "init"
        assert frames[-1] == {"type": "error", "message": "provider down"}

    async def test_stream_stops_on_disconnect(self, service, mock_request):
        mock_request.is_disconnected = AsyncMock(return_value=True)
        owner = OwnerContext(owner_id=1, api_key="sk-test")

        with patch("assistant_army.server.api.v1.chat.log_chat_turn") as mock_log:
            response = await chat_api.stream_chat("support", ChatRequest(message="Hello"), mock_request, owner, service)
            frames = await self._frames(response)

        assert frames == []
        conversation_id = (await service.list_conversations(owner, "support"))[0].id
        mock_log.assert_called_once_with(1, "support", conversation_id, "disconnected")

    async def test_serialize_event(self):
        from assistant_army.agent_core.runtime.stream_events import HandoffEvent

        frame = chat_api.serialize_event(HandoffEvent(target="Billing", status="requested"))

        assert json.loads(frame) == {"type": "handoff", "target": "Billing", "status": "requested"}
