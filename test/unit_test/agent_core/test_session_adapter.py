"""Unit tests for ConversationSessionAdapter backed by the SQL conversation repository."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from pydantic_ai.messages import (
    ModelMessagesTypeAdapter,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)

from assistant_army.agent_core.errors import ValidationError
from assistant_army.agent_core.session import ConversationSessionAdapter, display_text, dump_message, message_role
from assistant_army.core.database.entities import AgentRecord, MessageRole
from assistant_army.core.database.repositories import AgentRepository, ConversationRepository


def _dump(messages):
    return ModelMessagesTypeAdapter.dump_python(list(messages), mode="json")


TEXT_EXCHANGE = [
    ModelRequest(parts=[UserPromptPart(content="Hi")]),
    ModelResponse(parts=[TextPart(content="Hello! How can I help?")], model_name="test-model"),
]
TOOL_EXCHANGE = [
    ModelResponse(parts=[ToolCallPart(tool_name="lookup_order", args={"order_id": "A-1"}, tool_call_id="call_1")]),
    ModelRequest(parts=[ToolReturnPart(tool_name="lookup_order", content="shipped", tool_call_id="call_1")]),
]
HANDOFF_EXCHANGE = [
    ModelResponse(parts=[ToolCallPart(tool_name="transfer_to_billing", args={}, tool_call_id="call_2")]),
    ModelRequest(
        parts=[ToolReturnPart(tool_name="transfer_to_billing", content="Transferred to Billing.", tool_call_id="call_2")]
    ),
]


@pytest.fixture
async def repo(db_session) -> ConversationRepository:
    return ConversationRepository(db_session)


@pytest.fixture
async def conversation_id(db_session, repo) -> int:
    agent = await AgentRepository(db_session).create(
        AgentRecord(owner_id=1, slug="support", name="Support", instructions="Help.")
    )
    conversation = await repo.create(1, agent.id, title="t")
    return conversation.id


@pytest.fixture
def session(repo, conversation_id) -> ConversationSessionAdapter:
    return ConversationSessionAdapter(conversation_id, repo)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "items",
        [TEXT_EXCHANGE, TOOL_EXCHANGE, HANDOFF_EXCHANGE],
        ids=["text", "tool-call", "handoff"],
    )
    async def test_payload_survives_storage(self, session, items):
        await session.add_items(items)

        restored = await session.get_items()

        assert _dump(restored) == _dump(items)

    async def test_stored_rows_keep_payload_and_projection(self, session, repo, conversation_id):
        await session.add_items(TEXT_EXCHANGE + TOOL_EXCHANGE, agent_id=7)

        rows = await repo.list_messages(conversation_id)

        assert [(r.role, r.content) for r in rows] == [
            (MessageRole.USER, "Hi"),
            (MessageRole.ASSISTANT, "Hello! How can I help?"),
            (MessageRole.ASSISTANT, "Tool call: lookup_order"),
            (MessageRole.ASSISTANT, "[non-text content]"),
        ]
        assert [r.raw_data for r in rows] == _dump(TEXT_EXCHANGE + TOOL_EXCHANGE)
        assert {r.agent_id for r in rows} == {7}

    async def test_limit_returns_newest_window_oldest_first(self, session):
        await session.add_items(TEXT_EXCHANGE + TOOL_EXCHANGE)

        window = await session.get_items(limit=2)

        assert _dump(window) == _dump(TOOL_EXCHANGE)
        assert await session.get_items(limit=0) == []

    async def test_row_without_payload_cannot_be_replayed(self, session, repo, conversation_id):
        await repo.add_message(conversation_id, MessageRole.USER, "legacy text only")

        with pytest.raises(ValidationError):
            await session.get_items()


class TestPopAndClear:
    async def test_pop_on_empty_conversation_returns_none(self, session):
        assert await session.pop_item() is None

    async def test_pop_removes_only_the_newest_item(self, session):
        await session.add_items(TEXT_EXCHANGE)

        popped = await session.pop_item()

        assert _dump([popped]) == _dump(TEXT_EXCHANGE[1:])
        assert _dump(await session.get_items()) == _dump(TEXT_EXCHANGE[:1])

    async def test_clear_session(self, session):
        await session.add_items(TEXT_EXCHANGE + HANDOFF_EXCHANGE)

        await session.clear_session()

        assert await session.get_items() == []
        assert await session.pop_item() is None

    def test_session_id(self, session, conversation_id):
        assert session.get_session_id() == conversation_id


class TestProjection:
    def test_system_only_request(self):
        message = ModelRequest(parts=[SystemPromptPart(content="Be nice")])

        assert message_role(message) == MessageRole.SYSTEM
        assert display_text(message) == "Be nice"

    def test_multi_part_text_is_joined_by_newline(self):
        message = ModelResponse(parts=[TextPart(content="one"), TextPart(content="two")])

        assert display_text(message) == "one\ntwo"

    def test_user_prompt_with_mixed_content_keeps_text(self):
        message = ModelRequest(parts=[UserPromptPart(content=["look at this", "and this"])])

        assert message_role(message) == MessageRole.USER
        assert display_text(message) == "look at this\nand this"


async def test_add_items_forwards_projection_to_store():
    store = AsyncMock()
    session = ConversationSessionAdapter(3, store)

    await session.add_items([TEXT_EXCHANGE[0]], agent_id=None)

    store.add_message.assert_awaited_once_with(
        3,
        role=MessageRole.USER,
        content="Hi",
        raw_data=dump_message(TEXT_EXCHANGE[0]),
        agent_id=None,
    )
