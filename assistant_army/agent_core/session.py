"""Conversation session adapter.

Bridges persisted conversation rows and the run-format message list the
execution engine consumes (``pydantic_ai.messages.ModelMessage``).

Every stored row keeps two representations:

- ``content``: a display projection used for listing and search only,
- ``raw_data``: the message's full JSON form, required for faithful replay.

Rows are strictly ordered by creation; the only removals are the newest row
(``pop_item``) and everything (``clear_session``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic_ai.messages import (
    BuiltinToolCallPart,
    ModelMessage,
    ModelMessagesTypeAdapter,
    ModelRequest,
    SystemPromptPart,
    TextPart,
    ToolCallPart,
    UserPromptPart,
)

from ..core.database.entities.conversations import ConversationMessage, MessageRole
from ..core.logging_config import get_logger
from .errors import ValidationError
from .repos.interfaces import ConversationStore

logger = get_logger(__name__)

NON_TEXT_CONTENT = "[non-text content]"


def message_role(message: ModelMessage) -> MessageRole:
    """Role a run-format message is stored under."""
    if isinstance(message, ModelRequest):
        if any(isinstance(p, UserPromptPart) for p in message.parts):
            return MessageRole.USER
        if message.parts and all(isinstance(p, SystemPromptPart) for p in message.parts):
            return MessageRole.SYSTEM
    return MessageRole.ASSISTANT


def display_text(message: ModelMessage) -> str:
    """
    Project a run-format message to plain display text.

    Text parts are joined by newlines; a message without text but with tool
    calls renders as ``Tool call: <name>``; anything else becomes a fixed
    placeholder.
    """
    texts: List[str] = []
    tool_calls: List[str] = []
    for part in message.parts:
        if isinstance(part, (UserPromptPart, SystemPromptPart)):
            if isinstance(part.content, str):
                texts.append(part.content)
            else:
                texts.extend(item for item in part.content if isinstance(item, str))
        elif isinstance(part, TextPart):
            texts.append(part.content)
        elif isinstance(part, (ToolCallPart, BuiltinToolCallPart)):
            tool_calls.append(part.tool_name)

    if texts:
        return "\n".join(texts)
    if tool_calls:
        return "\n".join(f"Tool call: {name}" for name in tool_calls)
    return NON_TEXT_CONTENT


def dump_message(message: ModelMessage) -> Dict[str, Any]:
    return ModelMessagesTypeAdapter.dump_python([message], mode="json")[0]


def load_message(row: ConversationMessage) -> ModelMessage:
    if row.raw_data is None:
        raise ValidationError(f"Message {row.id} has no structured payload and cannot be replayed")
    return ModelMessagesTypeAdapter.validate_python([row.raw_data])[0]


class ConversationSessionAdapter:
    """
    Session view over one conversation.

    Attributes:
        conversation_id: The conversation this adapter is scoped to.
        store: Persistence backing the conversation.
    """

    def __init__(self, conversation_id: int, store: ConversationStore) -> None:
        self.conversation_id = conversation_id
        self.store = store

    def get_session_id(self) -> int:
        return self.conversation_id

    async def get_items(self, limit: Optional[int] = None) -> List[ModelMessage]:
        """
        Rebuild the run-format history.

        Args:
            limit: If given, only the newest ``limit`` items are returned, oldest first.

        Returns:
            Ordered list of messages reconstructed from stored payloads.

        Raises:
            ValidationError: A row in the window has no structured payload.
        """
        rows = await self.store.list_messages(self.conversation_id)
        if limit is not None:
            rows = rows[-limit:] if limit > 0 else []
        return [load_message(row) for row in rows]

    async def add_items(self, items: Sequence[ModelMessage], agent_id: Optional[int] = None) -> None:
        """
        Append messages in order.

        Args:
            items: Run-format messages to persist verbatim.
            agent_id: Agent that produced the items, stored as attribution.
        """
        for item in items:
            await self.store.add_message(
                self.conversation_id,
                role=message_role(item),
                content=display_text(item),
                raw_data=dump_message(item),
                agent_id=agent_id,
            )
        logger.debug(f"Appended {len(items)} item(s) to conversation {self.conversation_id}")

    async def pop_item(self) -> Optional[ModelMessage]:
        """
        Remove and return the newest item.

        Returns:
            The removed message, or None when the conversation is empty.
        """
        rows = await self.store.list_messages(self.conversation_id)
        if not rows:
            return None
        last = rows[-1]
        message = load_message(last)
        await self.store.delete_message(last.id)
        return message

    async def clear_session(self) -> None:
        deleted = await self.store.delete_all_messages(self.conversation_id)
        logger.debug(f"Cleared {deleted} item(s) from conversation {self.conversation_id}")
