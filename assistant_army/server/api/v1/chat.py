"""
Chat API Endpoints.

This module provides the chat interface to owner-defined agents:

- streaming chat turns via Server-Sent Events (SSE), one JSON object per frame
- non-streaming chat turns
- conversation history per agent, single conversation read
- regenerate/undo (pop the newest message) and clear

Validation, ownership and build errors are raised before a stream opens and
are mapped to HTTP status codes by the registered exception handlers. Failures
during a run arrive as a single ``error`` frame.
"""

from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from assistant_army.agent_core.runtime.stream_events import StreamEvent
from assistant_army.agent_core.session import display_text, dump_message, message_role
from assistant_army.core.logging_config import get_logger
from assistant_army.core.monitoring import log_chat_turn
from assistant_army.server.schemas import (
    ChatRequest,
    ChatResponse,
    ClearResponse,
    ConversationDetail,
    ConversationRead,
    MessageRead,
    PoppedMessage,
)
from assistant_army.server.services.chat import PreparedTurn
from assistant_army.server.services.deps import ChatServiceDep, OwnerDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/{slug}/stream",
    summary="Stream Chat Turn",
    description="Send a message to an agent and stream the run as Server-Sent Events.",
    response_description="SSE stream of JSON frames: init, started, text, tool_call, agent_update, handoff, stopped, error, done.",
    responses={
        400: {"description": "Empty message or no model API key"},
        403: {"description": "Agent belongs to another user"},
        404: {"description": "Agent or conversation not found"},
    },
)
async def stream_chat(
    slug: str,
    body: ChatRequest,
    request: Request,
    owner: OwnerDep,
    service: ChatServiceDep,
):
    """
    Stream one chat turn.

    The first frame is always ``init`` carrying the conversation id, so the
    client can correlate the conversation even if the run later fails.
    """
    turn = await service.prepare_turn(owner, slug, body.message, body.conversation_id)
    logger.info(f"Starting chat stream: agent={slug}, conversation={turn.conversation.id}")

    async def event_generator(prepared: PreparedTurn) -> AsyncIterator[str]:
        async for event in service.stream_turn(prepared):
            if await request.is_disconnected():
                logger.info(f"Client disconnected from chat stream: conversation={prepared.conversation.id}")
                log_chat_turn(prepared.owner.owner_id, prepared.slug, prepared.conversation.id, "disconnected")
                break
            yield serialize_event(event)

    return EventSourceResponse(event_generator(turn))


def serialize_event(event: StreamEvent) -> str:
    """JSON text of one stream frame."""
    return event.model_dump_json()


@router.post(
    "/{slug}",
    response_model=ChatResponse,
    summary="Chat Turn",
    description="Send a message to an agent and wait for the final answer.",
    responses={
        400: {"description": "Empty message or no model API key"},
        403: {"description": "Agent belongs to another user"},
        404: {"description": "Agent or conversation not found"},
        502: {"description": "Model provider or remote tool failure"},
    },
)
async def chat(slug: str, body: ChatRequest, owner: OwnerDep, service: ChatServiceDep) -> ChatResponse:
    conversation_id, message = await service.chat(owner, slug, body.message, body.conversation_id)
    return ChatResponse(conversation_id=conversation_id, message=message)


@router.get(
    "/{slug}/history",
    response_model=List[ConversationRead],
    summary="List Conversations",
    description="List the caller's conversations with an agent, most recently active first.",
)
async def list_history(slug: str, owner: OwnerDep, service: ChatServiceDep) -> List[ConversationRead]:
    conversations = await service.list_conversations(owner, slug)
    return [ConversationRead.model_validate(c) for c in conversations]


@router.get(
    "/{slug}/conversation/{conversation_id}",
    response_model=ConversationDetail,
    summary="Get Conversation",
    description="Retrieve one conversation with all its messages, oldest first.",
    responses={404: {"description": "Conversation not found"}},
)
async def get_conversation(
    slug: str, conversation_id: int, owner: OwnerDep, service: ChatServiceDep
) -> ConversationDetail:
    conversation, messages = await service.get_conversation(owner, slug, conversation_id)
    return ConversationDetail(
        conversation=ConversationRead.model_validate(conversation),
        messages=[MessageRead.model_validate(m) for m in messages],
    )


@router.delete(
    "/conversation/{conversation_id}/messages/last",
    response_model=Optional[PoppedMessage],
    summary="Pop Last Message",
    description="Remove and return the newest message of a conversation (regenerate / undo). Returns null when empty.",
    responses={404: {"description": "Conversation not found"}},
)
async def pop_last_message(conversation_id: int, owner: OwnerDep, service: ChatServiceDep) -> Optional[PoppedMessage]:
    message = await service.pop_last_message(owner, conversation_id)
    if message is None:
        return None
    return PoppedMessage(role=message_role(message), content=display_text(message), raw_data=dump_message(message))


@router.delete(
    "/conversation/{conversation_id}/messages",
    response_model=ClearResponse,
    summary="Clear Conversation",
    description="Delete every message of a conversation.",
    responses={404: {"description": "Conversation not found"}},
)
async def clear_conversation(conversation_id: int, owner: OwnerDep, service: ChatServiceDep) -> ClearResponse:
    await service.clear_conversation(owner, conversation_id)
    return ClearResponse(conversation_id=conversation_id)
