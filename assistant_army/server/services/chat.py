"""
Chat Service.

Runs one chat turn end to end:

1. validate the message and the model credential,
2. resolve the root agent for the owner,
3. check the owner of an existing conversation,
4. build a fresh ``ExecutableAgent`` tree,
5. create the conversation if it is new, otherwise read its history,
6. run the agent, relaying translated stream events, and persist the exchange
   once the run succeeded.

Steps 1 to 5 happen in ``prepare_turn`` so that their errors surface before any
stream is opened. A new conversation row is only written once every lookup
and the build succeeded. A failed run emits a single ``error`` event and
persists nothing; the client may resend the same turn.

Concurrent turns on one conversation are not serialized, and a client
disconnect does not cancel the engine run.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Callable, List, Optional, Tuple

from pydantic_ai.messages import ModelMessage, ModelRequest, ModelResponse, TextPart, UserPromptPart

from assistant_army.agent_core.errors import AgentCoreError, NotFoundError, UnauthorizedError, ValidationError
from assistant_army.agent_core.graph_builder import AgentGraphBuilder
from assistant_army.agent_core.repos.interfaces import AgentStore, ConversationStore, MemoryStore, ToolServerRegistry
from assistant_army.agent_core.runtime.engine import ExecutionEngine
from assistant_army.agent_core.runtime.stream_events import StreamEvent
from assistant_army.agent_core.runtime.translator import StreamEventTranslator
from assistant_army.agent_core.schemas.domain import AgentDefinition, ExecutableAgent, OwnerContext
from assistant_army.agent_core.session import ConversationSessionAdapter
from assistant_army.core.database.entities.conversations import Conversation, ConversationMessage
from assistant_army.core.logging_config import get_logger
from assistant_army.core.monitoring import log_chat_turn

logger = get_logger(__name__)

GENERIC_RUN_ERROR = "The agent run failed unexpectedly."


@dataclass
class PreparedTurn:
    """Everything a turn needs once validation and lookups succeeded."""

    owner: OwnerContext
    slug: str
    message: str
    api_key: str
    conversation: Conversation
    agent: ExecutableAgent
    session: ConversationSessionAdapter
    history: List[ModelMessage]


class ChatService:
    """
    Service orchestrating chat turns and conversation management.

    Attributes:
        agents: Agent definition store.
        conversations: Conversation persistence.
        engine: Execution engine running built agents.
        builder: Agent graph builder used for every turn.
    """

    def __init__(
        self,
        agents: AgentStore,
        tool_servers: ToolServerRegistry,
        conversations: ConversationStore,
        engine: ExecutionEngine,
        *,
        model: str,
        memory_store: Optional[MemoryStore] = None,
        default_api_key: Optional[str] = None,
        history_limit: Optional[int] = None,
        title_length: int = 100,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.agents = agents
        self.conversations = conversations
        self.engine = engine
        self.default_api_key = default_api_key
        self.history_limit = history_limit
        self.title_length = title_length

        builder_kwargs = {"clock": clock} if clock else {}
        self.builder = AgentGraphBuilder(
            agents, tool_servers, model=model, memory_store=memory_store, **builder_kwargs
        )

    # =====================================================================
    # Chat turns
    # =====================================================================

    async def prepare_turn(
        self, owner: OwnerContext, slug: str, message: str, conversation_id: Optional[int] = None
    ) -> PreparedTurn:
        """
        Validate and load everything a turn needs, without running anything.

        Raises:
            ValidationError: Blank message or no model API key.
            NotFoundError: Unknown agent, or conversation not owned by the caller.
            UnauthorizedError: Agent belongs to another owner.
        """
        if not message or not message.strip():
            raise ValidationError("Message must not be empty")
        api_key = owner.api_key or self.default_api_key
        if not api_key:
            raise ValidationError("No model API key configured for this user")

        definition = await self._resolve_agent(owner, slug)
        existing = None
        if conversation_id is not None:
            existing = await self._existing_conversation(owner, definition, conversation_id)
        agent = await self.builder.build(owner, slug)

        if existing is None:
            conversation = await self._create_conversation(owner, definition, message)
            session = ConversationSessionAdapter(conversation.id, self.conversations)
            history: List[ModelMessage] = []
        else:
            conversation = existing
            session = ConversationSessionAdapter(conversation.id, self.conversations)
            history = await session.get_items(self.history_limit)

        logger.info(
            f"Prepared chat turn: owner={owner.owner_id}, agent={slug}, conversation={conversation.id}, "
            f"history_items={len(history)}"
        )
        return PreparedTurn(
            owner=owner,
            slug=slug,
            message=message,
            api_key=api_key,
            conversation=conversation,
            agent=agent,
            session=session,
            history=history,
        )

    async def stream_turn(self, turn: PreparedTurn) -> AsyncIterator[StreamEvent]:
        """
        Run a prepared turn and yield client stream events.

        The sequence always starts with ``init`` and ends with either ``done``
        (exchange persisted) or a single ``error``.
        """
        translator = StreamEventTranslator(turn.agent)
        yield translator.initialize(turn.conversation.id)

        try:
            run = self.engine.run_streamed(turn.agent, turn.message, turn.history, api_key=turn.api_key)
            async for event in translator.relay(run.stream_events()):
                yield event

            answer = run.final_output if run.final_output is not None else translator.final_text
            await self._persist_exchange(turn, answer, translator.last_agent or run.last_agent)
        except AgentCoreError as e:
            logger.warning(f"Chat turn failed for conversation {turn.conversation.id}: {e}")
            log_chat_turn(turn.owner.owner_id, turn.slug, turn.conversation.id, "errored")
            yield translator.fail(str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error in chat turn for conversation {turn.conversation.id}: {e}", exc_info=True)
            log_chat_turn(turn.owner.owner_id, turn.slug, turn.conversation.id, "errored")
            yield translator.fail(GENERIC_RUN_ERROR)
            return

        log_chat_turn(turn.owner.owner_id, turn.slug, turn.conversation.id, "completed")
        yield translator.complete()

    async def chat(
        self, owner: OwnerContext, slug: str, message: str, conversation_id: Optional[int] = None
    ) -> Tuple[int, str]:
        """
        Run one turn to completion.

        Returns:
            ``(conversation_id, final assistant message)``
        """
        turn = await self.prepare_turn(owner, slug, message, conversation_id)
        try:
            outcome = await self.engine.run(turn.agent, turn.message, turn.history, api_key=turn.api_key)
        except AgentCoreError:
            log_chat_turn(owner.owner_id, slug, turn.conversation.id, "errored")
            raise

        await self._persist_exchange(turn, outcome.final_output, outcome.last_agent)
        log_chat_turn(owner.owner_id, slug, turn.conversation.id, "completed")
        return turn.conversation.id, outcome.final_output

    async def _persist_exchange(self, turn: PreparedTurn, answer: str, answered_by: ExecutableAgent) -> None:
        await turn.session.add_items([ModelRequest(parts=[UserPromptPart(content=turn.message)])])
        await turn.session.add_items(
            [ModelResponse(parts=[TextPart(content=answer)], model_name=answered_by.model)],
            agent_id=answered_by.agent_id,
        )
        logger.debug(f"Persisted exchange in conversation {turn.conversation.id}, answered by '{answered_by.slug}'")

    # =====================================================================
    # Conversation management
    # =====================================================================

    async def list_conversations(self, owner: OwnerContext, slug: str) -> List[Conversation]:
        definition = await self._resolve_agent(owner, slug)
        return await self.conversations.list_by_agent(owner.owner_id, definition.id)

    async def get_conversation(
        self, owner: OwnerContext, slug: str, conversation_id: int
    ) -> Tuple[Conversation, List[ConversationMessage]]:
        definition = await self._resolve_agent(owner, slug)
        conversation = await self._owned_conversation(owner, conversation_id)
        if conversation.agent_id != definition.id:
            raise NotFoundError("conversation", conversation_id)
        return conversation, await self.conversations.list_messages(conversation_id)

    async def pop_last_message(self, owner: OwnerContext, conversation_id: int) -> Optional[ModelMessage]:
        """Remove the newest item of a conversation (regenerate / undo)."""
        await self._owned_conversation(owner, conversation_id)
        return await ConversationSessionAdapter(conversation_id, self.conversations).pop_item()

    async def clear_conversation(self, owner: OwnerContext, conversation_id: int) -> None:
        await self._owned_conversation(owner, conversation_id)
        await ConversationSessionAdapter(conversation_id, self.conversations).clear_session()

    # =====================================================================
    # Lookups
    # =====================================================================

    async def _resolve_agent(self, owner: OwnerContext, slug: str) -> AgentDefinition:
        definition = await self.agents.find_by_slug(owner.owner_id, slug)
        if definition is None:
            raise NotFoundError("agent", slug)
        if definition.owner_id != owner.owner_id:
            raise UnauthorizedError("agent", slug)
        return definition

    async def _owned_conversation(self, owner: OwnerContext, conversation_id: int) -> Conversation:
        conversation = await self.conversations.get_by_id(conversation_id)
        if conversation is None or conversation.owner_id != owner.owner_id:
            raise NotFoundError("conversation", conversation_id)
        return conversation

    async def _create_conversation(self, owner: OwnerContext, definition: AgentDefinition, message: str) -> Conversation:
        conversation = await self.conversations.create(owner.owner_id, definition.id, title=message[: self.title_length])
        logger.info(f"Created conversation {conversation.id} for owner={owner.owner_id}, agent={definition.slug}")
        return conversation

    async def _existing_conversation(
        self, owner: OwnerContext, definition: AgentDefinition, conversation_id: int
    ) -> Conversation:
        conversation = await self._owned_conversation(owner, conversation_id)
        if conversation.agent_id != definition.id:
            raise NotFoundError("conversation", conversation_id)
        return conversation
