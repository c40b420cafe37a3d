"""
Service Dependencies.

Provides the owner identity, the execution engine singleton and a per-request
``ChatService`` for API endpoints.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from assistant_army.agent_core.abstraction.adapters.pydantic_ai import PydanticAIExecutionEngine
from assistant_army.agent_core.runtime.engine import ExecutionEngine
from assistant_army.agent_core.schemas.domain import OwnerContext
from assistant_army.core.database.repositories import (
    AgentRepository,
    ConversationRepository,
    MemoryRepository,
    ToolServerRepository,
)
from assistant_army.server.core import constant
from assistant_army.server.core.config import settings
from assistant_army.server.core.database import get_session
from assistant_army.server.services.chat import ChatService


async def get_owner(
    owner_id: Annotated[Optional[int], Header(alias=constant.OWNER_ID_HEADER)] = None,
    owner_timezone: Annotated[Optional[str], Header(alias=constant.OWNER_TIMEZONE_HEADER)] = None,
    model_api_key: Annotated[Optional[str], Header(alias=constant.MODEL_API_KEY_HEADER)] = None,
) -> OwnerContext:
    """
    Owner identity forwarded by the authentication gateway.

    Raises:
        HTTPException: 401 when the owner header is missing.
    """
    if owner_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {constant.OWNER_ID_HEADER} header",
        )
    return OwnerContext(owner_id=owner_id, timezone=owner_timezone or "UTC", api_key=model_api_key)


@lru_cache
def get_engine() -> ExecutionEngine:
    """Process-wide execution engine; agents themselves are rebuilt every turn."""
    return PydanticAIExecutionEngine(base_url=settings.openai.base_url)


def get_chat_service(
    session: AsyncSession = Depends(get_session),
    engine: ExecutionEngine = Depends(get_engine),
) -> ChatService:
    return ChatService(
        AgentRepository(session),
        ToolServerRepository(session),
        ConversationRepository(session),
        engine,
        model=settings.default_model,
        memory_store=MemoryRepository(session),
        default_api_key=settings.openai.api_key,
        history_limit=settings.history_limit,
        title_length=settings.conversation_title_length,
    )


OwnerDep = Annotated[OwnerContext, Depends(get_owner)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
