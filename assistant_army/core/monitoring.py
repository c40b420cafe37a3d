"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing chat turns:
- Pydantic AI agent runs and model calls
- SQLAlchemy database operations
- FastAPI endpoints

Tracing is opt-in through ``LOGFIRE_ENABLED``.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "assistant-army-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Logfire monitoring and tracing.

    Args:
        app: FastAPI application instance for endpoint instrumentation (optional).
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
        logfire.instrument_pydantic_ai()
        logfire.instrument_sqlalchemy()
        if app is not None:
            logfire.instrument_fastapi(app=app)
        logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)


def log_chat_turn(owner_id: int, agent_slug: str, conversation_id: Optional[int], status: str) -> None:
    """
    Record the outcome of one chat turn.

    Args:
        owner_id: The owner running the turn
        agent_slug: Slug of the root agent
        conversation_id: Conversation the turn belongs to, if assigned
        status: completed, errored or disconnected
    """
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info(
            "Chat turn finished",
            owner_id=owner_id,
            agent_slug=agent_slug,
            conversation_id=conversation_id,
            status=status,
        )
    except Exception:
        logger.debug(f"Could not log chat turn to Logfire: agent={agent_slug}")
