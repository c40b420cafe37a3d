"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
exception handlers and monitoring, and includes all API routers.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant_army import __version__
from assistant_army.core.logging_config import get_logger, setup_logging
from assistant_army.core.monitoring import initialize_logfire

from .api.v1 import chat, health
from .core import constant
from .core.config import settings
from .core.database import init_db
from .exception_handlers import setup_exception_handlers

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    try:
        logger.info("Starting up Assistant Army Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Assistant Army Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Assistant Army Server API

    Chat with user-defined AI agents. Agents combine instructions, built-in
    capabilities, remote tool servers, peer agents callable as tools and
    one-way handoffs to other agents. Runs are streamed live over Server-Sent Events.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(chat.router, prefix=f"{constant.API_V1_STR}/chat", tags=["chat"])


def run() -> None:
    """Console entry point."""
    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
