from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from elpris_chat import __version__
from elpris_chat.config.logging import get_logger
from elpris_chat.config.settings import Settings, get_settings
from elpris_chat.llm.orchestrator import ChatOrchestrator

from .routes import router, validation_error_handler

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    orchestrator: ChatOrchestrator | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The orchestrator is created once here (process lifetime) unless one is
    injected. Building it without a model credential raises
    ConfigurationError, so a misconfigured server never starts.
    """
    settings = settings or get_settings()
    if orchestrator is None:
        orchestrator = ChatOrchestrator.from_settings(settings)

    app = FastAPI(
        title="Elpris Chat",
        description="Chat about Swedish electricity prices",
        version=__version__,
    )
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    logger.info(f"Chat API ready (model: {settings.llm.model}, fallback: {settings.llm.fallback_model})")
    return app
