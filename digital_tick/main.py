"""FastAPI application entry point."""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from uuid import uuid4

# Configure logging to output to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from digital_tick.config import Settings, get_settings
from digital_tick.exceptions import CollaboratorError
from digital_tick.routers import admin, chat, health, history
from digital_tick.services.core.chat import ChatService
from digital_tick.services.core.conversation_store import ConversationStore
from digital_tick.services.core.retention import run_retention_loop
from digital_tick.services.core.usage_ledger import UsageLedger
from digital_tick.services.providers.completion import CompletionClient, build_completion_client
from digital_tick.services.utils.snapshot import SnapshotDocument

logger = logging.getLogger(__name__)

ERROR_LABELS = {
    400: "Invalid request",
    403: "Forbidden",
    404: "Not found",
    405: "Method not allowed",
}


def build_chat_service(
    settings: Settings,
    completion_client: CompletionClient | None = None,
) -> ChatService:
    """Load the usage and history snapshots and wire the chat service."""
    ledger = UsageLedger(SnapshotDocument(settings.usage_path, "usage"))
    store = ConversationStore(SnapshotDocument(settings.history_path, "history"))
    return ChatService(
        settings=settings,
        ledger=ledger,
        store=store,
        completion_client=completion_client or build_completion_client(settings),
    )


def _cors_origins(settings: Settings) -> list[str]:
    if settings.is_dev_mode:
        return ["*"]
    origins: list[str] = []
    # Add production frontend URL if configured (handle www and non-www)
    if settings.frontend_url:
        origins.append(settings.frontend_url)
        if "://www." in settings.frontend_url:
            origins.append(settings.frontend_url.replace("://www.", "://"))
        elif "://" in settings.frontend_url:
            origins.append(settings.frontend_url.replace("://", "://www."))
    return origins


def create_app(
    settings: Settings | None = None,
    completion_client: CompletionClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load persisted state on startup, start the retention sweep."""
        service = build_chat_service(settings, completion_client)
        app.state.settings = settings
        app.state.chat_service = service
        logger.info("Chat service ready (model=%s, data_dir=%s)", settings.model, settings.data_dir)

        retention_task = asyncio.create_task(
            run_retention_loop(
                service.ledger,
                service.store,
                settings.conversation_retention_days,
                settings.retention_interval_seconds,
                clock=service.clock,
            )
        )
        logger.info("Retention sweep launched")

        yield

        retention_task.cancel()
        try:
            await retention_task
        except asyncio.CancelledError:
            logger.info("Retention sweep stopped")

        # Let in-flight snapshot writes land
        await service.ledger.drain()
        await service.store.drain()

    app = FastAPI(
        title="Digital Tick AI API",
        description="Digital home assistant with plan quotas and conversation history",
        version="0.1.0",
        redirect_slashes=False,
        lifespan=lifespan,
    )

    origins = _cors_origins(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(history.router)
    app.include_router(admin.router)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CollaboratorError, collaborator_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    error_id = str(uuid4())
    error = ERROR_LABELS.get(exc.status_code, "Server error" if exc.status_code >= 500 else "Request failed")

    logger.warning(
        f"HTTP {exc.status_code} [{error_id}]: {exc.detail} - {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error, "detail": exc.detail, "errorId": error_id},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with field details."""
    error_id = str(uuid4())

    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({"field": field, "message": error["msg"]})

    logger.warning(
        f"Validation error [{error_id}]: {errors} - {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "detail": errors, "errorId": error_id},
    )


async def collaborator_exception_handler(request: Request, exc: CollaboratorError):
    """The completion provider failed; the consumed quota unit is not refunded."""
    error_id = str(uuid4())

    logger.error(
        f"Completion provider error [{error_id}] ({exc.provider or 'unknown'}): {exc} - "
        f"{request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Something went wrong talking to the AI service",
            "detail": str(exc),
            "errorId": error_id,
        },
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unhandled exceptions."""
    error_id = str(uuid4())

    logger.error(
        f"Unhandled exception [{error_id}]: {type(exc).__name__}: {exc} - "
        f"{request.method} {request.url.path}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Server error", "detail": "Internal server error", "errorId": error_id},
    )


app = create_app()
