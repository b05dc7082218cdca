"""Main FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from teachback.api import chat, health, log, settings as settings_routes, speech, trace
from teachback.core.auth import AdminTokenMiddleware
from teachback.core.config import Settings, get_settings
from teachback.core.exceptions import TeachBackException
from teachback.core.logging import setup_logger
from teachback.db.database import Base, create_database
from teachback.repositories import PromptConfigRepository
from teachback.services.completion import CompletionStreamer
from teachback.services.embedding import EmbeddingService
from teachback.services.memory import MemoryService
from teachback.services.model import ModelService
from teachback.services.prompt_config import PromptConfigService
from teachback.services.speech import SpeechService
from teachback.services.tracing import TracingService
from teachback.services.vector_store import SimilarityStoreService

# Registers the ORM models on Base.metadata
import teachback.models  # noqa: F401

logger = setup_logger(__name__)

Database = Tuple[AsyncEngine, async_sessionmaker[AsyncSession]]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    settings: Settings = app.state.settings
    logger.info(f"Starting Teach Back Application, version={app.version}")

    # Startup
    if getattr(app.state, "engine", None) is None:
        app.state.engine, app.state.session_factory = create_database(settings)

    try:
        async with app.state.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables initialized successfully")

        async with app.state.session_factory() as session:
            await PromptConfigService(PromptConfigRepository(session)).ensure_default()
    except Exception as e:
        logger.error(f"Failed to initialize database tables: {e}", exc_info=True)
        raise

    app.state.embedding_service = EmbeddingService(settings)
    app.state.vector_store = SimilarityStoreService(app.state.session_factory, settings)
    app.state.completion_streamer = CompletionStreamer(ModelService(settings))
    app.state.memory_service = MemoryService(settings)
    app.state.speech_service = SpeechService(settings)
    app.state.tracing_service = TracingService(settings)

    yield

    # Shutdown
    logger.info("Shutting down Teach Back Application")
    await app.state.engine.dispose()


async def teachback_exception_handler(request: Request, exc: TeachBackException) -> JSONResponse:
    """Render application errors as ``{"error": message}``."""
    if exc.details:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}, details={exc.details}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render missing or invalid request fields as a 400."""
    fields = [".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()]
    logger.warning(f"Invalid request to {request.url.path}: fields={fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Missing or invalid required fields", "fields": fields},
    )


def create_application(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings; loaded from the environment when omitted
        database: Optional (engine, session factory) pair; created from
            settings at startup when omitted
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Teach Back",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc" if settings.DEBUG else None,
        servers=[
            {
                "url": f"http://localhost:{settings.DOCS_PORT}",
                "description": "Local Enviroment",
            }
        ],
        lifespan=lifespan,
    )
    app.state.settings = settings
    if database is not None:
        app.state.engine, app.state.session_factory = database

    if settings.ADMIN_TOKEN:
        app.add_middleware(AdminTokenMiddleware, admin_token=settings.ADMIN_TOKEN)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TeachBackException, teachback_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    # Include API routers
    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(settings_routes.router)
    app.include_router(log.router)
    app.include_router(speech.router)
    app.include_router(trace.router)

    return app


app = create_application()
