"""FastAPI application factory and server configuration."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cognify.clients.analytics import AnalyticsClient
from cognify.clients.gemini import GenerationClient
from cognify.config import Settings, get_settings
from cognify.db.base import Database
from cognify.db.session_records import SessionRecordRepository
from cognify.middleware import AuthMiddleware, RequestIDMiddleware
from cognify.routes import credentials, messages, sessions
from cognify.services.credentials import CredentialStore
from cognify.services.interview import InterviewEngine
from cognify.services.rate_limiter import SlidingWindowRateLimiter
from cognify.services.router import MessageRouter
from cognify.services.sessions import SessionStore
from cognify.services.tutor import TutorService

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Request lines from the HTTP clients are noise at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    # Startup
    await app.state.database.init()
    await app.state.store.sweep_expired(app.state.store.retention)
    logger.info("%s started", app.title)

    yield

    # Shutdown
    await app.state.database.close()


def create_app(
    settings: Optional[Settings] = None,
    generation_transport: Optional[httpx.AsyncBaseTransport] = None,
    analytics_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    setup_logging(logging.DEBUG if settings.debug else logging.INFO)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Owned state
    database = Database(settings)
    store = SessionStore(
        repository=SessionRecordRepository(database),
        retention=timedelta(hours=settings.session_retention_hours),
        sweep_interval=timedelta(minutes=settings.sweep_interval_minutes),
    )
    credential_store = CredentialStore.from_settings(settings)
    rate_limiter = SlidingWindowRateLimiter(
        settings.rate_limit_requests, settings.rate_limit_window
    )
    generation_client = GenerationClient(
        rate_limiter, credential_store, settings, transport=generation_transport
    )
    analytics = AnalyticsClient(settings, transport=analytics_transport)

    app.state.settings = settings
    app.state.database = database
    app.state.store = store
    app.state.credentials = credential_store
    app.state.rate_limiter = rate_limiter
    app.state.generation_client = generation_client
    app.state.analytics = analytics
    app.state.router = MessageRouter(
        store,
        TutorService(generation_client),
        InterviewEngine(generation_client, settings),
        analytics,
        credential_store,
        settings,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(AuthMiddleware, settings=settings)

    # Routes
    app.include_router(messages.router, prefix="/v1/messages", tags=["messages"])
    app.include_router(sessions.router, prefix="/v1/sessions", tags=["sessions"])
    app.include_router(
        credentials.router, prefix="/v1/credentials", tags=["credentials"]
    )

    # Health check
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "cognify-mentor",
            "generationConfigured": credential_store.configured,
        }

    @app.get("/")
    async def root():
        return JSONResponse(
            content={
                "service": settings.app_name,
                "version": "0.1.0",
                "docs": "/docs" if settings.debug else None,
            }
        )

    return app


app = create_app()
