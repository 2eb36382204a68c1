"""Synapse API — FastAPI application shell around the transactional engine.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SynapseError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, coordinator, notifier and services built once in the lifespan
    - In-flight recommender refreshes drained and the engine disposed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Services exposed on app.state.services for the (external) request layer
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from synapse.api.error_handlers import register_error_handlers
from synapse.api.routes import health
from synapse.config import get_settings
from synapse.infrastructure.database import init_db
from synapse.infrastructure.observability import setup_logging
from synapse.infrastructure.recommender_client import RecommenderNotifier
from synapse.services.service_registry import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    notifier = RecommenderNotifier(
        settings.recommender_api_url,
        settings.recommender_api_key,
        refresh_path=settings.recommender_refresh_path,
        timeout_seconds=settings.recommender_timeout_seconds,
    )
    app.state.notifier = notifier
    # No SkillExtractor ships with the API; embedders pass one to build_services
    app.state.services = build_services(
        manager.coordinator(settings.transaction_timeout_seconds),
        notifier=notifier,
        invitation_ttl_hours=settings.invitation_ttl_hours,
    )
    logger.info("Synapse API started")
    yield
    logger.info("Synapse API shutting down")
    await notifier.drain()
    await manager.dispose()


app = FastAPI(
    title="Synapse API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
register_error_handlers(app)
