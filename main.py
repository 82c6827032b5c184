import logging
from contextlib import asynccontextmanager
from functools import partial

from fastapi import FastAPI

from socialprofile.application.use_cases import invalidate_owner_relationships
from socialprofile.infrastructure.database import engine, initialize_database
from socialprofile.infrastructure.notifications import relationship_change_notifier
from socialprofile.interfaces.api.dependencies import get_cache_backend
from socialprofile.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables, wire cache invalidation and release resources on shutdown."""

    initialize_database()
    invalidate = partial(invalidate_owner_relationships, get_cache_backend())
    relationship_change_notifier.subscribe(invalidate)
    logger.info("Relationship cache invalidation subscribed")
    try:
        yield
    finally:
        relationship_change_notifier.unsubscribe(invalidate)
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Social profile feed", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
