import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import models  # noqa: F401 - register models with Base
from .database import Base, engine
from .domain.chat import ConversationEventRegistry
from .domain.chat import router as chat_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(
    event_registry: Optional[ConversationEventRegistry] = None, create_tables: bool = True
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        if create_tables:
            try:
                Base.metadata.create_all(bind=engine, checkfirst=True)
                logger.info("Database tables created successfully")
            except Exception as e:
                logger.error(f"Failed to create database tables: {e}")
        yield
        logger.info("Application shutting down...")

    app = FastAPI(title="MonMariage Backfill API", version="1.0.0", lifespan=lifespan)
    # One registry per process, injected into handlers through app.state
    app.state.event_registry = event_registry or ConversationEventRegistry()
    app.include_router(chat_router)

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "chat_subscriptions": app.state.event_registry.active_count(),
        }

    return app


app = create_app()
