import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from civicvote.application.use_cases.sessions import LifecyclePoller
from civicvote.config import get_settings
from civicvote.infrastructure.database import SessionLocal, engine, initialize_database
from civicvote.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables and run the lifecycle poller."""

    settings = get_settings()
    initialize_database()

    poller: LifecyclePoller | None = None
    if settings.lifecycle_poller_enabled:
        poller = LifecyclePoller(
            SessionLocal,
            interval=settings.lifecycle_poll_interval_seconds,
            initial_delay=settings.lifecycle_poll_initial_delay_seconds,
            timeout=settings.lifecycle_poll_timeout_seconds,
        )
        poller.start()
    else:
        logger.info("Lifecycle poller disabled")

    try:
        yield
    finally:
        if poller is not None:
            await poller.stop()
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="CivicVote notifications", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000)
