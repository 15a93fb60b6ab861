"""FastAPI application for the Lumina invitation backend.

This package provides REST endpoints for:
- Health checks
- Public event details, venues and ticket tiers
- The guest admission flow (verification, voting, claiming, issuance)
- The admin back office
and a WebSocket feed of config/venue/tier snapshots.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from lumina import __version__
from lumina.api.dependencies import (
    get_directory_service,
    get_stock_service,
    get_voting_service,
)
from lumina.api.exceptions import register_exception_handlers
from lumina.api.middleware.correlation import CorrelationIdMiddleware
from lumina.api.routes import (
    admin_router,
    event_router,
    feed_router,
    health_router,
    sessions_router,
)
from lumina.services.seed import seed_defaults
from lumina.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def seed_on_startup_enabled() -> bool:
    return os.getenv("LUMINA_SEED_ON_STARTUP", "true").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Seed default data into empty tables at first boot."""
    if seed_on_startup_enabled():
        try:
            seed_defaults(get_directory_service(), get_voting_service(), get_stock_service())
        except (ClientError, BotoCoreError):
            logger.exception("Seeding defaults failed; starting without seed data")
    yield


app = FastAPI(
    title="Lumina Invitation API",
    description="Guest admission, venue voting and ticket claiming for a private event",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

# Include routers under /api prefix
app.include_router(health_router, prefix="/api")
app.include_router(event_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(feed_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Root liveness endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "lumina-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("lumina.api.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
