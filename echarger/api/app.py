"""
FastAPI application factory.

* Registers routes for the charger catalog, search and admin.
* Starts / stops the background ingestion worker via lifespan events
  when ``INGESTION_ENABLED`` is set.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from echarger.api.middleware import limiter
from echarger.api.routes import admin, chargers, search
from echarger.config import settings
from echarger.infrastructure.redis_client import close_redis
from echarger.workers import ingestor as _ingestor

logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the ingestion worker on startup; stop it and Redis on shutdown."""
    if settings.ingestion_enabled:
        await _ingestor.start_ingestion_loop()
    yield
    if settings.ingestion_enabled:
        await _ingestor.stop_ingestion_loop()
    await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title="ECharger Corridor API",
        description=(
            "Finds fast chargers a driver can still reach along the "
            "Rotterdam - Santa Pola corridor, given position and remaining "
            "range.  Charger data is imported from OpenChargeMap."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(chargers.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
