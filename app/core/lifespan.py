"""Application lifespan.

Opens the process-wide resources the request path borrows from app.state:
the shared httpx client for the student directory and the optional Redis
cache. Telemetry is configured here too so instrumentation sees the engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import Settings, get_settings
from app.infrastructure.persistence import database

if TYPE_CHECKING:
    from app.infrastructure.cache.redis_cache import CacheService

logger = logging.getLogger(__name__)


async def _open_cache(settings: Settings) -> "CacheService | None":
    if not settings.redis_enabled:
        logger.info("Redis disabled; directory lookups are not cached across requests")
        return None
    from app.infrastructure.cache.redis_cache import CacheService

    cache = CacheService()
    await cache.connect()
    return cache


def _start_telemetry(app: FastAPI, settings: Settings) -> None:
    from app.shared.telemetry.telemetry import TelemetryConfig, set_telemetry

    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        enabled=True,
        environment=settings.telemetry_environment,
    )
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    set_telemetry(telemetry)
    telemetry.instrument_fastapi(app)
    telemetry.instrument_logging()
    if settings.redis_enabled:
        telemetry.instrument_redis()
    database._ensure_engine()
    if database.engine is not None:
        telemetry.instrument_sqlalchemy(database.engine)
    logger.info("Telemetry started (exporter=%s)", settings.telemetry_exporter)


def _stop_telemetry() -> None:
    from app.shared.telemetry.telemetry import get_telemetry, set_telemetry

    telemetry = get_telemetry()
    if telemetry is None:
        return
    telemetry.shutdown()
    set_telemetry(None)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open shared resources, yield to serve, then release them in reverse order."""
    settings = get_settings()
    app.state.directory_http_client = httpx.AsyncClient(
        timeout=settings.directory_timeout_seconds,
    )
    app.state.cache = await _open_cache(settings)
    if settings.telemetry_enabled:
        _start_telemetry(app, settings)
    try:
        yield
    finally:
        _stop_telemetry()
        if app.state.cache is not None:
            await app.state.cache.disconnect()
            app.state.cache = None
        await app.state.directory_http_client.aclose()
        app.state.directory_http_client = None
        if database.engine is not None:
            await database.engine.dispose()
        logger.info("Shutdown complete")
