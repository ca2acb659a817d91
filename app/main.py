"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
Settings are loaded inside create_app() so tests can set env before import.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.core.config import get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.core.limiter import limiter
from app.middleware import (
    CorrelationIDMiddleware,
    RequestIDMiddleware,
    TimeoutMiddleware,
)
from app.shared.telemetry.logging import setup_logging

OPENAPI_TAGS = [
    {"name": "tasks", "description": "Author tasks, manage recipients, set and resolve visibility."},
    {"name": "students", "description": "Tasks a student can see and their assignment rows."},
    {"name": "controllers", "description": "Tasks and overrides managed by a parent, school, or class."},
    {"name": "parents", "description": "Visible tasks for each of a parent's children."},
    {"name": "bulk", "description": "Assignment and visibility changes across many tasks."},
    {"name": "health", "description": "Liveness and readiness probes."},
]


def _origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app() -> FastAPI:
    """Build the application: routes under /api/v1, JSON errors, request ids."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Decides which students can see which tasks: targeting by strategy, "
            "parent/school/class overrides, and per-task default visibility."
        ),
        debug=settings.debug,
        openapi_tags=OPENAPI_TAGS,
        lifespan=create_lifespan,
    )
    app.state.limiter = limiter
    register_exception_handlers(app)

    # Last added is outermost: timeout wraps request id, which wraps correlation id and CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", settings.request_id_header],
        expose_headers=[settings.request_id_header, settings.correlation_id_header],
    )
    app.add_middleware(CorrelationIDMiddleware, header_name=settings.correlation_id_header)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
