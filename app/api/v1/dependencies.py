"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller's identity, DB sessions, the
student directory, and application use cases. All use cases are built
from infrastructure implementations here; routes depend only on these
dependencies, not on infra directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.actor import Actor
from app.application.dtos.task import Page
from app.application.interfaces.services import IStudentDirectory
from app.application.use_cases.tasks import (
    TaskService,
    VisibilityControlService,
    VisibilityResolutionService,
)
from app.core.config import get_settings
from app.domain.enums import ActorRole
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    UpstreamServiceException,
    ValidationException,
)
from app.infrastructure.external.directory import (
    HttpStudentDirectory,
    MemoizedStudentDirectory,
)
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    TaskAssignmentRepository,
    TaskRepository,
    VisibilityControlRepository,
)
from app.infrastructure.security.jwt import actor_from_claims, verify_token

_http_bearer = HTTPBearer(auto_error=False)

# Roles allowed to author tasks and change targeting.
TASK_AUTHOR_ROLES = (
    ActorRole.PLATFORM_ADMIN,
    ActorRole.SUB_ADMIN,
    ActorRole.SCHOOL_ADMIN,
    ActorRole.TEACHER,
    ActorRole.PARENT,
    ActorRole.SOCIAL_WORKER,
    ActorRole.SYSTEM,
)
# Roles allowed to set visibility controls (parents, schools, classes).
CONTROLLER_ROLES = (
    ActorRole.PLATFORM_ADMIN,
    ActorRole.SUB_ADMIN,
    ActorRole.SCHOOL_ADMIN,
    ActorRole.TEACHER,
    ActorRole.PARENT,
    ActorRole.SYSTEM,
)


# ---- Identity ----


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> Actor:
    """Return the caller from a bearer JWT; raise 401 if missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        return actor_from_claims(verify_token(credentials.credentials))
    except (ValueError, KeyError) as e:
        raise AuthenticationException("Invalid or expired token") from e


def require_roles(*roles: ActorRole | str):
    """Dependency factory: require JWT auth and at least one of roles."""
    allowed = tuple(r.value if isinstance(r, ActorRole) else r for r in roles)

    async def _require(
        actor: Annotated[Actor, Depends(get_current_actor)],
    ) -> Actor:
        if not actor.has_any_role(*allowed):
            raise AuthorizationException(required_roles=list(allowed))
        return actor

    return _require


# ---- Pagination ----


def get_page(
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(ge=1, description="Page size")] = None,
) -> Page:
    """Page from query params; limit defaults to and is capped by settings."""
    settings = get_settings()
    size = limit or settings.default_page_size
    if size > settings.max_page_size:
        raise ValidationException(
            f"limit must be <= {settings.max_page_size}", field="limit"
        )
    return Page(page=page, limit=size)


# ---- Student directory ----


def get_student_directory(request: Request) -> IStudentDirectory:
    """Directory client for this request, memoized so each student is fetched once."""
    http_client = getattr(request.app.state, "directory_http_client", None)
    if http_client is None:
        raise UpstreamServiceException("student-directory", "Directory client not initialized")
    settings = get_settings()
    api_key = settings.directory_api_key
    inner = HttpStudentDirectory(
        http_client,
        settings.directory_service_url,
        timeout=settings.directory_timeout_seconds,
        cache=getattr(request.app.state, "cache", None),
        cache_ttl=settings.cache_ttl_directory,
        api_key=api_key.get_secret_value() if api_key else None,
    )
    return MemoizedStudentDirectory(inner)


# ---- Use cases ----


def _task_service(db: AsyncSession) -> TaskService:
    return TaskService(TaskRepository(db), TaskAssignmentRepository(db))


async def get_task_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TaskService:
    """TaskService for write paths (commits at end of request)."""
    return _task_service(db)


async def get_task_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TaskService:
    """TaskService for read-only paths."""
    return _task_service(db)


def _control_service(db: AsyncSession) -> VisibilityControlService:
    return VisibilityControlService(VisibilityControlRepository(db), TaskRepository(db))


async def get_visibility_control_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> VisibilityControlService:
    """VisibilityControlService for write paths."""
    return _control_service(db)


async def get_visibility_control_query_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> VisibilityControlService:
    """VisibilityControlService for read-only paths."""
    return _control_service(db)


async def get_visibility_resolution_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    directory: Annotated[IStudentDirectory, Depends(get_student_directory)],
) -> VisibilityResolutionService:
    """VisibilityResolutionService (read-only session, per-request directory memo)."""
    return VisibilityResolutionService(
        TaskRepository(db), VisibilityControlRepository(db), directory
    )
