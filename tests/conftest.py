"""Pytest configuration and fixtures for the task visibility service.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. Environment defaults are set before the app is
imported so Settings validation passes without a .env file. DTO builders
(make_task, make_control, student) are shared by unit and API tests.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

from datetime import datetime, timezone  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from app.application.dtos.directory import StudentDirectoryRecord  # noqa: E402
from app.application.dtos.task import TaskResult  # noqa: E402
from app.application.dtos.visibility import VisibilityControlResult  # noqa: E402
from app.domain.enums import AssignmentStrategy, ControllerType  # noqa: E402
from app.domain.value_objects.core import DefaultVisibility, TargetCriteria  # noqa: E402
from app.infrastructure.persistence import database  # noqa: E402
from app.infrastructure.security.jwt import create_access_token  # noqa: E402
from app.main import app  # noqa: E402

_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def bearer(user_id: str = "user-1", *roles: str, **profile_ids: str) -> dict[str, str]:
    """Authorization header for a caller with the given roles."""
    token = create_access_token(
        {"sub": user_id, "roles": list(roles), "profile_ids": profile_ids}
    )
    return {"Authorization": f"Bearer {token}"}


def build_task(
    task_id: str = "task-1",
    strategy: AssignmentStrategy = AssignmentStrategy.GLOBAL,
    criteria: dict[str, Any] | None = None,
    visibility: dict[str, bool] | None = None,
    is_deleted: bool = False,
) -> TaskResult:
    return TaskResult(
        id=task_id,
        title="Read chapter 3",
        description=None,
        category="academic",
        sub_category=None,
        point_value=10,
        status="pending",
        created_by="teacher-1",
        creator_role="teacher",
        assignment_strategy=strategy,
        target_criteria=TargetCriteria.from_dict(criteria),
        default_visibility=DefaultVisibility.from_dict(visibility),
        due_date=None,
        is_deleted=is_deleted,
        deleted_at=_NOW if is_deleted else None,
        deleted_by="admin-1" if is_deleted else None,
        metadata={},
        created_at=_NOW,
        updated_at=_NOW,
    )


def build_control(
    controller_type: ControllerType,
    controller_id: str,
    student_ids: tuple[str, ...],
    is_visible: bool,
    task_id: str = "task-1",
    control_id: str = "ctl-1",
) -> VisibilityControlResult:
    return VisibilityControlResult(
        id=control_id,
        task_id=task_id,
        controller_type=controller_type,
        controller_id=controller_id,
        is_visible=is_visible,
        controlled_student_ids=student_ids,
        changed_by="user-1",
        changed_by_role=controller_type.value,
        reason=None,
        metadata={},
        created_at=_NOW,
        updated_at=_NOW,
    )


@pytest.fixture
def make_task():
    return build_task


@pytest.fixture
def make_control():
    return build_control


@pytest.fixture
def student() -> StudentDirectoryRecord:
    """Student stu-1 at school sch-1, class cls-1, grade 5, parent par-1."""
    return StudentDirectoryRecord(
        student_id="stu-1",
        school_id="sch-1",
        class_ids=("cls-1",),
        parent_ids=("par-1",),
        grade="5",
    )


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Clears dependency overrides after."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated Postgres. Skips (pytest.skip)
    when it is not configured. Use @pytest.mark.requires_db to mark tests
    that need this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def auth():
    """Factory for Authorization headers: auth(user_id, *roles, **profile_ids)."""
    return bearer
