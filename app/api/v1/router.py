"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import bulk, controllers, health, parents, students, tasks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(students.router, prefix="/students", tags=["students"])
api_router.include_router(controllers.router, prefix="/controllers", tags=["controllers"])
api_router.include_router(parents.router, prefix="/parents", tags=["parents"])
api_router.include_router(bulk.router, prefix="/bulk", tags=["bulk"])
