"""Application use cases: one entry point per workflow."""

from app.application.use_cases.tasks import (
    AssignmentMaterializer,
    TaskService,
    VisibilityControlService,
    VisibilityResolutionService,
)

__all__ = [
    "AssignmentMaterializer",
    "TaskService",
    "VisibilityControlService",
    "VisibilityResolutionService",
]
