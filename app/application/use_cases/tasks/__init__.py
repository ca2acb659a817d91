"""Task use cases: authoring, materialization, controls, and resolution."""

from app.application.use_cases.tasks.assignment_materializer import (
    AssignmentMaterializer,
)
from app.application.use_cases.tasks.task_operations import TaskService
from app.application.use_cases.tasks.visibility_controls import (
    VisibilityControlService,
)
from app.application.use_cases.tasks.visibility_resolution import (
    VisibilityResolutionService,
)

__all__ = [
    "AssignmentMaterializer",
    "TaskService",
    "VisibilityControlService",
    "VisibilityResolutionService",
]
