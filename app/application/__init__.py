"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, student directory, cache).
"""

from app.application.interfaces import (
    ICacheService,
    IStudentDirectory,
    ITaskAssignmentRepository,
    ITaskRepository,
    IVisibilityControlRepository,
)
from app.application.use_cases import (
    AssignmentMaterializer,
    TaskService,
    VisibilityControlService,
    VisibilityResolutionService,
)

__all__ = [
    "AssignmentMaterializer",
    "ICacheService",
    "IStudentDirectory",
    "ITaskAssignmentRepository",
    "ITaskRepository",
    "IVisibilityControlRepository",
    "TaskService",
    "VisibilityControlService",
    "VisibilityResolutionService",
]
