"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    ITaskAssignmentRepository,
    ITaskRepository,
    IVisibilityControlRepository,
)
from app.application.interfaces.services import ICacheService, IStudentDirectory

__all__ = [
    "ICacheService",
    "IStudentDirectory",
    "ITaskAssignmentRepository",
    "ITaskRepository",
    "IVisibilityControlRepository",
]
