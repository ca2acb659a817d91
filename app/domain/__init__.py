"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.enums import (
    OVERRIDE_PRECEDENCE,
    ActorRole,
    AssignmentSource,
    AssignmentStrategy,
    ControllerType,
    TaskCategory,
    TaskStatus,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ImmutableFieldException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TaskVisibilityException,
    UpstreamServiceException,
    ValidationException,
)
from app.domain.value_objects import (
    DefaultVisibility,
    StudentIdSet,
    TargetCriteria,
    VisibilityContext,
    validate_entity_id,
)

__all__ = [
    # Enums
    "ActorRole",
    "AssignmentSource",
    "AssignmentStrategy",
    "ControllerType",
    "OVERRIDE_PRECEDENCE",
    "TaskCategory",
    "TaskStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ImmutableFieldException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "TaskVisibilityException",
    "UpstreamServiceException",
    "ValidationException",
    # Value objects
    "DefaultVisibility",
    "StudentIdSet",
    "TargetCriteria",
    "VisibilityContext",
    "validate_entity_id",
]
