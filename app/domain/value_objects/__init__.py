"""Domain value objects and shared value types."""

from app.domain.value_objects.core import (
    DefaultVisibility,
    StudentIdSet,
    TargetCriteria,
    VisibilityContext,
    validate_entity_id,
)

__all__ = [
    "DefaultVisibility",
    "StudentIdSet",
    "TargetCriteria",
    "VisibilityContext",
    "validate_entity_id",
]
