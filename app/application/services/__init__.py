"""Application services: pure criteria evaluation and visibility resolution."""

from app.application.services.criteria_evaluator import meets_criteria
from app.application.services.visibility_resolver import (
    HIDE_REASONS,
    apply_default_policy,
    check_override,
    controller_ids_for,
    resolve_visibility,
)

__all__ = [
    "HIDE_REASONS",
    "apply_default_policy",
    "check_override",
    "controller_ids_for",
    "meets_criteria",
    "resolve_visibility",
]
