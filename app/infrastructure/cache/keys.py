"""Cache key builders. Single place for key format (DRY).

Key components (student_id, parent_id) must not contain CACHE_KEY_SEP
to avoid ambiguous or colliding keys.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_DIRECTORY


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator."""
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def directory_student_key(student_id: str) -> str:
    """Cache key for a student's directory record."""
    _validate_key_component(student_id, "student_id")
    return f"{CACHE_PREFIX_DIRECTORY}{CACHE_KEY_SEP}student{CACHE_KEY_SEP}{student_id}"


def directory_children_key(parent_id: str) -> str:
    """Cache key for the student ids linked to a parent."""
    _validate_key_component(parent_id, "parent_id")
    return f"{CACHE_PREFIX_DIRECTORY}{CACHE_KEY_SEP}children{CACHE_KEY_SEP}{parent_id}"
