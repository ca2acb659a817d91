"""Cache: Redis service and cache key utilities.

Used by the student directory client. CacheService uses app.core.config;
key format is in keys.py (DRY).
"""

from app.infrastructure.cache.keys import directory_children_key, directory_student_key
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheService",
    "directory_children_key",
    "directory_student_key",
]
