"""Core constants: cache key prefixes and shared literal values.

Single source of truth for cache key structure (DRY).
"""

# Cache key prefixes (used with :student:<id> etc.)
CACHE_PREFIX_DIRECTORY = "directory"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Role that task targeting and resolution are evaluated for
STUDENT_ROLE = "student"

# Reason stored on a new visibility control when the caller gives none
DEFAULT_CONTROL_REASON = "Visibility control set"
