"""Security: JWT verification and actor claims."""

from app.infrastructure.security.jwt import (
    actor_from_claims,
    create_access_token,
    verify_token,
)

__all__ = [
    "actor_from_claims",
    "create_access_token",
    "verify_token",
]
