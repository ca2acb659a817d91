"""JWT access tokens carrying the caller's identity.

Tokens are issued by the identity service; this service verifies them and
turns the claims into an Actor. create_access_token exists for tests and
service-to-service calls.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.application.dtos.actor import Actor
from app.core.config import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with the given claims.

    Args:
        data: Claims to encode (sub, roles, profile_ids).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = datetime.now(UTC) + ttl
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If token is invalid, expired, or missing exp/sub.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """Build an Actor from verified claims.

    roles may be a list or a single "role" string; profile_ids maps role
    to that role's profile id (e.g. {"parent": "<parent id>"}).
    """
    roles = payload.get("roles")
    if roles is None:
        roles = [payload["role"]] if payload.get("role") else []
    if isinstance(roles, str):
        roles = [roles]
    profile_ids = payload.get("profile_ids") or {}
    if not isinstance(profile_ids, dict):
        raise ValueError("Token claim profile_ids must be an object")
    return Actor(
        user_id=str(payload["sub"]),
        roles=tuple(str(r) for r in roles),
        profile_ids={str(k): str(v) for k, v in profile_ids.items()},
    )
