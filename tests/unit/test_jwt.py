"""Tests for access-token verification and Actor mapping."""

from datetime import timedelta

import pytest

from app.infrastructure.security.jwt import (
    actor_from_claims,
    create_access_token,
    verify_token,
)


def test_round_trip_preserves_claims() -> None:
    token = create_access_token({"sub": "user-1", "roles": ["teacher"]})
    payload = verify_token(token)
    assert payload["sub"] == "user-1"
    assert payload["roles"] == ["teacher"]


def test_expired_token_rejected() -> None:
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError, match="Invalid token"):
        verify_token(token)


def test_garbage_token_rejected() -> None:
    with pytest.raises(ValueError):
        verify_token("not-a-jwt")


def test_actor_from_roles_list() -> None:
    actor = actor_from_claims(
        {"sub": "user-1", "roles": ["parent", "teacher"], "profile_ids": {"parent": "par-1"}}
    )
    assert actor.user_id == "user-1"
    assert actor.role == "parent"
    assert actor.has_any_role("teacher") is True
    assert actor.profile_ids == {"parent": "par-1"}


def test_actor_from_single_role_claim() -> None:
    actor = actor_from_claims({"sub": "user-1", "role": "school_admin"})
    assert actor.roles == ("school_admin",)


def test_actor_without_roles_defaults_to_system_role_label() -> None:
    actor = actor_from_claims({"sub": "svc-1"})
    assert actor.roles == ()
    assert actor.role == "system"
    assert actor.has_any_role("platform_admin") is False


def test_actor_rejects_malformed_profile_ids() -> None:
    with pytest.raises(ValueError):
        actor_from_claims({"sub": "user-1", "profile_ids": ["par-1"]})
