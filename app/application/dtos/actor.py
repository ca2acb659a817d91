"""DTO for the verified caller handed to use cases by the API layer."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Actor:
    """Verified identity: user id, roles, and per-role profile ids.

    role is the role recorded on rows the actor writes (first role
    presented by the identity provider).
    """

    user_id: str
    roles: tuple[str, ...] = ()
    profile_ids: dict[str, str] = field(default_factory=dict)

    @property
    def role(self) -> str:
        return self.roles[0] if self.roles else "system"

    def has_any_role(self, *roles: str) -> bool:
        return any(r in self.roles for r in roles)


SYSTEM_ACTOR = Actor(user_id="system", roles=("system",))
