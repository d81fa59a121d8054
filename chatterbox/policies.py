"""
Capability checks.

Each ``can_*`` function is a pure decision over the caller's identity and the
resource in question; routes call ``ensure`` to turn a refusal into a 403.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from chatterbox.errors import AuthorizationError
from chatterbox.schemas import Membership, Role


@dataclass(frozen=True)
class Identity:
    email: str
    role: str = Role.USER.value
    membership: str = Membership.FREE.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_premium(self) -> bool:
        return self.membership == Membership.PREMIUM.value

    @classmethod
    def from_user(cls, email: str, user: Optional[Dict[str, Any]] = None) -> "Identity":
        if not user:
            return cls(email=email)
        return cls(
            email=email,
            role=user.get("role", Role.USER.value),
            membership=user.get("membershipStatus", Membership.FREE.value),
        )


def ensure(allowed: bool, message: str = "Forbidden Request") -> None:
    if not allowed:
        raise AuthorizationError(message)


def can_act_as(identity: Identity, email: str) -> bool:
    return identity.email == email


def can_create_post(identity: Identity, existing_posts: int, limit: int) -> bool:
    return identity.is_premium or existing_posts < limit


def can_edit_post(identity: Identity, post: Dict[str, Any]) -> bool:
    return identity.is_admin or post.get("authorEmail") == identity.email


def can_delete_post(identity: Identity, post: Dict[str, Any]) -> bool:
    return identity.is_admin or post.get("authorEmail") == identity.email


def can_update_profile(identity: Identity, user: Dict[str, Any]) -> bool:
    return user.get("email") == identity.email


def can_moderate(identity: Identity) -> bool:
    return identity.is_admin
