"""Session DTOs shared across application layers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    ADMIN = "admin"
    BAKER = "baker"
    USER = "user"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Map a stored or claimed role onto the enum; anything unknown is unresolved."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Identity:
    uid: str
    email: Optional[str]
    display_name: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    """Immutable snapshot of the identity provider state.

    A new record is published for every change; nothing mutates a session in place.
    """

    identity: Optional[Identity] = None
    email_verified: bool = False
    loading: bool = True

    @classmethod
    def pending(cls) -> "AuthSession":
        return cls(identity=None, email_verified=False, loading=True)

    @classmethod
    def anonymous(cls) -> "AuthSession":
        return cls(identity=None, email_verified=False, loading=False)

    @classmethod
    def signed_in(cls, identity: Identity, email_verified: bool) -> "AuthSession":
        return cls(identity=identity, email_verified=bool(email_verified), loading=False)

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def uid(self) -> Optional[str]:
        return self.identity.uid if self.identity is not None else None


@dataclass(frozen=True)
class NavigationState:
    from_public_link: bool = False


@dataclass(frozen=True)
class Location:
    path: str
    state: NavigationState = field(default_factory=NavigationState)


def is_admin(role: Optional[Role]) -> bool:
    return Role.parse(role) is Role.ADMIN


def is_verified(session: AuthSession) -> bool:
    return session.is_authenticated and session.email_verified
