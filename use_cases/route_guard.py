"""Route guard decisions for protected storefront pages."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from use_cases.rbac_policy import is_allowed
from use_cases.route_table import PUBLIC_ROOT, VERIFICATION_PATH, match_route
from use_cases.session_models import AuthSession


class GuardState(str, Enum):
    PENDING = "PENDING"
    DENIED_UNAUTHENTICATED = "DENIED_UNAUTHENTICATED"
    DENIED_UNVERIFIED = "DENIED_UNVERIFIED"
    DENIED_WRONG_ROLE = "DENIED_WRONG_ROLE"
    ALLOWED = "ALLOWED"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect_to: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.ALLOWED

    @property
    def pending(self) -> bool:
        return self.state is GuardState.PENDING


def evaluate_guard(session: AuthSession, role: Any, required_role: Any = None) -> GuardDecision:
    """Decide whether a protected view may render.

    Checks run in a fixed order: loading, identity, email verification, role.
    Every denial carries exactly one redirect target.
    """
    if session.loading:
        return GuardDecision(GuardState.PENDING)
    if session.identity is None:
        return GuardDecision(GuardState.DENIED_UNAUTHENTICATED, PUBLIC_ROOT)
    if not session.email_verified:
        return GuardDecision(GuardState.DENIED_UNVERIFIED, VERIFICATION_PATH)
    if required_role is not None and not is_allowed(role, required_role):
        return GuardDecision(GuardState.DENIED_WRONG_ROLE, PUBLIC_ROOT)
    return GuardDecision(GuardState.ALLOWED)


def evaluate_route(session: AuthSession, role: Any, path: str) -> GuardDecision:
    """Guard decision for a concrete path, using the route's declared protection."""
    if session.loading:
        return GuardDecision(GuardState.PENDING)
    match = match_route(path)
    if match is None or not match.route.protected:
        return GuardDecision(GuardState.ALLOWED)
    return evaluate_guard(session, role, match.route.required_role)
