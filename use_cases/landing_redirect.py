"""Landing redirection: steer a signed-in visitor to the home surface of their role."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from use_cases.route_table import (
    EXEMPT_CLASSES,
    VERIFICATION_PATH,
    RouteClass,
    classify_path,
    is_loading_watched,
    is_within,
    landing_path_for,
    normalize_path,
)
from use_cases.session_models import AuthSession, NavigationState


class LandingAction(str, Enum):
    NONE = "NONE"
    WAIT = "WAIT"
    NAVIGATE = "NAVIGATE"


@dataclass(frozen=True)
class LandingPlan:
    action: LandingAction
    target: Optional[str] = None
    replace: bool = True
    reason: str = ""

    @property
    def navigates(self) -> bool:
        return self.action is LandingAction.NAVIGATE


def _stay(reason: str) -> LandingPlan:
    return LandingPlan(LandingAction.NONE, reason=reason)


def plan_landing(
    session: AuthSession,
    role: Any,
    path: str,
    nav_state: Optional[NavigationState] = None,
) -> LandingPlan:
    """Pure landing decision for one (session, role, location) snapshot."""
    path = normalize_path(path)
    nav_state = nav_state or NavigationState()

    if session.loading:
        if is_loading_watched(path):
            return LandingPlan(LandingAction.WAIT, reason="session_loading")
        return _stay("session_loading")

    # Anonymous browsing is never redirected; protected pages are the guard's job.
    if session.identity is None:
        return _stay("anonymous")

    if not session.email_verified:
        if path == VERIFICATION_PATH:
            return _stay("already_on_verification")
        return LandingPlan(LandingAction.NAVIGATE, VERIFICATION_PATH, reason="email_unverified")

    target = landing_path_for(role)
    route_class = classify_path(path, role)

    if is_within(path, target):
        return _stay("within_role_target")
    if nav_state.from_public_link:
        return _stay("public_link")
    if route_class in EXEMPT_CLASSES:
        return _stay(route_class.value)
    reason = "public_path" if route_class is RouteClass.PUBLIC else "outside_role_target"
    return LandingPlan(LandingAction.NAVIGATE, target, reason=reason)


def compute_redirect(
    session: AuthSession,
    role: Any,
    path: str,
    nav_state: Optional[NavigationState] = None,
) -> Optional[str]:
    plan = plan_landing(session, role, path, nav_state)
    return plan.target if plan.navigates else None
