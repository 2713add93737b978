"""Application layer: session records, access policy and navigation decisions.

Only side-effect-free modules are re-exported here; ``auth_flow``, ``bootstrap``
and ``role_resolver`` talk to the service layer and are imported explicitly.
"""

from .landing_redirect import LandingAction, LandingPlan, compute_redirect, plan_landing
from .rbac_policy import FEATURE_ACCESS, Feature, has_access, is_allowed
from .route_guard import GuardDecision, GuardState, evaluate_guard, evaluate_route
from .route_table import ROUTES, RouteClass, RouteSpec, classify_path, landing_path_for, match_route
from .session_models import AuthSession, Identity, Location, NavigationState, Role, is_admin, is_verified

__all__ = [
    "AuthSession",
    "FEATURE_ACCESS",
    "Feature",
    "GuardDecision",
    "GuardState",
    "Identity",
    "LandingAction",
    "LandingPlan",
    "Location",
    "NavigationState",
    "ROUTES",
    "Role",
    "RouteClass",
    "RouteSpec",
    "classify_path",
    "compute_redirect",
    "evaluate_guard",
    "evaluate_route",
    "has_access",
    "is_admin",
    "is_allowed",
    "is_verified",
    "landing_path_for",
    "match_route",
    "plan_landing",
]
