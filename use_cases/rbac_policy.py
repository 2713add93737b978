"""Centralized Role-Based Access Control logic."""

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from use_cases.session_models import Identity, Role


class Feature(str, Enum):
    USER_MANAGEMENT = "user-management"
    ORDER_MANAGEMENT = "order-management"
    PRODUCT_MANAGEMENT = "product-management"
    PROFILE_EDIT = "profile-edit"
    ANALYTICS = "analytics"


FEATURE_ACCESS: Dict[Feature, FrozenSet[Role]] = {
    Feature.USER_MANAGEMENT: frozenset({Role.ADMIN}),
    Feature.ORDER_MANAGEMENT: frozenset({Role.ADMIN, Role.BAKER}),
    Feature.PRODUCT_MANAGEMENT: frozenset({Role.ADMIN, Role.BAKER}),
    Feature.PROFILE_EDIT: frozenset({Role.USER, Role.BAKER, Role.ADMIN}),
    Feature.ANALYTICS: frozenset({Role.ADMIN}),
}

# Roles that satisfy each required role. Admin holds every baker capability.
_SATISFIED_BY: Dict[Role, FrozenSet[Role]] = {
    Role.ADMIN: frozenset({Role.ADMIN}),
    Role.BAKER: frozenset({Role.BAKER, Role.ADMIN}),
    Role.USER: frozenset({Role.USER, Role.BAKER, Role.ADMIN}),
}


def is_allowed(role: Any, required_role: Any) -> bool:
    """Check a resolved role against a required role.

    Defined for every pair: an unresolved or unknown value on either side denies.
    """
    held = Role.parse(role)
    required = Role.parse(required_role)
    if held is None or required is None:
        return False
    return held in _SATISFIED_BY[required]


def _parse_feature(feature: Any) -> Optional[Feature]:
    if isinstance(feature, Feature):
        return feature
    if not isinstance(feature, str):
        return None
    try:
        return Feature(feature.strip().lower())
    except ValueError:
        return None


def has_access(role: Any, feature: Any) -> bool:
    """Feature-level check against the static table; unknown features deny."""
    held = Role.parse(role)
    if held is None:
        return False
    parsed = _parse_feature(feature)
    permitted = FEATURE_ACCESS.get(parsed, frozenset()) if parsed is not None else frozenset()
    return held in permitted


def enforce(identity: Optional[Identity], role: Any, feature: Any) -> bool:
    """
    Evaluates if the identity is authorized to use the feature.
    Returns True if authorized, False otherwise. Denials are audited.
    """
    import auth
    from infrastructure.repositories.sqlite_audit_repository import AuditAction

    authorized = identity is not None and has_access(role, feature)

    if not authorized:
        parsed_role = Role.parse(role)
        auth.get_audit_repo().log_action(
            AuditAction.RBAC_DENIED,
            target_type="rbac",
            actor_uid=identity.uid if identity else None,
            actor_role=parsed_role.value if parsed_role else None,
            metadata={
                "target_action": feature.value if isinstance(feature, Feature) else str(feature),
                "reason": "insufficient_rights" if identity else "unauthenticated",
            },
            result="deny",
        )

    return authorized
