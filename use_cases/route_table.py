"""Storefront route registry and path classification.

Every path the storefront serves is declared here once. A route may declare
``redirect_exempt``: the route and all of its descendants are then left alone
by the landing redirector, whatever the visitor's role.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from use_cases.session_models import Role

PUBLIC_ROOT = "/"
AUTH_PATH = "/auth"
VERIFICATION_PATH = "/email-verification-required"
ADMIN_PORTAL = "/admin-portal"
BAKER_PORTAL = "/baker-portal"
ACCOUNT_ROOT = "/account"

PUBLIC_PATHS = frozenset({PUBLIC_ROOT, AUTH_PATH})

_LANDING_PATHS: Dict[Role, str] = {
    Role.ADMIN: ADMIN_PORTAL,
    Role.BAKER: BAKER_PORTAL,
    Role.USER: ACCOUNT_ROOT,
}


class RouteClass(str, Enum):
    PUBLIC = "public"
    VERIFICATION = "verification"
    CHECKOUT_EXEMPT = "checkout-exempt"
    ORDER_DETAIL_EXEMPT = "order-detail-exempt"
    ROLE_TARGET = "role-target"
    OTHER = "other"


EXEMPT_CLASSES = frozenset({RouteClass.CHECKOUT_EXEMPT, RouteClass.ORDER_DETAIL_EXEMPT})


@dataclass(frozen=True)
class RouteSpec:
    pattern: str
    page: str
    title: str = ""
    protected: bool = False
    required_role: Optional[Role] = None
    redirect_exempt: Optional[RouteClass] = None

    @property
    def segments(self) -> Tuple[str, ...]:
        return _split(self.pattern)


@dataclass(frozen=True)
class RouteMatch:
    route: RouteSpec
    params: Dict[str, str] = field(default_factory=dict)


def _portal(base: str, page: str, title: str, role: Role, children: Iterable[Tuple[str, str, str]]) -> List[RouteSpec]:
    routes = [RouteSpec(base, page, title, protected=True, required_role=role)]
    for suffix, child_page, child_title in children:
        routes.append(
            RouteSpec(f"{base}/{suffix}", child_page, child_title, protected=True, required_role=role)
        )
    return routes


ROUTES: Tuple[RouteSpec, ...] = tuple(
    [
        RouteSpec(PUBLIC_ROOT, "home", "Home"),
        RouteSpec("/about", "about", "About"),
        RouteSpec("/products", "products", "Products"),
        RouteSpec("/products/<cake_id>", "product_detail", "Product"),
        RouteSpec("/products/customize/<cake_id>", "cake_customize", "Customize"),
        RouteSpec("/cakes", "cakes", "Cakes"),
        RouteSpec("/cakes/<cake_id>", "cake_detail", "Cake"),
        RouteSpec("/contact", "contact", "Contact"),
        RouteSpec("/request-custom-design", "custom_design", "Custom Design"),
        RouteSpec("/cart", "cart", "Cart", redirect_exempt=RouteClass.CHECKOUT_EXEMPT),
        RouteSpec("/cart/customize/<item_index>", "cake_customize", "Customize", redirect_exempt=RouteClass.CHECKOUT_EXEMPT),
        RouteSpec("/checkout", "checkout", "Checkout", redirect_exempt=RouteClass.CHECKOUT_EXEMPT),
        RouteSpec("/checkout/customize", "cake_customize", "Customize", redirect_exempt=RouteClass.CHECKOUT_EXEMPT),
        RouteSpec(AUTH_PATH, "auth", "Sign in"),
        RouteSpec(ACCOUNT_ROOT, "account", "My Account", protected=True),
        RouteSpec("/profile", "account", "My Account", protected=True),
        # Only an order id and what lies below it are exempt; there is no bare /orders page
        RouteSpec("/orders/<order_id>", "order_detail", "Order", redirect_exempt=RouteClass.ORDER_DETAIL_EXEMPT),
        RouteSpec(VERIFICATION_PATH, "email_verification", "Verify your email"),
    ]
    + _portal(
        BAKER_PORTAL,
        "baker_dashboard",
        "Baker Dashboard",
        Role.BAKER,
        [
            ("available-orders", "baker_available_orders", "Available Orders"),
            ("my-active-orders", "baker_active_orders", "My Active Orders"),
            ("order-history", "baker_order_history", "Order History"),
            ("profile-availability", "baker_profile", "Profile & Availability"),
            ("manage-my-cakes", "baker_cakes", "My Cakes"),
            ("manage-my-cakes/new", "baker_cake_form", "New Cake"),
            ("manage-my-cakes/edit/<cake_id>", "baker_cake_form", "Edit Cake"),
            ("order/<order_id>", "baker_order_management", "Order Management"),
        ],
    )
    + _portal(
        ADMIN_PORTAL,
        "admin_dashboard",
        "Admin Panel",
        Role.ADMIN,
        [
            ("user-management", "admin_users", "User Management"),
            ("users/create", "admin_user_create", "Create User"),
            ("users/<user_id>/edit", "admin_user_edit", "Edit User"),
            ("profile-settings", "admin_profile", "Profile Settings"),
        ],
    )
)


def _split(path: str) -> Tuple[str, ...]:
    return tuple(segment for segment in path.split("/") if segment)


def normalize_path(path: Optional[str]) -> str:
    """Canonical form: leading slash, no query/fragment, no empty or trailing segments."""
    if not path:
        return PUBLIC_ROOT
    raw = str(path).split("#", 1)[0].split("?", 1)[0]
    return "/" + "/".join(_split(raw))


def is_within(path: str, base: str) -> bool:
    """True when ``path`` is ``base`` or one of its descendants. The root has no descendants."""
    path = normalize_path(path)
    base = normalize_path(base)
    if path == base:
        return True
    if base == PUBLIC_ROOT:
        return False
    return path.startswith(base + "/")


def _match_segments(pattern: Tuple[str, ...], segments: Tuple[str, ...]) -> Optional[Dict[str, str]]:
    if len(segments) < len(pattern):
        return None
    params: Dict[str, str] = {}
    for expected, actual in zip(pattern, segments):
        if expected.startswith("<") and expected.endswith(">"):
            params[expected[1:-1]] = actual
        elif expected != actual:
            return None
    return params


def match_route(path: str) -> Optional[RouteMatch]:
    segments = _split(normalize_path(path))
    for route in ROUTES:
        pattern = route.segments
        if len(pattern) != len(segments):
            continue
        params = _match_segments(pattern, segments)
        if params is not None:
            return RouteMatch(route=route, params=params)
    return None


def exemption_for(path: str) -> Optional[RouteClass]:
    """Exempt class declared by the closest route covering ``path``, if any."""
    segments = _split(normalize_path(path))
    for route in ROUTES:
        if route.redirect_exempt is None:
            continue
        if _match_segments(route.segments, segments) is not None:
            return route.redirect_exempt
    return None


def landing_path_for(role) -> str:
    parsed = Role.parse(role)
    return _LANDING_PATHS.get(parsed, ACCOUNT_ROOT) if parsed is not None else ACCOUNT_ROOT


def classify_path(path: str, role) -> RouteClass:
    path = normalize_path(path)
    if path in PUBLIC_PATHS:
        return RouteClass.PUBLIC
    if path == VERIFICATION_PATH:
        return RouteClass.VERIFICATION
    exempt = exemption_for(path)
    if exempt is not None:
        return exempt
    if is_within(path, landing_path_for(role)):
        return RouteClass.ROLE_TARGET
    return RouteClass.OTHER


def is_loading_watched(path: str) -> bool:
    """Paths that may be redirected as soon as the session resolves."""
    path = normalize_path(path)
    return path in PUBLIC_PATHS or is_within(path, ADMIN_PORTAL) or is_within(path, BAKER_PORTAL)
