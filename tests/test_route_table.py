import pytest

from use_cases.route_table import (
    ACCOUNT_ROOT,
    ADMIN_PORTAL,
    BAKER_PORTAL,
    ROUTES,
    RouteClass,
    classify_path,
    exemption_for,
    is_loading_watched,
    is_within,
    landing_path_for,
    match_route,
    normalize_path,
)
from use_cases.session_models import Role


@pytest.mark.parametrize("raw,expected", [
    (None, "/"),
    ("", "/"),
    ("/", "/"),
    ("cart", "/cart"),
    ("/cart/", "/cart"),
    ("//baker-portal//available-orders/", "/baker-portal/available-orders"),
    ("/checkout?step=2#top", "/checkout"),
])
def test_normalize_path(raw, expected) -> None:
    assert normalize_path(raw) == expected


def test_is_within() -> None:
    assert is_within("/admin-portal", ADMIN_PORTAL) is True
    assert is_within("/admin-portal/user-management", ADMIN_PORTAL) is True
    assert is_within("/admin-portal-old", ADMIN_PORTAL) is False
    # The root has no descendants
    assert is_within("/cakes", "/") is False
    assert is_within("/", "/") is True


def test_landing_paths() -> None:
    assert landing_path_for(Role.ADMIN) == ADMIN_PORTAL
    assert landing_path_for("baker") == BAKER_PORTAL
    assert landing_path_for(Role.USER) == ACCOUNT_ROOT
    assert landing_path_for(None) == ACCOUNT_ROOT


def test_match_route_with_params() -> None:
    match = match_route("/baker-portal/manage-my-cakes/edit/red-velvet")
    assert match.route.page == "baker_cake_form"
    assert match.params == {"cake_id": "red-velvet"}

    match = match_route("/admin-portal/users/u42/edit")
    assert match.route.page == "admin_user_edit"
    assert match.params == {"user_id": "u42"}


def test_match_route_prefers_literal_segments() -> None:
    assert match_route("/products/customize/abc").route.page == "cake_customize"
    assert match_route("/baker-portal/manage-my-cakes/new").route.page == "baker_cake_form"
    assert match_route("/baker-portal/manage-my-cakes/new").params == {}


def test_unknown_path_has_no_route() -> None:
    assert match_route("/nope") is None
    assert match_route("/cakes/a/b") is None


def test_portal_routes_are_protected_with_required_role() -> None:
    for route in ROUTES:
        if route.pattern.startswith(ADMIN_PORTAL):
            assert route.protected and route.required_role is Role.ADMIN
        if route.pattern.startswith(BAKER_PORTAL):
            assert route.protected and route.required_role is Role.BAKER


def test_route_patterns_are_unique() -> None:
    patterns = [route.pattern for route in ROUTES]
    assert len(patterns) == len(set(patterns))


@pytest.mark.parametrize("path,expected", [
    ("/cart", RouteClass.CHECKOUT_EXEMPT),
    ("/cart/customize/0", RouteClass.CHECKOUT_EXEMPT),
    ("/checkout", RouteClass.CHECKOUT_EXEMPT),
    ("/checkout/customize", RouteClass.CHECKOUT_EXEMPT),
    ("/checkout/customize/anything/deeper", RouteClass.CHECKOUT_EXEMPT),
    ("/orders/123", RouteClass.ORDER_DETAIL_EXEMPT),
    ("/orders/123/receipt", RouteClass.ORDER_DETAIL_EXEMPT),
    ("/orders", None),
    ("/orders/", None),
    ("/checkouts", None),
    ("/cakes", None),
])
def test_exemptions(path, expected) -> None:
    assert exemption_for(path) is expected


def test_classify_path() -> None:
    assert classify_path("/", Role.USER) is RouteClass.PUBLIC
    assert classify_path("/auth", Role.ADMIN) is RouteClass.PUBLIC
    assert classify_path("/email-verification-required", Role.USER) is RouteClass.VERIFICATION
    assert classify_path("/checkout", Role.BAKER) is RouteClass.CHECKOUT_EXEMPT
    assert classify_path("/baker-portal/order-history", Role.BAKER) is RouteClass.ROLE_TARGET
    assert classify_path("/baker-portal/order-history", Role.USER) is RouteClass.OTHER
    assert classify_path("/cakes", Role.USER) is RouteClass.OTHER


def test_loading_watched_paths() -> None:
    assert is_loading_watched("/") is True
    assert is_loading_watched("/auth") is True
    assert is_loading_watched("/admin-portal/user-management") is True
    assert is_loading_watched("/baker-portal") is True
    assert is_loading_watched("/cakes") is False
    assert is_loading_watched("/account") is False

def test_bare_orders_path_is_redirected_for_signed_in_user() -> None:
    from use_cases.landing_redirect import compute_redirect
    from use_cases.session_models import AuthSession, Identity

    session = AuthSession.signed_in(Identity(uid="jo-1", email="jo@shop.test"), True)
    assert compute_redirect(session, Role.USER, "/orders/") == "/account"
    assert compute_redirect(session, Role.USER, "/orders/42") is None
