from views.baker_view import _feature_for
from views.login_view import validate_sign_up
from views.storefront_view import find_cake, portal_link_for
from views.verification_view import RESEND_COOLDOWN_SECONDS, seconds_until_resend
from use_cases.rbac_policy import Feature
from use_cases.session_models import Role


def test_validate_sign_up():
    assert validate_sign_up("", "secret1", "secret1") is not None
    assert validate_sign_up("not-an-email", "secret1", "secret1") == "Invalid email address format."
    assert validate_sign_up("jo@shop.test", "secret1", "secret2") == "Passwords do not match."
    assert "at least" in validate_sign_up("jo@shop.test", "123", "123")
    assert validate_sign_up("jo@shop.test", "secret1", "secret1") is None


def test_resend_cooldown():
    assert seconds_until_resend(None) == 0
    assert seconds_until_resend(1000.0, now=1000.0) == RESEND_COOLDOWN_SECONDS
    assert seconds_until_resend(1000.0, now=1030.0) == RESEND_COOLDOWN_SECONDS - 30
    assert seconds_until_resend(1000.0, now=2000.0) == 0


def test_portal_link_for_role():
    assert portal_link_for(Role.ADMIN)[1] == "/admin-portal"
    assert portal_link_for(Role.BAKER)[1] == "/baker-portal"
    assert portal_link_for(Role.USER)[1] == "/account"
    assert portal_link_for(None)[1] == "/account"


def test_baker_pages_map_to_features():
    assert _feature_for("baker_available_orders") is Feature.ORDER_MANAGEMENT
    assert _feature_for("baker_cake_form") is Feature.PRODUCT_MANAGEMENT
    assert _feature_for("baker_profile") is Feature.PROFILE_EDIT


def test_find_cake():
    assert find_cake("red-velvet")["name"] == "Red Velvet"
    assert find_cake("missing") is None
