import sqlite3
import pytest
from unittest.mock import patch
from use_cases.session_models import Identity, Role
import auth

@pytest.fixture
def test_db(tmp_path, monkeypatch):
    original = (auth.PROFILES_DB, auth.AUDIT_DB)
    auth.PROFILES_DB = str(tmp_path / "profiles.db")
    auth.AUDIT_DB = str(tmp_path / "audit.db")
    monkeypatch.setattr(auth, "get_secret", lambda key: None)
    monkeypatch.delenv("ADMIN_EMAIL", raising=False)
    auth.init_profile_db()
    auth.init_audit_db()
    yield tmp_path
    auth.PROFILES_DB, auth.AUDIT_DB = original

ADMIN = Identity(uid="admin-1", email="owner@shop.test", display_name="Owner")
JO = Identity(uid="jo-1", email="jo@shop.test", display_name="Jo")

def _actions():
    return [row[4] for row in auth.get_audit_repo().get_logs()]

def test_get_setting_prefers_secrets_then_env(monkeypatch):
    monkeypatch.setattr(auth, "get_secret", lambda key: "from-secrets" if key == "A" else None)
    monkeypatch.setenv("B", "from-env")
    assert auth.get_setting("A") == "from-secrets"
    assert auth.get_setting("B") == "from-env"
    assert auth.get_setting("MISSING_KEY_FOR_TEST", "fallback") == "fallback"

def test_ensure_profile_creates_user_role(test_db):
    auth.ensure_profile(JO)
    assert auth.fetch_role("jo-1") == "user"
    assert auth.get_profile("jo-1")["display_name"] == "Jo"

def test_admin_email_gets_admin_on_first_sign_in(test_db, monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "Owner@Shop.test")
    auth.ensure_profile(ADMIN)
    assert auth.fetch_role("admin-1") == "admin"

def test_ensure_profile_keeps_role(test_db):
    auth.ensure_profile(JO)
    auth.get_profile_repo().update_role("jo-1", "baker", "2026-01-01")
    auth.ensure_profile(JO)
    assert auth.fetch_role("jo-1") == "baker"

def test_ensure_profile_duplicate_email(test_db):
    auth.ensure_profile(JO)
    with pytest.raises(auth.UserAlreadyExistsError):
        auth.ensure_profile(Identity(uid="other", email="jo@shop.test"))

def test_fetch_role_unknown_uid(test_db):
    assert auth.fetch_role("ghost") is None

def test_fetch_role_store_failure(test_db):
    with patch.object(auth.get_profile_repo(), "get_role", side_effect=sqlite3.OperationalError("locked")):
        with pytest.raises(auth.RoleFetchError):
            auth.fetch_role("jo-1")

def test_update_user_role_by_admin(test_db):
    auth.ensure_profile(JO)
    assert auth.update_user_role(ADMIN, Role.ADMIN, "jo-1", "baker") is True
    assert auth.fetch_role("jo-1") == "baker"
    assert "USER_ROLE_CHANGE" in _actions()

def test_update_user_role_denied_for_baker(test_db):
    auth.ensure_profile(JO)
    assert auth.update_user_role(JO, Role.BAKER, "jo-1", "admin") is False
    assert auth.fetch_role("jo-1") == "user"
    assert "RBAC_DENIED" in _actions()

def test_update_user_role_rejects_unknown_role(test_db):
    with pytest.raises(ValueError):
        auth.update_user_role(ADMIN, Role.ADMIN, "jo-1", "owner")

def test_delete_profile(test_db):
    auth.ensure_profile(JO)
    assert auth.delete_profile(JO, Role.USER, "jo-1") is False
    assert auth.delete_profile(ADMIN, Role.ADMIN, "jo-1") is True
    assert auth.get_profile("jo-1") is None

def test_bootstrap_admin_promotes_existing_profile(test_db, monkeypatch):
    auth.ensure_profile(JO)
    monkeypatch.setenv("ADMIN_EMAIL", "jo@shop.test")
    assert auth.bootstrap_admin() is True
    assert auth.fetch_role("jo-1") == "admin"
    assert auth.bootstrap_admin() is True
    assert _actions().count("USER_ROLE_CHANGE") == 1

def test_bootstrap_admin_without_profile_or_setting(test_db, monkeypatch):
    assert auth.bootstrap_admin() is False
    monkeypatch.setenv("ADMIN_EMAIL", "nobody@shop.test")
    assert auth.bootstrap_admin() is False

def test_sign_in_audit_records_domain_only(test_db):
    auth.record_sign_in(JO)
    auth.record_sign_in_failure("jo@shop.test", "invalid_credentials")
    rows = auth.get_audit_repo().get_logs()
    assert all("jo@" not in (row[7] or "") for row in rows)
    assert [row[4] for row in rows] == ["SIGN_IN_FAIL", "SIGN_IN_SUCCESS"]

def test_email_domain():
    assert auth.email_domain("Jo@Shop.Test") == "shop.test"
    assert auth.email_domain(None) is None
    assert auth.email_domain("not-an-email") is None
