import itertools
from unittest.mock import MagicMock, patch

import pytest

from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases import rbac_policy
from use_cases.rbac_policy import FEATURE_ACCESS, Feature, has_access, is_allowed
from use_cases.session_models import Identity, Role

ROLES = [Role.ADMIN, Role.BAKER, Role.USER]

EXPECTED = {
    (Role.ADMIN, Role.ADMIN): True,
    (Role.ADMIN, Role.BAKER): True,
    (Role.ADMIN, Role.USER): True,
    (Role.BAKER, Role.ADMIN): False,
    (Role.BAKER, Role.BAKER): True,
    (Role.BAKER, Role.USER): True,
    (Role.USER, Role.ADMIN): False,
    (Role.USER, Role.BAKER): False,
    (Role.USER, Role.USER): True,
}


@pytest.mark.parametrize("held,required", list(itertools.product(ROLES, ROLES)))
def test_is_allowed_is_total_over_roles(held, required) -> None:
    assert is_allowed(held, required) is EXPECTED[(held, required)]


@pytest.mark.parametrize("required", ROLES)
def test_unresolved_role_is_denied(required) -> None:
    assert is_allowed(None, required) is False
    assert is_allowed("pastry-chef", required) is False


def test_unknown_required_role_is_denied() -> None:
    assert is_allowed(Role.ADMIN, None) is False
    assert is_allowed(Role.ADMIN, "owner") is False


def test_string_roles_are_accepted() -> None:
    assert is_allowed("admin", "baker") is True
    assert is_allowed("user", "baker") is False


def test_every_feature_has_an_entry() -> None:
    assert set(FEATURE_ACCESS) == set(Feature)


def test_feature_table() -> None:
    assert has_access(Role.ADMIN, Feature.USER_MANAGEMENT) is True
    assert has_access(Role.BAKER, Feature.USER_MANAGEMENT) is False
    assert has_access(Role.BAKER, Feature.ORDER_MANAGEMENT) is True
    assert has_access(Role.USER, Feature.ORDER_MANAGEMENT) is False
    assert has_access(Role.USER, "profile-edit") is True
    assert has_access(Role.BAKER, Feature.ANALYTICS) is False


def test_unknown_feature_is_denied() -> None:
    assert has_access(Role.ADMIN, "launch-rockets") is False
    assert has_access(Role.ADMIN, None) is False
    assert has_access(None, Feature.PROFILE_EDIT) is False


@patch("auth.get_audit_repo")
def test_enforce_denial_is_audited(mock_get_audit_repo) -> None:
    mock_repo = MagicMock()
    mock_get_audit_repo.return_value = mock_repo
    baker = Identity(uid="baker-1", email="b@shop.test")

    assert rbac_policy.enforce(baker, Role.BAKER, Feature.USER_MANAGEMENT) is False

    mock_repo.log_action.assert_called_once()
    call_args, call_kwargs = mock_repo.log_action.call_args
    assert call_args[0] == AuditAction.RBAC_DENIED
    assert call_kwargs["result"] == "deny"
    assert call_kwargs["target_type"] == "rbac"
    assert call_kwargs["actor_uid"] == "baker-1"
    assert call_kwargs["actor_role"] == "baker"
    assert call_kwargs["metadata"]["target_action"] == "user-management"
    assert call_kwargs["metadata"]["reason"] == "insufficient_rights"


@patch("auth.get_audit_repo")
def test_enforce_without_identity_denies_even_for_admin_role(mock_get_audit_repo) -> None:
    mock_repo = MagicMock()
    mock_get_audit_repo.return_value = mock_repo

    assert rbac_policy.enforce(None, Role.ADMIN, Feature.USER_MANAGEMENT) is False
    assert mock_repo.log_action.call_args.kwargs["metadata"]["reason"] == "unauthenticated"


@patch("auth.get_audit_repo")
def test_enforce_allowed_is_not_audited(mock_get_audit_repo) -> None:
    admin = Identity(uid="admin-1", email="a@shop.test")
    assert rbac_policy.enforce(admin, Role.ADMIN, Feature.USER_MANAGEMENT) is True
    mock_get_audit_repo.assert_not_called()
