from unittest.mock import MagicMock, patch

import auth
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.role_resolver import RoleResolver
from use_cases.session_models import AuthSession, Identity, Role

ALICE = AuthSession.signed_in(Identity(uid="alice", email="alice@shop.test"), True)
BOB = AuthSession.signed_in(Identity(uid="bob", email="bob@shop.test"), True)


def test_resolve_parses_stored_role() -> None:
    resolver = RoleResolver(lambda uid: "Baker")
    assert resolver.resolve(ALICE) is Role.BAKER
    assert resolver.uid == "alice"


def test_anonymous_session_has_no_role() -> None:
    fetch = MagicMock()
    resolver = RoleResolver(fetch)
    assert resolver.resolve(AuthSession.anonymous()) is None
    fetch.assert_not_called()


def test_unknown_role_is_unresolved() -> None:
    assert RoleResolver(lambda uid: "owner").resolve(ALICE) is None
    assert RoleResolver(lambda uid: None).resolve(ALICE) is None


@patch("auth.get_audit_repo")
def test_fetch_failure_is_unresolved_and_audited(mock_get_audit_repo) -> None:
    mock_repo = MagicMock()
    mock_get_audit_repo.return_value = mock_repo

    def broken(uid):
        raise auth.RoleFetchError("db locked")

    assert RoleResolver(broken).resolve(ALICE) is None
    assert mock_repo.log_action.call_args.args[0] == AuditAction.ROLE_FETCH_FAILED


@patch("auth.get_audit_repo")
def test_stale_role_does_not_overwrite_current_identity(mock_get_audit_repo) -> None:
    mock_repo = MagicMock()
    mock_get_audit_repo.return_value = mock_repo
    roles = {"alice": "admin", "bob": "user"}
    resolver = RoleResolver(lambda uid: roles[uid])

    alice_ticket = resolver.begin(ALICE)
    # Session changes to bob before alice's lookup returns
    bob_ticket = resolver.begin(BOB)
    assert resolver.complete(bob_ticket, resolver.fetch(bob_ticket)) is True

    assert resolver.complete(alice_ticket, resolver.fetch(alice_ticket)) is False
    assert resolver.role is Role.USER
    assert resolver.uid == "bob"
    assert mock_repo.log_action.call_args.args[0] == AuditAction.STALE_ROLE_DISCARDED
    assert mock_repo.log_action.call_args.kwargs["result"] == "discarded"


@patch("auth.get_audit_repo")
def test_superseded_ticket_for_same_identity_is_discarded(mock_get_audit_repo) -> None:
    resolver = RoleResolver(lambda uid: "baker")
    first = resolver.begin(ALICE)
    second = resolver.begin(ALICE)
    assert resolver.is_current(first) is False
    assert resolver.is_current(second) is True
    assert resolver.complete(first, Role.ADMIN) is False
    assert resolver.role is None


def test_identity_change_clears_previous_role() -> None:
    resolver = RoleResolver(lambda uid: "admin")
    resolver.resolve(ALICE)
    assert resolver.role is Role.ADMIN
    resolver.begin(BOB)
    assert resolver.role is None


def test_sign_out_clears_role() -> None:
    resolver = RoleResolver(lambda uid: "admin")
    resolver.resolve(ALICE)
    assert resolver.resolve(AuthSession.anonymous()) is None
