import pytest
from unittest.mock import MagicMock

import auth
from infrastructure.identity.firebase_identity import ProviderAccount, ProviderCredentials
from infrastructure.identity.session_source import SessionSource
from use_cases.session_models import AuthSession, Identity

IDENT = Identity(uid="uid-1", email="jo@shop.test")
CREDS = ProviderCredentials("uid-1", "id-1", "refresh-1")

def _account(verified):
    return ProviderAccount(IDENT, verified, CREDS)

@pytest.fixture
def provider():
    return MagicMock()

@pytest.fixture
def source(provider):
    return SessionSource(provider)

def test_initial_session_is_pending(source):
    assert source.current == AuthSession.pending()
    assert source.started is False

def test_start_publishes_anonymous_once(source):
    seen = []
    source.subscribe(seen.append)
    source.start()
    source.start()
    assert seen == [AuthSession.anonymous()]
    assert source.started is True

def test_start_failure_notifies_error_listeners(source, provider):
    provider.ensure_configured.side_effect = auth.SessionInitError("no api key")
    errors = []
    source.subscribe(lambda s: None, errors.append)

    with pytest.raises(auth.SessionInitError):
        source.start()

    assert len(errors) == 1
    assert source.current.loading is True
    assert source.started is False

def test_sign_in_publishes_whole_record(source, provider):
    provider.sign_in.return_value = _account(True)
    seen = []
    source.subscribe(seen.append)

    session = source.sign_in("jo@shop.test", "secret")

    assert session == AuthSession.signed_in(IDENT, True)
    assert seen == [session]

def test_unchanged_session_is_not_republished(source, provider):
    provider.sign_in.return_value = _account(True)
    provider.current_account.return_value = _account(True)
    seen = []
    source.subscribe(seen.append)
    source.sign_in("jo@shop.test", "secret")
    source.refresh()
    assert len(seen) == 1

def test_refresh_picks_up_verification(source, provider):
    provider.sign_up.return_value = _account(False)
    provider.current_account.return_value = _account(True)
    source.sign_up("jo@shop.test", "secret")
    assert source.current.email_verified is False

    assert source.refresh().email_verified is True

def test_refresh_signs_out_expired_session(source, provider):
    provider.sign_in.return_value = _account(True)
    provider.current_account.side_effect = auth.SessionExpiredError("expired")
    source.sign_in("jo@shop.test", "secret")

    assert source.refresh() == AuthSession.anonymous()

def test_refresh_keeps_session_on_transport_error(source, provider):
    provider.sign_in.return_value = _account(True)
    provider.current_account.side_effect = auth.IdentityProviderError("unreachable")
    source.sign_in("jo@shop.test", "secret")

    with pytest.raises(auth.IdentityProviderError):
        source.refresh()
    assert source.current.identity == IDENT

def test_refresh_without_credentials_is_noop(source, provider):
    source.start()
    assert source.refresh() == AuthSession.anonymous()
    provider.current_account.assert_not_called()

def test_verification_email_requires_sign_in(source):
    with pytest.raises(auth.InvalidCredentialsError):
        source.send_verification_email()

def test_unsubscribe(source, provider):
    seen = []
    unsubscribe = source.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    source.start()
    assert seen == []

def test_sign_out(source, provider):
    provider.sign_in.return_value = _account(True)
    source.sign_in("jo@shop.test", "secret")
    source.sign_out()
    assert source.current == AuthSession.anonymous()
    with pytest.raises(auth.InvalidCredentialsError):
        source.send_verification_email()
