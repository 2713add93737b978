import logging
import sqlite3
import time

import streamlit as st

import auth
from infrastructure.identity.session_source import SessionSource
from infrastructure.observability import set_user_context
from use_cases.role_resolver import RoleResolver
from use_cases.route_table import PUBLIC_ROOT, normalize_path
from use_cases.session_models import AuthSession, NavigationState

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

Keys of st.session_state owned by this module:

auth_session: AuthSession
    current session record, replaced wholesale on every change
    default: AuthSession.pending()
    owner: session_manager (written only from the session source callback)

auth_role: Role | None
    role resolved for auth_session; None means unresolved (deny-by-default)
    default: None
    owner: session_manager

auth_error: str | None
    blocking identity-provider error (session init failure)
    default: None
    owner: session_manager

session_source / role_resolver / session_unsubscribe
    per-browser-session collaborators, created once
    owner: session_manager

nav_path: str
    current storefront path (mirrors ?path= in the URL)
    default: query param or "/"
    owner: navigation

nav_state: NavigationState
    state attached to the last navigation (public-link opt-out)
    default: NavigationState()
    owner: navigation

nav_history: list[str]
    visited paths, replaced in place for replace=True navigations
    owner: navigation

redirect_key: tuple | None
    last (session, role, path, state) snapshot the landing redirect decided on
    default: None
    owner: navigation

verification_sent_at: float | None
    time of the last verification email request (resend cooldown)
    default: None
    owner: verification view
"""


def _initial_path():
    try:
        return st.query_params.get("path", PUBLIC_ROOT)
    except Exception:
        # Query params are unavailable outside a running script (tests, bare imports)
        return PUBLIC_ROOT


def init_session_state():
    if "auth_session" not in st.session_state:
        st.session_state.auth_session = AuthSession.pending()
    if "auth_role" not in st.session_state:
        st.session_state.auth_role = None
    if "auth_error" not in st.session_state:
        st.session_state.auth_error = None
    if "nav_path" not in st.session_state:
        st.session_state.nav_path = normalize_path(_initial_path())
    if "nav_state" not in st.session_state:
        st.session_state.nav_state = NavigationState()
    if "nav_history" not in st.session_state:
        st.session_state.nav_history = [st.session_state.nav_path]
    if "redirect_key" not in st.session_state:
        st.session_state.redirect_key = None
    if "verification_sent_at" not in st.session_state:
        st.session_state.verification_sent_at = None
    if "session_source" not in st.session_state:
        _wire_session_source()


def _wire_session_source():
    source = SessionSource(auth.get_identity_provider())
    st.session_state.role_resolver = RoleResolver(auth.fetch_role)
    st.session_state.session_source = source
    st.session_state.session_unsubscribe = source.subscribe(_on_session_change, _on_session_error)


def _on_session_change(session: AuthSession):
    if session.identity is not None:
        try:
            auth.ensure_profile(session.identity)
        except (auth.UserAlreadyExistsError, sqlite3.Error) as e:
            log.warning(f"Could not ensure profile for {session.identity.uid}: {e}")

    role = st.session_state.role_resolver.resolve(session)
    st.session_state.auth_session = session
    st.session_state.auth_role = role
    st.session_state.auth_error = None
    set_user_context(session.identity, role)
    log.info(
        f"Session changed: uid={session.uid} verified={session.email_verified} "
        f"role={role.value if role else None}"
    )


def _on_session_error(error: Exception):
    st.session_state.auth_error = str(error)
    auth.get_audit_repo().log_action(
        auth.AuditAction.SESSION_INIT_FAILED,
        target_type="session",
        metadata={"error_message": str(error)},
        result="error",
    )


def get_session_source() -> SessionSource:
    init_session_state()
    return st.session_state.session_source


def current_session() -> AuthSession:
    return st.session_state.get("auth_session") or AuthSession.pending()


def current_role():
    return st.session_state.get("auth_role")


def sign_in(email, password) -> AuthSession:
    try:
        session = get_session_source().sign_in(email, password)
    except auth.InvalidCredentialsError:
        auth.record_sign_in_failure(email, "invalid_credentials")
        raise
    auth.record_sign_in(session.identity)
    return session


def sign_up(email, password, display_name=None) -> AuthSession:
    account = get_session_source().sign_up(email, password, display_name)
    auth.record_sign_up(account.identity)
    st.session_state.verification_sent_at = time.time()
    return current_session()


def refresh_session() -> AuthSession:
    return get_session_source().refresh()


def send_verification_email():
    session = current_session()
    get_session_source().send_verification_email()
    st.session_state.verification_sent_at = time.time()
    auth.get_audit_repo().log_action(
        auth.AuditAction.VERIFICATION_EMAIL_SENT,
        target_type="session",
        actor_uid=session.uid,
    )


def send_password_reset(email):
    auth.get_identity_provider().send_password_reset(email)
    auth.get_audit_repo().log_action(
        auth.AuditAction.PASSWORD_RESET_SENT,
        target_type="session",
        metadata={"email_domain": auth.email_domain(email)},
    )


def logout():
    session = current_session()
    role = current_role()
    get_session_source().sign_out()
    auth.record_sign_out(session.identity, role)
    st.rerun()
