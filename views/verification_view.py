import logging
import time

import streamlit as st

import auth
from use_cases.route_table import AUTH_PATH
from utils import session_manager
from utils.navigation import StreamlitNavigator

log = logging.getLogger(__name__)

RESEND_COOLDOWN_SECONDS = 60
STATUS_CHECK_SECONDS = 30

def seconds_until_resend(sent_at, now=None):
    if sent_at is None:
        return 0
    now = time.time() if now is None else now
    return max(0, int(RESEND_COOLDOWN_SECONDS - (now - sent_at)))

def _check_verified():
    try:
        session = session_manager.refresh_session()
    except auth.IdentityProviderError as e:
        log.warning(f"Verification status check failed: {e}")
        return False
    return session.email_verified

@st.fragment(run_every=STATUS_CHECK_SECONDS)
def _verification_status():
    # Runs on its own every STATUS_CHECK_SECONDS; a verified account reruns the whole app
    # so the landing redirect can move the visitor on.
    if _check_verified():
        st.rerun()
    st.caption(f"We check your verification status every {STATUS_CHECK_SECONDS} seconds.")

def render_verification_page(params=None):
    st.title("📬 Verify your email")
    session = session_manager.current_session()

    if session.identity is None:
        st.info("Sign in to verify your email address.")
        if st.button("Go to sign in", type="primary"):
            StreamlitNavigator().navigate(AUTH_PATH)
        return

    st.write(
        f"We sent a verification link to **{session.identity.email}**. "
        "Open it to finish setting up your account."
    )

    wait = seconds_until_resend(st.session_state.get("verification_sent_at"))
    c1, c2, c3 = st.columns(3)
    with c1:
        label = f"Resend email ({wait}s)" if wait else "Resend email"
        if st.button(label, disabled=wait > 0, use_container_width=True):
            try:
                session_manager.send_verification_email()
                st.success("Verification email sent.")
            except auth.InvalidCredentialsError as e:
                st.error(str(e))
            except auth.IdentityProviderError as e:
                st.error(str(e))
    with c2:
        if st.button("I've verified", type="primary", use_container_width=True):
            if _check_verified():
                st.rerun()
            else:
                st.warning("Your email is not verified yet.")
    with c3:
        if st.button("Sign out", use_container_width=True):
            session_manager.logout()

    _verification_status()
