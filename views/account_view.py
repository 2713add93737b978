import streamlit as st

import auth
import ui
from utils import session_manager

def render_account(params=None):
    st.title("👤 My account")
    session = session_manager.current_session()
    if session.identity is None:
        return

    ui.render_profile_card(session.identity, session_manager.current_role(), session.email_verified)

    profile = auth.get_profile(session.identity.uid)
    if profile:
        st.caption(f"Customer since {profile['created_at'][:10]}")

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Refresh account", use_container_width=True):
            try:
                session_manager.refresh_session()
                st.rerun()
            except auth.IdentityProviderError as e:
                st.error(str(e))
    with c2:
        if st.button("Sign out", type="secondary", use_container_width=True):
            session_manager.logout()
