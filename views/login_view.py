import streamlit as st

import auth
from utils import session_manager

MIN_PASSWORD_LENGTH = 6
RESET_SENT_MESSAGE = "If an account exists for this email, a reset link is on its way."

def validate_sign_up(email, password, password_confirm):
    """Return an error message for the sign-up form, or None when it can be submitted."""
    if not email.strip() or not password:
        return "Please fill in your email and password."
    if "@" not in email:
        return "Invalid email address format."
    if password != password_confirm:
        return "Passwords do not match."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password should be at least {MIN_PASSWORD_LENGTH} characters."
    return None

def render_auth_screen(params=None):
    st.title("🧁 Sign in to Cake Shop")
    tab_login, tab_register, tab_reset = st.tabs(["Sign in", "Create account", "Forgot password"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary")
            if submitted:
                try:
                    session_manager.sign_in(email, password)
                    # The landing redirect picks the destination on the next run.
                    st.rerun()
                except auth.InvalidCredentialsError as e:
                    st.error(str(e))
                except auth.IdentityProviderError as e:
                    st.error(str(e))

    with tab_register:
        with st.form("register_form", clear_on_submit=True):
            display_name = st.text_input("Name")
            email = st.text_input("Email *")
            password = st.text_input("Password *", type="password")
            password_confirm = st.text_input("Confirm password *", type="password")
            submitted = st.form_submit_button("Create account")
            if submitted:
                error = validate_sign_up(email, password, password_confirm)
                if error:
                    st.error(error)
                else:
                    try:
                        session_manager.sign_up(email, password, display_name.strip() or None)
                        st.success("Account created. Check your inbox to verify your email.")
                        st.rerun()
                    except auth.UserAlreadyExistsError:
                        st.error("An account with this email already exists.")
                    except (auth.InvalidCredentialsError, auth.IdentityProviderError) as e:
                        st.error(str(e))

    with tab_reset:
        with st.form("reset_form", clear_on_submit=True):
            email = st.text_input("Email")
            submitted = st.form_submit_button("Send reset link")
            if submitted:
                if not email.strip():
                    st.error("Please enter your email.")
                else:
                    try:
                        session_manager.send_password_reset(email)
                        st.success(RESET_SENT_MESSAGE)
                    except auth.InvalidCredentialsError:
                        # Unknown emails get the same answer as known ones.
                        st.success(RESET_SENT_MESSAGE)
                    except auth.IdentityProviderError as e:
                        st.error(str(e))
