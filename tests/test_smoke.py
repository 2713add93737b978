import sys
import importlib
from unittest.mock import MagicMock, patch
import streamlit as st  # noqa: TID251
from use_cases.auth_flow import AuthFlowResult
from use_cases.bootstrap import StartupResult
from use_cases.session_models import AuthSession, NavigationState

def test_imports():
    """Ensure core modules can be imported without crashing."""
    import auth  # noqa: F401
    import ui  # noqa: F401
    import manage_roles  # noqa: F401
    import views.login_view  # noqa: F401
    import views.verification_view  # noqa: F401
    import views.storefront_view  # noqa: F401
    import views.account_view  # noqa: F401
    import views.baker_view  # noqa: F401
    import views.admin_view  # noqa: F401
    import infrastructure.identity.firebase_identity  # noqa: F401

def test_app_renders_public_page_headless():
    st.session_state.clear()
    st.session_state.auth_session = AuthSession.anonymous()
    st.session_state.auth_role = None
    st.session_state.nav_path = "/cakes"
    st.session_state.nav_state = NavigationState()
    st.session_state.nav_history = ["/cakes"]
    st.session_state.redirect_key = None

    if "app" in sys.modules:
        del sys.modules["app"]

    with patch("use_cases.bootstrap.run_startup", return_value=StartupResult("CONTINUE", ())), patch(
        "use_cases.auth_flow.sync_auth_state", return_value=AuthFlowResult("CONTINUE", "anonymous")
    ), patch("auth.get_audit_repo", return_value=MagicMock()), patch(
        "views.storefront_view.render_catalogue"
    ) as mock_catalogue:
        importlib.import_module("app")

    mock_catalogue.assert_called_once_with({})
    st.session_state.clear()
