import streamlit as st
import streamlit.components.v1 as components
import os

from infrastructure.observability import setup_observability
setup_observability()

import ui
from use_cases import auth_flow, bootstrap
from use_cases.route_table import match_route
from utils import navigation, session_manager
from views import account_view, admin_view, baker_view, login_view, storefront_view, verification_view
from datetime import datetime

# --- PAGE SETTINGS ---
st.set_page_config(page_title="Cake Shop", page_icon="🎂", layout="wide", initial_sidebar_state="expanded")

# --- PROD HARDENING ---
FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "uptime": datetime.utcnow().isoformat()})
    st.stop()

if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        # Streamlit cannot issue a 301 mid-script; halt and let the proxy redirect.
        st.error("🚨 Insecure connection. Please use HTTPS.")
        st.stop()

components.html(
    """
    <script>
    var meta1 = document.createElement('meta');
    meta1.httpEquiv = "X-Content-Type-Options";
    meta1.content = "nosniff";
    document.getElementsByTagName('head')[0].appendChild(meta1);

    var meta2 = document.createElement('meta');
    meta2.name = "referrer";
    meta2.content = "no-referrer";
    document.getElementsByTagName('head')[0].appendChild(meta2);
    </script>
    """,
    height=0,
)

ui.setup_style()

# Page key -> renderer(params). Portal pages share one renderer per portal.
PAGES = {
    "home": storefront_view.render_home,
    "about": storefront_view.render_about,
    "products": storefront_view.render_catalogue,
    "cakes": storefront_view.render_catalogue,
    "product_detail": storefront_view.render_cake_detail,
    "cake_detail": storefront_view.render_cake_detail,
    "cake_customize": storefront_view.render_customize,
    "contact": storefront_view.render_contact,
    "custom_design": storefront_view.render_custom_design,
    "cart": storefront_view.render_cart,
    "checkout": storefront_view.render_checkout,
    "order_detail": storefront_view.render_order_detail,
    "auth": login_view.render_auth_screen,
    "account": account_view.render_account,
    "email_verification": verification_view.render_verification_page,
}

def render_page(path):
    match = match_route(path)
    if match is None:
        storefront_view.render_not_found()
        return
    page = match.route.page
    if page.startswith("baker_"):
        baker_view.render_baker_portal(page, match.params)
    elif page.startswith("admin_"):
        admin_view.render_admin_portal(page, match.params)
    else:
        PAGES[page](match.params)

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.stop()

# --- SESSION ---
auth_result = auth_flow.sync_auth_state()
if auth_result.status == "STOP":
    # No session can be established, so no guarded page may render.
    st.error("Sign-in is unavailable right now. Please try again later.")
    st.caption(st.session_state.get("auth_error") or auth_result.reason)
    st.stop()

session = session_manager.current_session()
role = session_manager.current_role()
location = navigation.current_location()

# --- ROUTING ---
navigation.apply_landing_redirect(session, role, location)
decision = navigation.guard_current_route(session, role, location)

storefront_view.render_navbar()

# st.stop() does not halt bare/headless runs, so rendering is gated on the decision.
if auth_result.status == "CONTINUE" and decision.allowed:
    render_page(location.path)
