import streamlit as st

from use_cases import rbac_policy
from use_cases.route_table import BAKER_PORTAL
from utils import session_manager
from utils.navigation import StreamlitNavigator

PORTAL_SECTIONS = (
    ("🏠 Dashboard", BAKER_PORTAL),
    ("📥 Available orders", f"{BAKER_PORTAL}/available-orders"),
    ("🧁 My active orders", f"{BAKER_PORTAL}/my-active-orders"),
    ("📜 Order history", f"{BAKER_PORTAL}/order-history"),
    ("🎂 My cakes", f"{BAKER_PORTAL}/manage-my-cakes"),
    ("🗓 Profile & availability", f"{BAKER_PORTAL}/profile-availability"),
)

ORDER_PAGES = {"baker_available_orders", "baker_active_orders", "baker_order_history", "baker_order_management"}
CAKE_PAGES = {"baker_cakes", "baker_cake_form"}

def _render_portal_nav():
    navigator = StreamlitNavigator()
    with st.sidebar:
        st.markdown("### Baker portal")
        for label, path in PORTAL_SECTIONS:
            if st.button(label, key=f"baker_nav_{path}", use_container_width=True):
                navigator.navigate(path)

def _feature_for(page):
    if page in ORDER_PAGES:
        return rbac_policy.Feature.ORDER_MANAGEMENT
    if page in CAKE_PAGES:
        return rbac_policy.Feature.PRODUCT_MANAGEMENT
    return rbac_policy.Feature.PROFILE_EDIT

def render_baker_portal(page, params=None):
    params = params or {}
    session = session_manager.current_session()
    role = session_manager.current_role()
    _render_portal_nav()

    if not rbac_policy.enforce(session.identity, role, _feature_for(page)):
        st.error("You do not have access to this section.")
        return

    if page == "baker_dashboard":
        st.title("🧑‍🍳 Baker dashboard")
        st.write("Pick a section from the sidebar to manage orders and cakes.")
    elif page == "baker_available_orders":
        st.title("Available orders")
        st.info("No open orders right now.")
    elif page == "baker_active_orders":
        st.title("My active orders")
        st.info("You have no orders in progress.")
    elif page == "baker_order_history":
        st.title("Order history")
        st.info("Completed orders will show up here.")
    elif page == "baker_order_management":
        st.title(f"Order {params.get('order_id')}")
        st.selectbox("Status", ["accepted", "baking", "ready", "delivered"])
    elif page == "baker_cakes":
        st.title("My cakes")
        if st.button("➕ New cake", type="primary"):
            StreamlitNavigator().navigate(f"{BAKER_PORTAL}/manage-my-cakes/new")
    elif page == "baker_cake_form":
        cake_id = params.get("cake_id")
        st.title(f"Edit {cake_id}" if cake_id else "New cake")
        with st.form("baker_cake_form"):
            st.text_input("Name")
            st.number_input("Price", min_value=0.0, step=1.0)
            st.text_area("Description")
            if st.form_submit_button("Save"):
                st.success("Saved.")
    elif page == "baker_profile":
        st.title("Profile & availability")
        st.toggle("Accepting new orders", value=True)
