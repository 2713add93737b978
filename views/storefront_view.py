"""Public storefront pages. Catalogue data is a static sample; ordering is out of scope."""

import streamlit as st

import ui
from use_cases.rbac_policy import is_allowed
from use_cases.route_table import (
    ACCOUNT_ROOT,
    ADMIN_PORTAL,
    AUTH_PATH,
    BAKER_PORTAL,
    PUBLIC_ROOT,
)
from use_cases.session_models import Role
from utils import session_manager
from utils.navigation import StreamlitNavigator

SAMPLE_CAKES = (
    {"id": "red-velvet", "name": "Red Velvet", "price": 42.0, "description": "Cocoa sponge, cream cheese frosting."},
    {"id": "lemon-drizzle", "name": "Lemon Drizzle", "price": 35.0, "description": "Zesty loaf with a crackly glaze."},
    {"id": "black-forest", "name": "Black Forest", "price": 48.0, "description": "Chocolate, cherries and whipped cream."},
    {"id": "carrot", "name": "Carrot Cake", "price": 38.0, "description": "Spiced, with walnuts and orange frosting."},
)

# Storefront links are "public links": following one never triggers the landing redirect.
NAV_LINKS = (
    ("Home", PUBLIC_ROOT),
    ("Cakes", "/cakes"),
    ("Custom design", "/request-custom-design"),
    ("About", "/about"),
    ("Contact", "/contact"),
    ("Cart", "/cart"),
)

def find_cake(cake_id):
    for cake in SAMPLE_CAKES:
        if cake["id"] == cake_id:
            return cake
    return None

def _cart():
    if "cart_items" not in st.session_state:
        st.session_state.cart_items = []
    return st.session_state.cart_items

def portal_link_for(role):
    """Dashboard entry shown in the navbar for the resolved role."""
    if is_allowed(role, Role.ADMIN):
        return "Admin panel", ADMIN_PORTAL
    if is_allowed(role, Role.BAKER):
        return "Baker dashboard", BAKER_PORTAL
    return "My account", ACCOUNT_ROOT

def render_navbar():
    navigator = StreamlitNavigator()
    session = session_manager.current_session()
    with st.sidebar:
        st.markdown("### 🎂 Cake Shop")
        for label, path in NAV_LINKS:
            if st.button(label, key=f"nav_{path}", use_container_width=True):
                navigator.navigate(path, from_public_link=True)
        st.divider()
        if session.identity is None:
            if st.button("Sign in", key="nav_auth", type="primary", use_container_width=True):
                navigator.navigate(AUTH_PATH, from_public_link=True)
        else:
            label, path = portal_link_for(session_manager.current_role())
            st.caption(session.identity.email or session.identity.uid)
            if st.button(label, key="nav_portal", use_container_width=True):
                navigator.navigate(path)
            if st.button("Sign out", key="logout_btn", type="secondary", use_container_width=True):
                session_manager.logout()

def _cake_card(cake, key_prefix):
    st.markdown(
        f'<div class="cs-card"><div class="cs-card-title">{cake["name"]}</div>'
        f'<div class="cs-card-sub">{cake["description"]}</div></div>',
        unsafe_allow_html=True,
    )
    c1, c2 = st.columns(2)
    if c1.button("Details", key=f"{key_prefix}_detail_{cake['id']}", use_container_width=True):
        StreamlitNavigator().navigate(f"/cakes/{cake['id']}", from_public_link=True)
    if c2.button(f"Add · ${cake['price']:.0f}", key=f"{key_prefix}_add_{cake['id']}", use_container_width=True):
        _cart().append({"cake_id": cake["id"], "name": cake["name"], "price": cake["price"]})
        st.toast(f"{cake['name']} added to your cart")

def render_home(params=None):
    st.title("Fresh cakes, baked to order")
    st.write("Pick a favourite from our bakers or request a design of your own.")
    cols = st.columns(2)
    for i, cake in enumerate(SAMPLE_CAKES[:2]):
        with cols[i]:
            _cake_card(cake, "home")
    ui.render_footer()

def render_about(params=None):
    st.title("About us")
    st.write("Independent bakers, one storefront. Every cake is made after you order it.")

def render_contact(params=None):
    st.title("Contact")
    st.write("Questions about an order? Write to us and a baker will get back to you.")

def render_catalogue(params=None):
    st.title("Our cakes")
    cols = st.columns(2)
    for i, cake in enumerate(SAMPLE_CAKES):
        with cols[i % 2]:
            _cake_card(cake, "catalogue")

def render_cake_detail(params=None):
    cake = find_cake((params or {}).get("cake_id"))
    if cake is None:
        render_not_found(params)
        return
    st.title(cake["name"])
    st.write(cake["description"])
    st.metric("Price", f"${cake['price']:.2f}")
    if st.button("Customize", type="primary"):
        StreamlitNavigator().navigate(f"/products/customize/{cake['id']}", from_public_link=True)

def render_customize(params=None):
    st.title("Customize your cake")
    st.text_input("Message on the cake", max_chars=40)
    st.selectbox("Size", ["6 inch", "8 inch", "10 inch"])
    st.caption("Customisation is confirmed by your baker after checkout.")

def render_custom_design(params=None):
    st.title("Request a custom design")
    with st.form("custom_design_form"):
        st.text_area("Describe your dream cake")
        st.date_input("Needed by")
        if st.form_submit_button("Send request"):
            st.success("Thanks! A baker will review your request.")

def render_cart(params=None):
    st.title("🛒 Your cart")
    items = _cart()
    if not items:
        st.info("Your cart is empty.")
        return
    for index, item in enumerate(items):
        c1, c2 = st.columns([4, 1])
        c1.write(f"{item['name']} · ${item['price']:.2f}")
        if c2.button("Remove", key=f"cart_remove_{index}"):
            items.pop(index)
            st.rerun()
    st.metric("Total", f"${sum(item['price'] for item in items):.2f}")
    if st.button("Checkout", type="primary"):
        StreamlitNavigator().navigate("/checkout", from_public_link=True)

def render_checkout(params=None):
    st.title("Checkout")
    items = _cart()
    if not items:
        st.info("Nothing to check out yet.")
        return
    st.write(f"{len(items)} item(s), total ${sum(item['price'] for item in items):.2f}")
    st.caption("Payment is handled by our payment partner.")

def render_order_detail(params=None):
    order_id = (params or {}).get("order_id")
    st.title(f"Order {order_id}")
    st.info("Order tracking will appear here once your baker accepts the order.")

def render_not_found(params=None):
    st.title("Page not found")
    st.write("We could not find that page.")
    if st.button("Back to the shop"):
        StreamlitNavigator().navigate(PUBLIC_ROOT, from_public_link=True)
