import json

import streamlit as st

import auth
import ui
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases import rbac_policy
from use_cases.route_table import ADMIN_PORTAL
from use_cases.session_models import Role
from utils import session_manager
from utils.navigation import StreamlitNavigator

PORTAL_SECTIONS = (
    ("🏠 Dashboard", ADMIN_PORTAL),
    ("👥 User management", f"{ADMIN_PORTAL}/user-management"),
    ("⚙️ Profile settings", f"{ADMIN_PORTAL}/profile-settings"),
)

ROLE_CHOICES = [role.value for role in Role]

def _render_portal_nav():
    navigator = StreamlitNavigator()
    with st.sidebar:
        st.markdown("### Admin panel")
        for label, path in PORTAL_SECTIONS:
            if st.button(label, key=f"admin_nav_{path}", use_container_width=True):
                navigator.navigate(path)

def _profile_rows(profiles):
    return [
        {"uid": uid, "Email": email, "Name": display_name or "", "Role": role, "Created": (created_at or "")[:10]}
        for uid, email, display_name, role, created_at in profiles
    ]

def _render_user_list(identity, role):
    st.title("👥 User management")
    role_filter = st.selectbox("Role", ["All"] + ROLE_CHOICES)
    profiles = auth.list_profiles(None if role_filter == "All" else role_filter)
    if not profiles:
        st.info("No profiles yet.")
        return

    st.dataframe(_profile_rows(profiles), use_container_width=True, hide_index=True)

    st.subheader("Change a role")
    for uid, email, display_name, current, _created in profiles:
        c1, c2, c3 = st.columns([3, 1.2, 1])
        c1.markdown(f"**{display_name or email}**  \n{email}")
        if c1.button("Edit", key=f"edit_{uid}"):
            StreamlitNavigator().navigate(f"{ADMIN_PORTAL}/users/{uid}/edit")
        new_role = c2.selectbox(
            "Role",
            ROLE_CHOICES,
            index=ROLE_CHOICES.index(current) if current in ROLE_CHOICES else ROLE_CHOICES.index(Role.USER.value),
            key=f"role_{uid}",
            label_visibility="collapsed",
        )
        with c3:
            if st.button("💾 Save", key=f"save_role_{uid}", use_container_width=True, disabled=new_role == current):
                if uid == identity.uid and new_role != Role.ADMIN.value:
                    st.error("You cannot remove your own admin role.")
                elif auth.update_user_role(identity, role, uid, new_role):
                    st.success(f"{email} is now {new_role}.")
                    st.rerun()
                else:
                    st.error("Role update failed.")

def _render_user_edit(identity, role, user_id):
    profile = auth.get_profile(user_id)
    if profile is None:
        st.warning("No such user.")
        return
    st.title(f"Edit {profile['display_name'] or profile['email']}")
    st.caption(profile["email"])
    current = profile["role"]
    new_role = st.selectbox(
        "Role",
        ROLE_CHOICES,
        index=ROLE_CHOICES.index(current) if current in ROLE_CHOICES else 0,
    )
    c1, c2 = st.columns(2)
    with c1:
        if st.button("💾 Save role", type="primary", use_container_width=True, disabled=new_role == current):
            if auth.update_user_role(identity, role, user_id, new_role):
                st.success("Role updated.")
                st.rerun()
    with c2:
        if st.button("🗑 Delete profile", use_container_width=True, disabled=user_id == identity.uid):
            if auth.delete_profile(identity, role, user_id):
                StreamlitNavigator().navigate(f"{ADMIN_PORTAL}/user-management", replace=True)

def _format_details(meta):
    if not meta:
        return ""
    try:
        details = json.loads(meta)
    except ValueError:
        return meta
    if not isinstance(details, dict):
        return str(details)
    return ", ".join(f"{k}={v}" for k, v in details.items())

def _render_audit_log():
    st.subheader("🧾 Audit log")
    c1, c2 = st.columns(2)
    action_filter = c1.selectbox("Action", ["All"] + [a.value for a in AuditAction])
    uid_filter = c2.text_input("Actor uid contains")
    logs = auth.get_audit_repo().get_logs(limit=200, action_filter=action_filter, uid_filter=uid_filter or None)
    if not logs:
        st.info("No audit records.")
        return
    rows = []
    for _id, ts, actor, actor_role, action, target_type, target_id, meta, _ip, result in logs:
        rows.append({
            "Time": ts,
            "Actor": actor,
            "Role": actor_role or "",
            "Action": action,
            "Target": f"{target_type}:{target_id}" if target_id else target_type,
            "Details": _format_details(meta),
            "Result": result,
        })
    st.dataframe(rows, use_container_width=True, hide_index=True)

def render_admin_portal(page, params=None):
    params = params or {}
    session = session_manager.current_session()
    role = session_manager.current_role()
    _render_portal_nav()

    if page == "admin_profile":
        st.title("⚙️ Profile settings")
        ui.render_profile_card(session.identity, role, session.email_verified)
        return

    if not rbac_policy.enforce(session.identity, role, rbac_policy.Feature.USER_MANAGEMENT):
        st.error("You do not have access to this section.")
        return

    if page == "admin_dashboard":
        st.title("🛠 Admin panel")
        counts = {r: len(auth.list_profiles(r)) for r in ROLE_CHOICES}
        cols = st.columns(len(counts))
        for col, (r, n) in zip(cols, counts.items()):
            col.metric(r.capitalize(), n)
        if rbac_policy.has_access(role, rbac_policy.Feature.ANALYTICS):
            _render_audit_log()
    elif page == "admin_users":
        _render_user_list(session.identity, role)
    elif page == "admin_user_edit":
        _render_user_edit(session.identity, role, params.get("user_id"))
    elif page == "admin_user_create":
        st.title("Create user")
        st.info(
            "Accounts are created by signing up with the identity provider. "
            "Once the person has signed in, assign their role from User management."
        )
