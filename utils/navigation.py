"""Storefront navigation on top of st.session_state.

Streamlit has a single script per app, so the "router" is the ``nav_path`` key,
mirrored to ``?path=`` so links and reloads land on the same page.
"""

import logging
from typing import Optional

import streamlit as st

import auth
import ui
from use_cases.landing_redirect import LandingAction, LandingPlan, plan_landing
from use_cases.route_guard import GuardDecision, GuardState, evaluate_route
from use_cases.route_table import PUBLIC_ROOT, normalize_path
from use_cases.session_models import AuthSession, Location, NavigationState

log = logging.getLogger(__name__)

MAX_HISTORY = 50


class StreamlitNavigator:
    """Navigator backed by session state. ``replace`` overwrites the last history entry."""

    def navigate(self, path: str, replace: bool = False, from_public_link: bool = False):
        path = normalize_path(path)
        history = list(st.session_state.get("nav_history") or [])
        if replace and history:
            history[-1] = path
        else:
            history.append(path)
        st.session_state.nav_history = history[-MAX_HISTORY:]
        st.session_state.nav_path = path
        st.session_state.nav_state = NavigationState(from_public_link=from_public_link)

        try:
            st.query_params["path"] = path
        except Exception as e:
            log.debug(f"Could not mirror path to query params: {e}")

        log.info(f"Navigate -> {path} (replace={replace}, from_public_link={from_public_link})")
        st.rerun()


def current_location() -> Location:
    return Location(
        path=st.session_state.get("nav_path") or PUBLIC_ROOT,
        state=st.session_state.get("nav_state") or NavigationState(),
    )


def go_back(navigator: Optional[StreamlitNavigator] = None):
    history = list(st.session_state.get("nav_history") or [])
    if len(history) < 2:
        return
    history.pop()
    previous = history.pop()
    st.session_state.nav_history = history
    (navigator or StreamlitNavigator()).navigate(previous)


def apply_landing_redirect(
    session: AuthSession,
    role,
    location: Optional[Location] = None,
    navigator: Optional[StreamlitNavigator] = None,
) -> LandingPlan:
    """Run the landing decision once per (session, role, location) snapshot.

    WAIT blocks the page with a loading placeholder. A redirect replaces the
    current history entry so "back" does not bounce the visitor again.
    """
    location = location or current_location()
    plan = plan_landing(session, role, location.path, location.state)

    if plan.action is LandingAction.WAIT:
        ui.show_loading_overlay("Checking your session")
        st.stop()
        return plan

    key = (session, role, location.path, location.state)
    if st.session_state.get("redirect_key") == key:
        return plan
    st.session_state.redirect_key = key

    if plan.navigates:
        auth.get_audit_repo().log_action(
            auth.AuditAction.LANDING_REDIRECT,
            target_type="route",
            actor_uid=session.uid,
            actor_role=role.value if role is not None else None,
            metadata={"path": location.path, "target": plan.target, "reason": plan.reason},
            result="redirect",
        )
        (navigator or StreamlitNavigator()).navigate(plan.target, replace=plan.replace)
    return plan


def guard_current_route(
    session: AuthSession,
    role,
    location: Optional[Location] = None,
    navigator: Optional[StreamlitNavigator] = None,
) -> GuardDecision:
    """Gate the current page. Callers render content only when ``decision.allowed``."""
    location = location or current_location()
    decision = evaluate_route(session, role, location.path)

    if decision.state is GuardState.PENDING:
        ui.show_loading_overlay("Checking your session")
        st.stop()
        return decision

    if not decision.allowed:
        auth.get_audit_repo().log_action(
            auth.AuditAction.ROUTE_DENIED,
            target_type="route",
            actor_uid=session.uid,
            actor_role=role.value if role is not None else None,
            metadata={"path": location.path, "target": decision.redirect_to, "guard_state": decision.state.value},
            result="deny",
        )
        log.info(f"Route {location.path} denied ({decision.state.value}), redirecting to {decision.redirect_to}")
        (navigator or StreamlitNavigator()).navigate(decision.redirect_to, replace=True)
        st.stop()
    return decision
