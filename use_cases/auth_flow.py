"""Authentication flow orchestration (application layer)."""

from dataclasses import dataclass
from typing import Literal, Optional

import auth
from utils import session_manager

AuthFlowStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    uid: Optional[str] = None


def sync_auth_state() -> AuthFlowResult:
    """Start the session source and report whether the page can proceed.

    Anonymous visitors continue: public pages render and the route guard decides
    about protected ones. Only a provider that cannot start stops the run.
    """
    session_manager.init_session_state()
    try:
        session_manager.get_session_source().start()
    except auth.SessionInitError:
        return AuthFlowResult(status="STOP", reason="session_init_failed")

    session = session_manager.current_session()
    if session.identity is None:
        return AuthFlowResult(status="CONTINUE", reason="anonymous")
    return AuthFlowResult(status="CONTINUE", reason="authenticated", uid=session.uid)
