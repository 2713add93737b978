"""Startup orchestration: databases, admin bootstrap and session wiring."""

from dataclasses import dataclass
from typing import Literal, Tuple

import auth
from utils import session_manager

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Run startup side-effects in order and report what was executed."""
    executed_steps = []

    auth.configure_storage()
    executed_steps.append("configure_storage")
    auth.init_profile_db()
    executed_steps.append("init_profile_db")
    auth.init_audit_db()
    executed_steps.append("init_audit_db")

    auth.bootstrap_admin()
    executed_steps.append("bootstrap_admin")

    # Wires the session source and role resolver once per browser session.
    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
