"""Role resolution for the current session.

Each session change starts a new resolution and supersedes the previous one.
A role that arrives for a superseded resolution is dropped, so a slow lookup
for an earlier identity can never overwrite the role of the current one.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import auth
from use_cases.session_models import AuthSession, Role

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleTicket:
    generation: int
    uid: Optional[str]


class RoleResolver:
    def __init__(self, fetch_role: Callable[[str], Any]):
        self._fetch_role = fetch_role
        self._generation = 0
        self._uid: Optional[str] = None
        self._role: Optional[Role] = None

    @property
    def role(self) -> Optional[Role]:
        return self._role

    @property
    def uid(self) -> Optional[str]:
        return self._uid

    def begin(self, session: AuthSession) -> RoleTicket:
        self._generation += 1
        if session.uid != self._uid:
            self._role = None
        self._uid = session.uid
        return RoleTicket(generation=self._generation, uid=session.uid)

    def is_current(self, ticket: RoleTicket) -> bool:
        return ticket.generation == self._generation and ticket.uid == self._uid

    def fetch(self, ticket: RoleTicket) -> Optional[Role]:
        if ticket.uid is None:
            return None
        try:
            return Role.parse(self._fetch_role(ticket.uid))
        except auth.RoleFetchError as e:
            log.warning(f"Role lookup failed for {ticket.uid}, treating role as unresolved: {e}")
            auth.get_audit_repo().log_action(
                auth.AuditAction.ROLE_FETCH_FAILED,
                target_type="role",
                actor_uid=ticket.uid,
                metadata={"error_message": str(e)},
                result="error",
            )
            return None

    def complete(self, ticket: RoleTicket, role: Optional[Role]) -> bool:
        """Apply a fetched role; returns False when the ticket has been superseded."""
        if not self.is_current(ticket):
            log.info(
                f"Discarding stale role {role!r} for {ticket.uid} "
                f"(generation {ticket.generation}, current {self._generation})"
            )
            auth.get_audit_repo().log_action(
                auth.AuditAction.STALE_ROLE_DISCARDED,
                target_type="role",
                actor_uid=ticket.uid,
                actor_role=role.value if role else None,
                metadata={"reason": "superseded"},
                result="discarded",
            )
            return False
        self._role = role
        return True

    def resolve(self, session: AuthSession) -> Optional[Role]:
        ticket = self.begin(session)
        self.complete(ticket, self.fetch(ticket))
        return self._role
