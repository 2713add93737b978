"""Session source: turns identity-provider results into published session records."""

import logging
from typing import Callable, List, Optional, Tuple

import auth
from use_cases.session_models import AuthSession

log = logging.getLogger(__name__)

SessionListener = Callable[[AuthSession], None]
ErrorListener = Callable[[Exception], None]


class SessionSource:
    """Owns provider credentials and notifies subscribers of every session change.

    Subscribers only ever see whole ``AuthSession`` records. A record equal to the
    current one is not re-published.
    """

    def __init__(self, provider):
        self._provider = provider
        self._listeners: List[Tuple[SessionListener, Optional[ErrorListener]]] = []
        self._session = AuthSession.pending()
        self._credentials = None
        self._started = False

    @property
    def current(self) -> AuthSession:
        return self._session

    @property
    def started(self) -> bool:
        return self._started

    def subscribe(self, on_change: SessionListener, on_error: Optional[ErrorListener] = None) -> Callable[[], None]:
        entry = (on_change, on_error)
        self._listeners.append(entry)

        def unsubscribe():
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def _publish(self, session: AuthSession):
        if session == self._session:
            return
        self._session = session
        for on_change, _ in list(self._listeners):
            on_change(session)

    def _fail(self, error: Exception):
        for _, on_error in list(self._listeners):
            if on_error is not None:
                on_error(error)

    def _apply_account(self, account):
        self._credentials = account.credentials
        self._publish(AuthSession.signed_in(account.identity, account.email_verified))

    def start(self):
        """Resolve the initial session. Raises SessionInitError when the provider cannot start."""
        if self._started:
            return
        try:
            self._provider.ensure_configured()
        except auth.SessionInitError as e:
            log.error(f"Session source failed to initialise: {e}")
            self._fail(e)
            raise
        self._started = True
        self._publish(AuthSession.anonymous())

    def sign_in(self, email: str, password: str) -> AuthSession:
        account = self._provider.sign_in(email, password)
        self._apply_account(account)
        return self._session

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None):
        account = self._provider.sign_up(email, password, display_name)
        self._apply_account(account)
        return account

    def refresh(self) -> AuthSession:
        """Re-read the signed-in account.

        An account the provider no longer accepts signs out. Transport failures propagate
        and leave the current session untouched.
        """
        if self._credentials is None:
            return self._session
        try:
            account = self._provider.current_account(self._credentials)
        except (auth.InvalidCredentialsError, auth.SessionExpiredError) as e:
            log.warning(f"Session refresh rejected, signing out: {e}")
            self.sign_out()
            return self._session
        self._apply_account(account)
        return self._session

    def send_verification_email(self):
        if self._credentials is None:
            raise auth.InvalidCredentialsError("Sign in to request a verification email.")
        self._provider.send_verification_email(self._credentials)

    def sign_out(self):
        self._credentials = None
        self._publish(AuthSession.anonymous())
