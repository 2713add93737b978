"""Firebase Authentication over its REST API.

The storefront never stores passwords: sign-in, sign-up, email verification and
password reset all go to the managed identity provider. Tokens returned here
are kept by the session source and never copied into session records.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

import auth
from use_cases.session_models import Identity

log = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"

ERROR_MESSAGES = {
    "INVALID_EMAIL": "Invalid email address format.",
    "MISSING_PASSWORD": "Please enter your password.",
    "USER_DISABLED": "Your account has been disabled.",
    "EMAIL_NOT_FOUND": "No user found with this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid credentials. Please check your email and password.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many sign-in attempts. Try again later.",
    "EMAIL_EXISTS": "An account with this email already exists.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "OPERATION_NOT_ALLOWED": "Email sign-in is disabled for this store.",
    "TOKEN_EXPIRED": "Your session has expired. Please sign in again.",
    "INVALID_ID_TOKEN": "Your session has expired. Please sign in again.",
    "USER_NOT_FOUND": "This account no longer exists.",
    "INVALID_REFRESH_TOKEN": "Your session has expired. Please sign in again.",
}

CREDENTIAL_ERRORS = {
    "INVALID_EMAIL", "MISSING_PASSWORD", "USER_DISABLED", "EMAIL_NOT_FOUND",
    "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS", "TOO_MANY_ATTEMPTS_TRY_LATER",
    "WEAK_PASSWORD",
}

EXPIRED_TOKEN_ERRORS = {"TOKEN_EXPIRED", "INVALID_ID_TOKEN"}

SESSION_ENDED_ERRORS = EXPIRED_TOKEN_ERRORS | {"USER_NOT_FOUND", "INVALID_REFRESH_TOKEN"}


@dataclass(frozen=True)
class ProviderCredentials:
    uid: str
    id_token: str
    refresh_token: str


@dataclass(frozen=True)
class ProviderAccount:
    identity: Identity
    email_verified: bool
    credentials: ProviderCredentials


class ProviderRejection(Exception):
    """The provider answered with an error code (e.g. EMAIL_EXISTS)."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code

    @property
    def message(self) -> str:
        return ERROR_MESSAGES.get(self.code, f"Authentication failed ({self.code}).")


def _error_code(resp) -> str:
    try:
        message = resp.json().get("error", {}).get("message", "")
    except ValueError:
        message = ""
    # Codes may carry a suffix: "WEAK_PASSWORD : Password should be at least 6 characters"
    code = str(message).split(":", 1)[0].strip()
    return code or f"HTTP_{resp.status_code}"


def _require(data, *keys) -> Tuple[Any, ...]:
    try:
        return tuple(data[key] for key in keys)
    except (KeyError, TypeError) as e:
        log.error(f"Identity provider reply is missing {e}")
        raise auth.IdentityProviderError("Identity provider sent an incomplete response.") from e


def _translate(rejection: ProviderRejection) -> Exception:
    if rejection.code == "EMAIL_EXISTS":
        return auth.UserAlreadyExistsError(rejection.message)
    if rejection.code in CREDENTIAL_ERRORS:
        return auth.InvalidCredentialsError(rejection.message)
    if rejection.code in SESSION_ENDED_ERRORS:
        return auth.SessionExpiredError(rejection.message)
    return auth.IdentityProviderError(rejection.message)


class FirebaseIdentityProvider:
    def __init__(self, api_key: Optional[str], timeout: int = 10):
        self.api_key = api_key
        self.timeout = timeout

    def ensure_configured(self):
        if not self.api_key:
            raise auth.SessionInitError("FIREBASE_API_KEY is not configured; identity provider unavailable.")

    def _post(self, url: str, payload: Dict[str, Any], form: bool = False) -> Dict[str, Any]:
        self.ensure_configured()
        try:
            if form:
                resp = requests.post(url, params={"key": self.api_key}, data=payload, timeout=self.timeout)
            else:
                resp = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.error(f"Identity provider unreachable: {e}")
            raise auth.IdentityProviderError("Identity provider is unreachable. Please try again.") from e

        if resp.status_code == 200:
            try:
                return resp.json()
            except ValueError as e:
                log.error(f"Identity provider sent a non-JSON reply: {e}")
                raise auth.IdentityProviderError("Identity provider sent an unreadable response.") from e
        code = _error_code(resp)
        log.warning(f"Identity provider rejected {url.rsplit('/', 1)[-1]}: {code}")
        raise ProviderRejection(code)

    def _accounts(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"{IDENTITY_TOOLKIT_URL}/accounts:{method}", payload)

    def sign_in(self, email: str, password: str) -> ProviderAccount:
        try:
            data = self._accounts("signInWithPassword", {
                "email": email.strip(),
                "password": password,
                "returnSecureToken": True,
            })
            credentials = ProviderCredentials(*_require(data, "localId", "idToken", "refreshToken"))
            identity, verified = self._lookup(credentials.id_token)
        except ProviderRejection as rejection:
            raise _translate(rejection) from None
        return ProviderAccount(identity, verified, credentials)

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> ProviderAccount:
        try:
            data = self._accounts("signUp", {
                "email": email.strip(),
                "password": password,
                "returnSecureToken": True,
            })
            credentials = ProviderCredentials(*_require(data, "localId", "idToken", "refreshToken"))
            if display_name:
                self._accounts("update", {
                    "idToken": credentials.id_token,
                    "displayName": display_name,
                    "returnSecureToken": False,
                })
            self._accounts("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": credentials.id_token})
        except ProviderRejection as rejection:
            raise _translate(rejection) from None
        identity = Identity(uid=credentials.uid, email=email.strip(), display_name=display_name)
        return ProviderAccount(identity, False, credentials)

    def _lookup(self, id_token: str) -> Tuple[Identity, bool]:
        data = self._accounts("lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise ProviderRejection("USER_NOT_FOUND")
        user = users[0]
        identity = Identity(
            uid=_require(user, "localId")[0],
            email=user.get("email"),
            display_name=user.get("displayName"),
        )
        return identity, bool(user.get("emailVerified", False))

    def refresh_credentials(self, credentials: ProviderCredentials) -> ProviderCredentials:
        try:
            data = self._post(
                SECURE_TOKEN_URL,
                {"grant_type": "refresh_token", "refresh_token": credentials.refresh_token},
                form=True,
            )
        except ProviderRejection as rejection:
            raise _translate(rejection) from None
        return ProviderCredentials(
            uid=data.get("user_id", credentials.uid),
            id_token=_require(data, "id_token")[0],
            refresh_token=data.get("refresh_token", credentials.refresh_token),
        )

    def current_account(self, credentials: ProviderCredentials) -> ProviderAccount:
        """Re-read the account (e.g. after the user clicked the verification link)."""
        try:
            identity, verified = self._lookup(credentials.id_token)
            return ProviderAccount(identity, verified, credentials)
        except ProviderRejection as rejection:
            if rejection.code not in EXPIRED_TOKEN_ERRORS:
                raise _translate(rejection) from None
        log.info(f"ID token expired for {credentials.uid}, refreshing")
        fresh = self.refresh_credentials(credentials)
        try:
            identity, verified = self._lookup(fresh.id_token)
        except ProviderRejection as rejection:
            raise _translate(rejection) from None
        return ProviderAccount(identity, verified, fresh)

    def send_verification_email(self, credentials: ProviderCredentials):
        try:
            self._accounts("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": credentials.id_token})
        except ProviderRejection as rejection:
            raise _translate(rejection) from None

    def send_password_reset(self, email: str):
        try:
            self._accounts("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email.strip()})
        except ProviderRejection as rejection:
            raise _translate(rejection) from None
