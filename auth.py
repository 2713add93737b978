from infrastructure.repositories.sqlite_audit_repository import AuditAction, SQLiteAuditRepository
from infrastructure.repositories.sqlite_profile_repository import SQLiteProfileRepository
from use_cases.session_models import Identity, Role
from typing import Optional
from datetime import datetime
import logging
import sqlite3
import os
import streamlit as st

log = logging.getLogger(__name__)

class InvalidCredentialsError(Exception):
    pass

class UserAlreadyExistsError(Exception):
    pass

class IdentityProviderError(Exception):
    pass

class SessionExpiredError(IdentityProviderError):
    pass

class SessionInitError(Exception):
    pass

class RoleFetchError(Exception):
    pass

PROFILES_DB = "profiles.db"
AUDIT_DB = "audit.db"

def get_secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None

def get_setting(key, default=None):
    value = get_secret(key) or os.getenv(key)
    if value is None or value == "":
        return default
    return value

_profile_repo = None
_audit_repo = None
_identity_provider = None

def get_profile_repo() -> SQLiteProfileRepository:
    global _profile_repo
    if _profile_repo is None or _profile_repo.db_path != PROFILES_DB:
        _profile_repo = SQLiteProfileRepository(PROFILES_DB)
    return _profile_repo

def get_audit_repo() -> SQLiteAuditRepository:
    global _audit_repo
    if _audit_repo is None or _audit_repo.db_path != AUDIT_DB:
        _audit_repo = SQLiteAuditRepository(AUDIT_DB)
    return _audit_repo

def get_identity_provider():
    from infrastructure.identity.firebase_identity import FirebaseIdentityProvider

    global _identity_provider
    api_key = get_setting("FIREBASE_API_KEY")
    if _identity_provider is None or _identity_provider.api_key != api_key:
        timeout = int(get_setting("IDENTITY_TIMEOUT_SECONDS", 10))
        _identity_provider = FirebaseIdentityProvider(api_key, timeout=timeout)
    return _identity_provider

def configure_storage():
    """Point the repositories at PROFILES_DB / AUDIT_DB from secrets or env, if set."""
    global PROFILES_DB, AUDIT_DB
    PROFILES_DB = get_setting("PROFILES_DB", PROFILES_DB)
    AUDIT_DB = get_setting("AUDIT_DB", AUDIT_DB)

def init_profile_db():
    get_profile_repo().init_profile_db()

def init_audit_db():
    get_audit_repo().init_audit_db()

def _now_iso():
    return datetime.utcnow().isoformat()

def email_domain(email):
    if not email or "@" not in email:
        return None
    return email.rsplit("@", 1)[1].lower()

def fetch_role(uid) -> Optional[str]:
    """Role source: the stored role for ``uid``, or None when no profile exists."""
    try:
        return get_profile_repo().get_role(uid)
    except sqlite3.Error as e:
        raise RoleFetchError(f"Profile store unavailable: {e}") from e

def _initial_role(email) -> Role:
    admin_email = get_setting("ADMIN_EMAIL")
    if admin_email and email and email.strip().lower() == admin_email.strip().lower():
        return Role.ADMIN
    return Role.USER

def ensure_profile(identity: Identity):
    """Make sure a profile row exists for a provider account. Existing roles are kept."""
    success, err = get_profile_repo().upsert_profile(
        identity.uid,
        identity.email or f"{identity.uid}@unknown.local",
        identity.display_name,
        _initial_role(identity.email).value,
        _now_iso(),
    )
    if not success and err == "integrity_error":
        raise UserAlreadyExistsError("A profile with this email already exists.")

def get_profile(uid):
    return get_profile_repo().get_profile(uid)

def list_profiles(role=None):
    parsed = Role.parse(role)
    return get_profile_repo().list_profiles(parsed.value if parsed else None)

def record_sign_in(identity: Identity):
    get_audit_repo().log_action(
        AuditAction.SIGN_IN_SUCCESS,
        target_type="session",
        actor_uid=identity.uid,
        metadata={"email_domain": email_domain(identity.email)},
    )

def record_sign_in_failure(email, reason):
    get_audit_repo().log_action(
        AuditAction.SIGN_IN_FAIL,
        target_type="session",
        metadata={"email_domain": email_domain(email), "reason": reason},
        result="fail",
    )

def record_sign_up(identity: Identity):
    get_audit_repo().log_action(
        AuditAction.SIGN_UP,
        target_type="profile",
        actor_uid=identity.uid,
        target_id=identity.uid,
        metadata={"email_domain": email_domain(identity.email)},
    )

def record_sign_out(identity: Optional[Identity], role=None):
    parsed = Role.parse(role)
    get_audit_repo().log_action(
        AuditAction.SIGN_OUT,
        target_type="session",
        actor_uid=identity.uid if identity else None,
        actor_role=parsed.value if parsed else None,
    )

def update_user_role(actor: Optional[Identity], actor_role, uid, new_role) -> bool:
    from use_cases import rbac_policy

    parsed = Role.parse(new_role)
    if parsed is None:
        raise ValueError(f"Unknown role: {new_role!r}")
    if not rbac_policy.enforce(actor, actor_role, rbac_policy.Feature.USER_MANAGEMENT):
        return False

    repo = get_profile_repo()
    old_role = repo.get_role(uid)
    updated = repo.update_role(uid, parsed.value, _now_iso())
    if updated:
        get_audit_repo().log_action(
            AuditAction.USER_ROLE_CHANGE,
            target_type="profile",
            actor_uid=actor.uid,
            actor_role=Role.parse(actor_role).value,
            target_id=uid,
            metadata={"old_role": old_role, "new_role": parsed.value},
        )
        log.info(f"Role of {uid} changed from {old_role} to {parsed.value} by {actor.uid}")
    return updated

def delete_profile(actor: Optional[Identity], actor_role, uid) -> bool:
    from use_cases import rbac_policy

    if not rbac_policy.enforce(actor, actor_role, rbac_policy.Feature.USER_MANAGEMENT):
        return False
    deleted = get_profile_repo().delete_profile(uid)
    if deleted:
        get_audit_repo().log_action(
            AuditAction.PROFILE_DELETE,
            target_type="profile",
            actor_uid=actor.uid,
            actor_role=Role.parse(actor_role).value,
            target_id=uid,
        )
    return deleted

def bootstrap_admin():
    """Promote the configured ADMIN_EMAIL profile. Accounts that sign up later get the role on creation."""
    admin_email = get_setting("ADMIN_EMAIL")
    if not admin_email:
        return False

    repo = get_profile_repo()
    profile = repo.get_profile_by_email(admin_email)
    if profile is None:
        log.info("ADMIN_EMAIL has no profile yet; it will be created as admin on first sign-in.")
        return False
    if Role.parse(profile["role"]) is Role.ADMIN:
        return True
    repo.update_role(profile["uid"], Role.ADMIN.value, _now_iso())
    get_audit_repo().log_action(
        AuditAction.USER_ROLE_CHANGE,
        target_type="profile",
        target_id=profile["uid"],
        metadata={"old_role": profile["role"], "new_role": Role.ADMIN.value, "reason": "bootstrap_admin"},
    )
    return True
