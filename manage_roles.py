"""Operator script: list profiles or set a role without going through the UI.

    python manage_roles.py                      # list all profiles
    python manage_roles.py baker@example.com baker
"""

import os
import sys

import toml

import auth
from use_cases.session_models import Role

def load_settings(path=".streamlit/secrets.toml"):
    try:
        config = toml.load(path)
    except FileNotFoundError:
        print(f"No {path}, using environment variables")
        config = {}
    except toml.TomlDecodeError as e:
        print(f"Error reading secrets: {e}")
        config = {}
    return {
        "PROFILES_DB": config.get("PROFILES_DB") or os.getenv("PROFILES_DB", auth.PROFILES_DB),
        "AUDIT_DB": config.get("AUDIT_DB") or os.getenv("AUDIT_DB", auth.AUDIT_DB),
    }

def list_profiles():
    profiles = auth.list_profiles()
    if not profiles:
        print("No profiles yet.")
        return
    for uid, email, display_name, role, created_at in profiles:
        print(f"{role:<6} {email:<40} {display_name or '':<24} {uid}")

def set_role(email, role):
    parsed = Role.parse(role)
    if parsed is None:
        print(f"❌ Unknown role '{role}'. Use one of: {', '.join(r.value for r in Role)}")
        return False

    repo = auth.get_profile_repo()
    profile = repo.get_profile_by_email(email)
    if profile is None:
        print(f"❌ No profile for {email}. The account must sign in once first.")
        return False

    repo.update_role(profile["uid"], parsed.value, auth._now_iso())
    auth.get_audit_repo().log_action(
        auth.AuditAction.USER_ROLE_CHANGE,
        target_type="profile",
        target_id=profile["uid"],
        metadata={"old_role": profile["role"], "new_role": parsed.value, "reason": "operator_script"},
    )
    print(f"✅ {email}: {profile['role']} -> {parsed.value}")
    return True

def main(argv):
    settings = load_settings()
    auth.PROFILES_DB = settings["PROFILES_DB"]
    auth.AUDIT_DB = settings["AUDIT_DB"]
    auth.init_profile_db()
    auth.init_audit_db()

    if len(argv) == 0:
        list_profiles()
        return 0
    if len(argv) == 2:
        return 0 if set_role(argv[0], argv[1]) else 1
    print(__doc__)
    return 2

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
