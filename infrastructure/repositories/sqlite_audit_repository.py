import sqlite3
import json
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime
import logging
from enum import Enum

from infrastructure.observability import mask_string

log = logging.getLogger(__name__)

class AuditAction(str, Enum):
    SIGN_IN_SUCCESS = "SIGN_IN_SUCCESS"
    SIGN_IN_FAIL = "SIGN_IN_FAIL"
    SIGN_OUT = "SIGN_OUT"
    SIGN_UP = "SIGN_UP"
    VERIFICATION_EMAIL_SENT = "VERIFICATION_EMAIL_SENT"
    PASSWORD_RESET_SENT = "PASSWORD_RESET_SENT"
    RBAC_DENIED = "RBAC_DENIED"
    ROUTE_DENIED = "ROUTE_DENIED"
    LANDING_REDIRECT = "LANDING_REDIRECT"
    ROLE_FETCH_FAILED = "ROLE_FETCH_FAILED"
    STALE_ROLE_DISCARDED = "STALE_ROLE_DISCARDED"
    USER_ROLE_CHANGE = "USER_ROLE_CHANGE"
    PROFILE_DELETE = "PROFILE_DELETE"
    SESSION_INIT_FAILED = "SESSION_INIT_FAILED"
    SYSTEM_ERROR = "SYSTEM_ERROR"

ALLOWED_METADATA_KEYS = {
    "reason", "new_role", "old_role", "error_message", "target_action",
    "role", "path", "target", "guard_state", "email_domain",
}
MAX_METADATA_CHARS = 2000
MAX_VALUE_CHARS = 500
# Values mentioning credentials are dropped rather than masked
_CREDENTIAL_WORDS = ("password", "token")

def _clip(value, size, default=None):
    if value is None or value == "":
        return default
    return str(value)[:size]

def _encode_metadata(metadata: Optional[Dict[str, Any]]) -> Optional[str]:
    if metadata is None:
        return None
    kept = {}
    for key, value in metadata.items():
        if key not in ALLOWED_METADATA_KEYS:
            continue
        if any(word in str(value).lower() for word in _CREDENTIAL_WORDS):
            continue
        if isinstance(value, str):
            value = mask_string(value)
            if len(value) > MAX_VALUE_CHARS:
                value = value[:MAX_VALUE_CHARS]
                kept["truncated"] = True
        kept[key] = value
    try:
        encoded = json.dumps(kept)
    except (TypeError, ValueError):
        return json.dumps({"error": "unserializable"})
    # Shorten string values until the record fits; the stored text is always valid JSON
    cap = MAX_VALUE_CHARS // 2
    while len(encoded) > MAX_METADATA_CHARS and cap > 0:
        kept = {k: v[:cap] if isinstance(v, str) else v for k, v in kept.items()}
        kept["truncated"] = True
        encoded = json.dumps(kept)
        cap //= 2
    return encoded

class SQLiteAuditRepository:
    """Append-only audit trail of sign-ins, role changes and routing decisions."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def init_audit_db(self):
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    ts TEXT NOT NULL,
                    actor_uid TEXT,
                    actor_role TEXT,
                    action TEXT NOT NULL,
                    target_type TEXT NOT NULL,
                    target_id TEXT,
                    metadata_json TEXT,
                    ip_address TEXT,
                    result TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_audit_ts ON audit_log (ts)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_audit_action ON audit_log (action)")
            conn.commit()

    def log_action(
        self,
        action: Any,
        target_type: str,
        actor_uid: Optional[str] = None,
        actor_role: Optional[str] = None,
        target_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        result: str = "success"
    ):
        """Record one action. Never raises: a broken audit store only costs the record."""
        try:
            row = (
                datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S"),
                _clip(actor_uid, 128),
                _clip(actor_role, 20),
                _clip(getattr(action, "value", action), 50, "UNKNOWN"),
                _clip(target_type, 50, "UNKNOWN"),
                _clip(target_id, 200),
                _encode_metadata(metadata),
                _clip(ip_address, 45),
                _clip(result, 20, "unknown"),
            )
            with self._conn() as conn:
                conn.execute(
                    "INSERT INTO audit_log (ts, actor_uid, actor_role, action, target_type, target_id, "
                    "metadata_json, ip_address, result) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    row,
                )
                conn.commit()
        except Exception as e:
            log.error(f"Audit write failed for {action}: {e}", exc_info=True)

    def get_logs(self, limit: int = 100, action_filter: Optional[str] = None, uid_filter: Optional[str] = None) -> List[Tuple]:
        """Newest records first. ``action_filter="All"`` means no action filter."""
        clauses, params = [], []
        if action_filter and action_filter != "All":
            clauses.append("action = ?")
            params.append(action_filter)
        if uid_filter:
            clauses.append("actor_uid LIKE ?")
            params.append(f"%{uid_filter}%")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = (
            "SELECT id, ts, COALESCE(actor_uid, 'SYSTEM'), actor_role, action, target_type, "
            f"target_id, metadata_json, ip_address, result FROM audit_log {where} "
            "ORDER BY id DESC LIMIT ?"
        )
        params.append(limit)
        try:
            with self._conn() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except sqlite3.Error as e:
            log.error(f"Could not read audit log: {e}", exc_info=True)
            return []
