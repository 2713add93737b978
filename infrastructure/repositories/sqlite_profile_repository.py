import sqlite3
from typing import Optional

class SQLiteProfileRepository:
    """Storefront profiles keyed by identity-provider uid; owns the role of each account."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def _get_current_version(self, conn) -> int:
        row = conn.execute("SELECT version FROM schema_info").fetchone()
        if row:
            return row[0]
        return 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1)."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS profiles (
                uid TEXT PRIMARY KEY,
                email TEXT NOT NULL UNIQUE,
                display_name TEXT,
                role TEXT NOT NULL DEFAULT 'user',
                created_at TEXT NOT NULL
            )
        """)

    def _migrate_v2(self, conn):
        """Track role edits made from the admin portal."""
        cols = {c[1] for c in conn.execute("PRAGMA table_info(profiles)").fetchall()}
        if "updated_at" not in cols:
            conn.execute("ALTER TABLE profiles ADD COLUMN updated_at TEXT")
        conn.execute("CREATE INDEX IF NOT EXISTS idx_profiles_role ON profiles (role)")

    def init_profile_db(self):
        MIGRATIONS = [self._migrate_v1, self._migrate_v2]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)

            current_version = self._get_current_version(conn)
            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                except Exception as e:
                    # Leaving the 'with' block by exception rolls the whole upgrade back.
                    raise RuntimeError(f"Profile database migration to v{target_version} failed: {e}") from e

            conn.commit()

    def upsert_profile(self, uid: str, email: str, display_name: Optional[str], role: str, now_iso: str):
        """Create a profile or refresh its contact fields. An existing role is never overwritten here."""
        with self._conn() as conn:
            try:
                conn.execute("""
                    INSERT INTO profiles (uid, email, display_name, role, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(uid) DO UPDATE SET
                    email = excluded.email,
                    display_name = COALESCE(excluded.display_name, profiles.display_name),
                    updated_at = excluded.updated_at
                """, (uid, email, display_name, role, now_iso, now_iso))
                conn.commit()
                return True, None
            except sqlite3.IntegrityError:
                return False, "integrity_error"

    def get_profile(self, uid: str):
        with self._conn() as conn:
            row = conn.execute("""
                SELECT uid, email, display_name, role, created_at, updated_at
                FROM profiles WHERE uid = ?
            """, (uid,)).fetchone()
            if row:
                return {
                    "uid": row[0], "email": row[1], "display_name": row[2],
                    "role": row[3], "created_at": row[4], "updated_at": row[5],
                }
            return None

    def get_profile_by_email(self, email: str):
        with self._conn() as conn:
            row = conn.execute("SELECT uid FROM profiles WHERE lower(email) = lower(?)", (email,)).fetchone()
        return self.get_profile(row[0]) if row else None

    def get_role(self, uid: str) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute("SELECT role FROM profiles WHERE uid = ?", (uid,)).fetchone()
            return row[0] if row else None

    def list_profiles(self, role: Optional[str] = None):
        with self._conn() as conn:
            if role:
                return conn.execute(
                    "SELECT uid, email, display_name, role, created_at FROM profiles WHERE role = ? ORDER BY created_at DESC",
                    (role,),
                ).fetchall()
            return conn.execute(
                "SELECT uid, email, display_name, role, created_at FROM profiles ORDER BY created_at DESC"
            ).fetchall()

    def update_role(self, uid: str, role: str, now_iso: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("UPDATE profiles SET role = ?, updated_at = ? WHERE uid = ?", (role, now_iso, uid))
            conn.commit()
            return cur.rowcount > 0

    def delete_profile(self, uid: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM profiles WHERE uid = ?", (uid,))
            conn.commit()
            return cur.rowcount > 0
