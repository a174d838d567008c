"""Local conversation store.

Keeps conversation sessions, their messages and the student profile in a
local SQLite file. All data stays on the student's machine; sessions idle
for longer than SESSION_MAX_AGE_DAYS are removed by ``cleanup()``.
"""

import json
import secrets
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from code_tutor import config
from code_tutor.logger import logger
from code_tutor.types import ConversationMessage, Role


class ConversationStore:
    """SQLite-backed store for sessions, messages and student profiles."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.STORE_DB
        self._connection: Optional[sqlite3.Connection] = None

    # -- connection ----------------------------------------------------------

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection with WAL mode."""
        if self._connection is not None:
            return self._connection

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=10.0
        )
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA journal_mode=WAL")
        self._connection.execute("PRAGMA busy_timeout=5000")
        self._init_schema(self._connection)

        logger.info(f"Conversation store initialized: {self.db_path}")
        return self._connection

    @staticmethod
    def _init_schema(conn: sqlite3.Connection) -> None:
        """Create tables if they don't exist."""
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS sessions (
                session_id TEXT PRIMARY KEY,
                created_at INTEGER NOT NULL,
                last_updated_at INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp INTEGER NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_messages_session ON messages(session_id);
            CREATE INDEX IF NOT EXISTS idx_sessions_updated ON sessions(last_updated_at);

            CREATE TABLE IF NOT EXISTS profiles (
                student_id TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                learning_level TEXT NOT NULL,
                preferences TEXT NOT NULL,
                last_updated_at INTEGER NOT NULL
            );
        """)
        conn.commit()

    @contextmanager
    def _transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.debug("Conversation store connection closed")

    # -- sessions and messages -----------------------------------------------

    @staticmethod
    def new_session_id() -> str:
        return f"session-{int(time.time() * 1000)}-{secrets.token_hex(4)}"

    def save(self, session_id: str, message: ConversationMessage) -> None:
        """Append a message to a session, creating the session if needed."""
        now = int(time.time())
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO sessions (session_id, created_at, last_updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET last_updated_at = excluded.last_updated_at
                """,
                (session_id, now, now)
            )
            conn.execute(
                """
                INSERT INTO messages (session_id, role, content, timestamp)
                VALUES (?, ?, ?, ?)
                """,
                (session_id, message.role.value, message.content, message.timestamp)
            )

    def get_all(self, session_id: str) -> list[ConversationMessage]:
        """All messages of a session, oldest first."""
        rows = self._get_connection().execute(
            "SELECT role, content, timestamp FROM messages WHERE session_id = ? ORDER BY id",
            (session_id,)
        ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def get_recent(self, session_id: str, limit: int = 10) -> list[ConversationMessage]:
        """The last ``limit`` messages of a session, oldest first."""
        rows = self._get_connection().execute(
            """
            SELECT role, content, timestamp FROM (
                SELECT id, role, content, timestamp FROM messages
                WHERE session_id = ?
                ORDER BY id DESC
                LIMIT ?
            ) ORDER BY id
            """,
            (session_id, limit)
        ).fetchall()
        return [self._row_to_message(row) for row in rows]

    def clear(self, session_id: str) -> int:
        """Remove every message of a session but keep the session itself."""
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM messages WHERE session_id = ?", (session_id,))
            conn.execute(
                "UPDATE sessions SET last_updated_at = ? WHERE session_id = ?",
                (int(time.time()), session_id)
            )
            return cursor.rowcount

    def delete_session(self, session_id: str) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM messages WHERE session_id = ?", (session_id,))
            conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))

    def list_sessions(self) -> list[dict]:
        """Sessions with message counts, most recently updated first."""
        rows = self._get_connection().execute(
            """
            SELECT s.session_id, s.created_at, s.last_updated_at,
                   COUNT(m.id) AS message_count
            FROM sessions s
            LEFT JOIN messages m ON m.session_id = s.session_id
            GROUP BY s.session_id
            ORDER BY s.last_updated_at DESC
            """
        ).fetchall()
        return [dict(row) for row in rows]

    def cleanup(self, max_age_days: int = config.SESSION_MAX_AGE_DAYS) -> int:
        """Delete sessions not updated within ``max_age_days``.

        Returns:
            Number of sessions deleted
        """
        cutoff = int(time.time()) - (max_age_days * 86400)

        with self._transaction() as conn:
            conn.execute(
                """
                DELETE FROM messages WHERE session_id IN (
                    SELECT session_id FROM sessions WHERE last_updated_at < ?
                )
                """,
                (cutoff,)
            )
            cursor = conn.execute("DELETE FROM sessions WHERE last_updated_at < ?", (cutoff,))
            deleted = cursor.rowcount

        if deleted:
            logger.info(f"Conversation cleanup: {deleted} session(s) older than {max_age_days} days deleted")

        return deleted

    def export_all(self) -> str:
        """Every session with its messages as pretty-printed JSON."""
        sessions = []
        for session in self.list_sessions():
            sessions.append({
                "session_id": session["session_id"],
                "created_at": session["created_at"],
                "last_updated_at": session["last_updated_at"],
                "messages": [m.to_dict() for m in self.get_all(session["session_id"])],
            })
        return json.dumps(sessions, indent=2)

    def delete_all(self) -> None:
        """Remove all conversations and profiles."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM messages")
            conn.execute("DELETE FROM sessions")
            conn.execute("DELETE FROM profiles")
        logger.info("All conversation data deleted")

    # -- student profiles ----------------------------------------------------

    def load_profile(self, student_id: str) -> Optional[dict]:
        row = self._get_connection().execute(
            """
            SELECT session_id, learning_level, preferences, last_updated_at
            FROM profiles WHERE student_id = ?
            """,
            (student_id,)
        ).fetchone()
        if not row:
            return None

        profile = dict(row)
        profile["preferences"] = json.loads(profile["preferences"])
        return profile

    def save_profile(
        self,
        student_id: str,
        session_id: str,
        learning_level: str,
        preferences: dict,
        last_updated_at: int
    ) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO profiles
                    (student_id, session_id, learning_level, preferences, last_updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (student_id, session_id, learning_level, json.dumps(preferences), last_updated_at)
            )

    @staticmethod
    def _row_to_message(row: sqlite3.Row) -> ConversationMessage:
        return ConversationMessage(
            role=Role(row["role"]),
            content=row["content"],
            timestamp=row["timestamp"],
        )
